"""Capability profile and gating of planned outputs."""

from vtp.capabilities.gate import (
    FPS_FILTER,
    SCALE_FILTER,
    can_process,
    can_process_section,
    filter_processable,
)
from vtp.capabilities.models import CapabilityProfileModel, load_profile
from vtp.capabilities.profile import CapabilityProfile

__all__ = [
    "CapabilityProfile",
    "CapabilityProfileModel",
    "load_profile",
    "FPS_FILTER",
    "SCALE_FILTER",
    "can_process",
    "can_process_section",
    "filter_processable",
]
