"""Planning pipeline composing selection, planning, gating and building."""

from vtp.workflow.pipeline import PreparedJob, default_prefix, prepare_job

__all__ = ["PreparedJob", "default_prefix", "prepare_job"]
