"""Pydantic model for the ``[capabilities]`` configuration table."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from vtp.capabilities.profile import CapabilityProfile
from vtp.exceptions import ValidationError

_TRACK_TYPES = frozenset({"video", "audio", "subtitle"})


class CapabilityProfileModel(BaseModel):
    """Validated capability profile configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    encoders: dict[str, str] = Field(default_factory=dict)
    decoders: dict[str, dict[str, str]] | None = None
    filters: dict[str, str] | None = None
    codec_blacklist: list[str] = Field(default_factory=list)
    hw_decoder: str | None = None
    max_instances: int | None = Field(default=None, gt=0)

    @field_validator("decoders")
    @classmethod
    def validate_decoder_types(
        cls, v: dict[str, dict[str, str]] | None
    ) -> dict[str, dict[str, str]] | None:
        """Decoder maps are keyed by track type."""
        if v is not None:
            unknown = set(v) - _TRACK_TYPES
            if unknown:
                raise ValueError(
                    f"Unknown decoder track types: {', '.join(sorted(unknown))}. "
                    f"Must be one of: {', '.join(sorted(_TRACK_TYPES))}"
                )
        return v

    def to_profile(self) -> CapabilityProfile:
        return CapabilityProfile.create(
            encoders=self.encoders,
            decoders=self.decoders,
            filters=self.filters,
            codec_blacklist=self.codec_blacklist,
            hw_decoder=self.hw_decoder,
            max_instances=self.max_instances,
        )


def load_profile(data: dict[str, Any]) -> CapabilityProfile:
    """Validate a capabilities mapping and build the profile.

    Raises:
        ValidationError: If the mapping is invalid.
    """
    try:
        model = CapabilityProfileModel.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors()
        loc = ".".join(str(x) for x in errors[0].get("loc", [])) if errors else ""
        msg = errors[0].get("msg", str(e)) if errors else str(e)
        raise ValidationError(
            f"Invalid capabilities: {loc + ': ' if loc else ''}{msg}",
            field="capabilities",
        ) from e
    return model.to_profile()
