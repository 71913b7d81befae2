"""Preset file loading and validation.

This module provides functions to load YAML preset files and validate
them using Pydantic models.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from vtp.exceptions import ValidationError
from vtp.presets.models import (
    AudioSectionModel,
    ExtractionSectionModel,
    PresetModel,
    PresetSetModel,
    SubtitleSectionModel,
    ThumbnailSectionModel,
    VideoSectionModel,
)
from vtp.presets.types import (
    AudioConstraints,
    PresetSet,
    PresetSpec,
    SubtitleConstraints,
    ThumbnailConstraints,
    VideoConstraints,
)


def load_presets(preset_path: Path) -> PresetSet:
    """Load and validate presets from a YAML file.

    Args:
        preset_path: Path to the YAML preset file.

    Returns:
        Validated PresetSet.

    Raises:
        ValidationError: If the preset file is invalid.
        FileNotFoundError: If the preset file does not exist.
    """
    if not preset_path.exists():
        raise FileNotFoundError(f"Preset file not found: {preset_path}")

    try:
        with open(preset_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise ValidationError("Preset file is empty")

    if not isinstance(data, dict):
        raise ValidationError("Preset file must be a YAML mapping")

    return load_presets_from_dict(data)


def load_presets_from_dict(data: dict[str, Any]) -> PresetSet:
    """Load and validate presets from a dictionary.

    Raises:
        ValidationError: If the preset data is invalid.
    """
    try:
        model = PresetSetModel.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_format_validation_error(e)) from e

    return PresetSet(
        presets=tuple(_convert_preset(p) for p in model.presets),
        thumbnails=_convert_thumbnails(model.thumbnails),
        subtitles=_convert_subtitle(model.subtitles),
    )


def _format_validation_error(error: PydanticValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Preset validation failed: {loc}: {msg}"
        return f"Preset validation failed: {msg}"
    return f"Preset validation failed: {error}"


def _convert_video(model: VideoSectionModel | None) -> VideoConstraints | None:
    if model is None:
        return None
    return VideoConstraints(
        width=model.width,
        height=model.height,
        bitrate=model.bitrate,
        max_bitrate=model.max_bitrate,
        codec=model.codec,
        preset=model.preset,
    )


def _convert_audio(model: AudioSectionModel | None) -> AudioConstraints | None:
    if model is None:
        return None
    return AudioConstraints(
        bitrate=model.bitrate, channels=model.channels, codec=model.codec
    )


def _convert_subtitle(
    model: SubtitleSectionModel | ExtractionSectionModel | None,
) -> SubtitleConstraints | None:
    if model is None:
        return None
    return SubtitleConstraints(
        codec=model.codec, format=model.format, extension=model.extension
    )


def _convert_thumbnails(
    model: ThumbnailSectionModel | None,
) -> ThumbnailConstraints | None:
    if model is None:
        return None
    return ThumbnailConstraints(
        delay=model.delay,
        width=model.width,
        height=model.height,
        columns=model.columns,
        codec=model.codec,
        format=model.format,
        extension=model.extension,
    )


def _convert_preset(model: PresetModel) -> PresetSpec:
    return PresetSpec(
        name=model.name,
        format=model.format,
        extension=model.extension,
        is_default=model.is_default,
        video=_convert_video(model.video),
        audio=_convert_audio(model.audio),
        subtitle=_convert_subtitle(model.subtitle),
        thumbnails=_convert_thumbnails(model.thumbnails),
    )
