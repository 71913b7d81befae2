"""Job plan construction.

Turns the accepted planned outputs of one source file into a single
multi-output ffmpeg job: a filter graph that scales the (optionally
subtitle-composited) main video once per output, stream mappings and
per-output codec options, plus an optional thumbnail branch and optional
standalone subtitle outputs.

Building is pure: no directory is created and no process is started.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from vtp.capabilities.gate import FPS_FILTER, SCALE_FILTER
from vtp.capabilities.profile import CapabilityProfile
from vtp.core.codecs import is_bitmap_subtitle, to_kilobits
from vtp.domain.models import MediaDescriptor, SelectedTracks, TrackInfo
from vtp.exceptions import ValidationError
from vtp.executor.types import (
    AVOutputSpec,
    JobPlan,
    SubtitleOutputSpec,
    ThumbnailBranch,
)
from vtp.language import UNDEFINED_LANGUAGE, lookup
from vtp.presets.types import (
    PlannedOutput,
    PlannedSubtitle,
    PlannedThumbnails,
)

logger = logging.getLogger(__name__)

OVERLAY_FILTER = "overlay"
SPLIT_FILTER = "split"

MAIN_LABEL = "vmain"
THUMBS_LABEL = "thumbs"
THUMBS_DIRECTORY = "thumbs"
THUMBS_PATTERN = "snap.%03d"
NO_NAME_LABEL = "No Name"

# ffmpeg VBV buffer relative to the max rate
BUFSIZE_FACTOR = 4


@dataclass
class _InputOptions:
    """Collects decoder options for the single input, without duplicates."""

    profile: CapabilityProfile
    options: list[str] = field(default_factory=list)
    _video_decoder: str | None = None

    def require_decodable(self, track: TrackInfo) -> None:
        if not self.profile.can_decode(track.codec, track.track_type):
            raise ValidationError(
                f"No decoder for {track.track_type} track #{track.index} "
                f"({track.codec})",
                field="decoders",
            )

    def use_video_track(self, track: TrackInfo) -> None:
        self.require_decodable(track)
        decoder = self.profile.decoder_for(track.codec, track.track_type)
        if decoder is None or self._video_decoder is not None:
            return
        self._video_decoder = decoder
        self.options.extend(["-c:v", decoder])
        if self.profile.hw_decoder:
            self.options.extend(["-hwaccel", self.profile.hw_decoder])


def _filter_name(profile: CapabilityProfile, name: str) -> str:
    """Resolve a filter alias the gate requires.

    Raises:
        ValidationError: If the profile does not support the filter.
    """
    if not profile.can_filter(name):
        raise ValidationError(f"Filter {name} is not supported", field="filters")
    return profile.filter_alias(name)


def _structural_filter(profile: CapabilityProfile, name: str) -> str:
    """Resolve split/overlay: an alias if configured, else the plain name."""
    if profile.filters is not None and name in profile.filters:
        return profile.filter_alias(name)
    return name


def _av_output_path(output_dir: Path, prefix: str, output: PlannedOutput) -> Path:
    suffix = f".{output.extension}" if output.extension else ""
    return output_dir / f"{prefix}.{output.name}{suffix}"


def _subtitle_metadata(track: TrackInfo) -> dict:
    """Derive label and language codes for a standalone subtitle."""
    code = None
    if track.language and track.language != UNDEFINED_LANGUAGE:
        code = track.language
    info = lookup(code) if code else None
    return {
        "label": track.title or (info.name if info else None) or NO_NAME_LABEL,
        "language": code,
        "language_639_1": info.two_letter if info else None,
        "language_name": info.name if info else None,
        "is_default": track.is_default,
        "is_forced": track.is_forced,
    }


def _video_options(output: PlannedOutput, profile: CapabilityProfile) -> list[str]:
    video = output.video
    options: list[str] = []
    if video.codec:
        options.extend(["-c:v", profile.get_encoder(video.codec) or video.codec])
    options.extend(
        [
            "-b:v",
            to_kilobits(video.bitrate),
            "-maxrate",
            to_kilobits(video.max_bitrate),
            "-bufsize",
            to_kilobits(video.max_bitrate * BUFSIZE_FACTOR),
        ]
    )
    if video.preset:
        options.extend(["-preset", video.preset])
    return options


def _audio_mapping(
    output: PlannedOutput, profile: CapabilityProfile, inputs: _InputOptions
) -> tuple[list[str], list[str], list[TrackInfo]]:
    audio = output.audio
    maps: list[str] = []
    tracks: list[TrackInfo] = []
    for track in audio.tracks:
        if profile.is_blacklisted(track.codec):
            logger.debug("Skipping blacklisted audio track #%d", track.index)
            continue
        inputs.require_decodable(track)
        maps.append(f"0:{track.index}")
        tracks.append(track)
    if not maps:
        return [], [], []

    options: list[str] = []
    if audio.codec:
        options.extend(["-c:a", profile.get_encoder(audio.codec) or audio.codec])
    options.extend(["-b:a", to_kilobits(audio.bitrate)])
    if audio.channels:
        options.extend(["-ac", str(audio.channels)])
    return maps, options, tracks


def _subtitle_mapping(
    subtitle: PlannedSubtitle,
    selected: SelectedTracks,
    profile: CapabilityProfile,
    inputs: _InputOptions,
) -> tuple[list[str], list[str], list[TrackInfo]]:
    maps: list[str] = []
    tracks: list[TrackInfo] = []
    for track in subtitle.tracks:
        if is_bitmap_subtitle(track.codec) or profile.is_blacklisted(track.codec):
            continue
        inputs.require_decodable(track)
        maps.append(f"0:{track.index}")
        tracks.append(track)
    if not maps:
        return [], [], []

    options: list[str] = []
    if subtitle.codec:
        options.extend(
            ["-c:s", profile.get_encoder(subtitle.codec) or subtitle.codec]
        )
    selected_index = selected.subtitle.index if selected.subtitle else None
    for position, track in enumerate(tracks):
        flag = "default" if track.index == selected_index else "0"
        options.extend([f"-disposition:s:{position}", flag])
    return maps, options, tracks


def _burn_in_subtitle(
    selected: SelectedTracks, profile: CapabilityProfile
) -> TrackInfo | None:
    """Return the selected subtitle when it must be overlaid on the video."""
    subtitle = selected.subtitle
    if subtitle is None or not is_bitmap_subtitle(subtitle.codec):
        return None
    if profile.is_blacklisted(subtitle.codec):
        return None
    if not profile.can_decode(subtitle.codec, subtitle.track_type):
        logger.warning(
            "Cannot decode bitmap subtitle #%d (%s), not burning it in",
            subtitle.index,
            subtitle.codec,
        )
        return None
    return subtitle


def _thumbnail_branch(
    thumbnails: PlannedThumbnails,
    source_label: str,
    output_dir: Path,
    prefix: str,
    profile: CapabilityProfile,
) -> tuple[str, ThumbnailBranch]:
    directory = output_dir / THUMBS_DIRECTORY
    escaped = str(directory).replace("%", "%%")
    pattern = f"{escaped}/{THUMBS_PATTERN}.{thumbnails.extension}"
    entry = (
        f"{source_label}"
        f"{_filter_name(profile, FPS_FILTER)}={thumbnails.delay},"
        f"{_filter_name(profile, SCALE_FILTER)}="
        f"{thumbnails.width or -1}:{thumbnails.height or -1}"
        f"[{THUMBS_LABEL}]"
    )
    options: list[str] = []
    if thumbnails.codec:
        options.extend(
            ["-c:v", profile.get_encoder(thumbnails.codec) or thumbnails.codec]
        )
    branch = ThumbnailBranch(
        track=thumbnails.track,
        directory=directory,
        pattern=pattern,
        format=thumbnails.format,
        maps=(f"[{THUMBS_LABEL}]",),
        options=tuple(options),
        delay=thumbnails.delay,
        columns=thumbnails.columns,
        sheet_path=output_dir / f"{prefix}.thumbs.{thumbnails.extension}",
    )
    return entry, branch


def _extraction_outputs(
    subtitle: PlannedSubtitle,
    output_dir: Path,
    prefix: str,
    profile: CapabilityProfile,
    inputs: _InputOptions,
) -> list[SubtitleOutputSpec]:
    specs: list[SubtitleOutputSpec] = []
    for track in subtitle.tracks:
        if is_bitmap_subtitle(track.codec) or profile.is_blacklisted(track.codec):
            continue
        inputs.require_decodable(track)
        options: list[str] = []
        if subtitle.codec:
            options.extend(
                ["-c:s", profile.get_encoder(subtitle.codec) or subtitle.codec]
            )
        options.extend(["-an", "-vn"])
        specs.append(
            SubtitleOutputSpec(
                track=track,
                path=output_dir / f"{prefix}.{track.index}.{subtitle.extension}",
                format=subtitle.format,
                maps=(f"0:{track.index}",),
                options=tuple(options),
                **_subtitle_metadata(track),
            )
        )
    return specs


def _max_frames(tracks: Sequence[TrackInfo]) -> int:
    return max((t.frame_count or 0 for t in tracks), default=0)


def build_job_plan(
    descriptor: MediaDescriptor,
    selected: SelectedTracks,
    outputs: Sequence[PlannedOutput],
    profile: CapabilityProfile,
    output_dir: Path,
    prefix: str,
    thumbnails: PlannedThumbnails | None = None,
    subtitle_extraction: PlannedSubtitle | None = None,
) -> JobPlan:
    """Build a multi-output job plan.

    Outputs are ordered by descending combined bitrate. When the selected
    subtitle is a bitmap format it is overlaid on the main video before any
    scaling; a single ``split`` fans the main video out when several
    branches read it.

    Args:
        descriptor: The source media.
        selected: Selected tracks (the selection the outputs were planned
            from).
        outputs: Planned outputs that passed the capability gate.
        profile: Capability profile of the execution environment.
        output_dir: Directory receiving every produced file.
        prefix: File name prefix for produced files.
        thumbnails: Optional thumbnail sprite sheet request.
        subtitle_extraction: Optional standalone subtitle extraction.

    Returns:
        The job plan.

    Raises:
        ValidationError: If a referenced track cannot be decoded, a required
            filter is missing, thumbnails are requested without a selected
            video, or nothing would be written.
    """
    if thumbnails is not None and selected.video is None:
        raise ValidationError(
            "Thumbnails require a selected video track", field="thumbnails"
        )

    ordered = sorted(outputs, key=lambda o: o.combined_bitrate, reverse=True)
    inputs = _InputOptions(profile)

    # Branches reading the main video: video outputs, then thumbnails
    video_outputs = [
        o
        for o in ordered
        if o.video is not None and not profile.is_blacklisted(o.video.track.codec)
    ]
    video_ids = {id(o) for o in video_outputs}
    consumers = len(video_outputs) + (1 if thumbnails is not None else 0)

    filter_graph: list[str] = []
    source_labels: list[str] = []
    all_tracks: list[TrackInfo] = []
    if consumers:
        video_track = selected.video or video_outputs[0].video.track
        inputs.use_video_track(video_track)
        main_label = f"[0:{video_track.index}]"

        burn_in = _burn_in_subtitle(selected, profile)
        if burn_in is not None:
            overlay = _structural_filter(profile, OVERLAY_FILTER)
            filter_graph.append(
                f"{main_label}[0:{burn_in.index}]{overlay}[{MAIN_LABEL}]"
            )
            main_label = f"[{MAIN_LABEL}]"
            all_tracks.append(burn_in)

        if consumers > 1:
            split = _structural_filter(profile, SPLIT_FILTER)
            source_labels = [f"[{MAIN_LABEL}{i}]" for i in range(consumers)]
            filter_graph.append(
                f"{main_label}{split}={consumers}{''.join(source_labels)}"
            )
        else:
            source_labels = [main_label]

    av_outputs: list[AVOutputSpec] = []
    video_position = 0
    for output in ordered:
        maps: list[str] = []
        options: list[str] = []
        tracks: list[TrackInfo] = []
        resolution = None
        duration = None

        if id(output) in video_ids:
            video = output.video
            label = f"[v{video_position}]"
            filter_graph.append(
                f"{source_labels[video_position]}"
                f"{_filter_name(profile, SCALE_FILTER)}="
                f"{video.width}:{video.height}{label}"
            )
            video_position += 1
            maps.append(label)
            options.extend(_video_options(output, profile))
            tracks.append(video.track)
            resolution = (video.width, video.height)
            duration = video.track.duration_seconds

        if output.audio is not None:
            a_maps, a_options, a_tracks = _audio_mapping(output, profile, inputs)
            maps.extend(a_maps)
            options.extend(a_options)
            tracks.extend(a_tracks)

        if output.subtitle is not None and not output.subtitle.is_extraction:
            s_maps, s_options, s_tracks = _subtitle_mapping(
                output.subtitle, selected, profile, inputs
            )
            maps.extend(s_maps)
            options.extend(s_options)
            tracks.extend(s_tracks)

        if resolution is None and not any(t.track_type == "audio" for t in tracks):
            logger.info(
                "Output %s has no audio or video to write, skipping", output.name
            )
            continue

        all_tracks.extend(tracks)
        av_outputs.append(
            AVOutputSpec(
                name=output.name,
                path=_av_output_path(output_dir, prefix, output),
                format=output.format,
                maps=tuple(maps),
                options=tuple(options),
                bitrate=output.combined_bitrate,
                resolution=resolution,
                duration=duration,
                tracks=tuple(tracks),
            )
        )

    branch = None
    if thumbnails is not None:
        entry, branch = _thumbnail_branch(
            thumbnails, source_labels[-1], output_dir, prefix, profile
        )
        filter_graph.append(entry)
        all_tracks.append(thumbnails.track)

    subtitle_outputs: list[SubtitleOutputSpec] = []
    if subtitle_extraction is not None:
        subtitle_outputs = _extraction_outputs(
            subtitle_extraction, output_dir, prefix, profile, inputs
        )
        all_tracks.extend(s.track for s in subtitle_outputs)

    if not av_outputs and not subtitle_outputs and branch is None:
        raise ValidationError(
            f"Job for {descriptor.path} would not produce any output",
            field="outputs",
        )

    plan = JobPlan(
        input_path=descriptor.path,
        output_dir=output_dir,
        prefix=prefix,
        input_options=tuple(inputs.options),
        filter_graph=tuple(filter_graph),
        av_outputs=tuple(av_outputs),
        subtitle_outputs=tuple(subtitle_outputs),
        thumbnails=branch,
        total_frames=_max_frames(all_tracks),
    )
    logger.debug(
        "Built job plan for %s",
        descriptor.path,
        extra={
            "av_outputs": len(plan.av_outputs),
            "subtitle_outputs": len(plan.subtitle_outputs),
            "thumbnails": plan.thumbnails is not None,
            "total_frames": plan.total_frames,
        },
    )
    return plan
