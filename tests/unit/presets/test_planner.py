"""Tests for per-preset encode parameter derivation."""

import pytest

from vtp.domain.models import SelectedTracks
from vtp.exceptions import ValidationError
from vtp.presets import (
    derive_dimensions,
    effective_bitrate,
    find_default_preset,
    plan_outputs,
    plan_subtitle_extraction,
    plan_thumbnails,
)
from vtp.presets.types import (
    SubtitleConstraints,
    ThumbnailConstraints,
    VideoConstraints,
)

from factories import audio_track, make_preset, subtitle_track, video_track


def _selected(video=None, audio=None, subtitle=None) -> SelectedTracks:
    return SelectedTracks(
        audio=audio or audio_track(1, "eng", bitrate=192_000),
        video=video,
        subtitle=subtitle,
    )


class TestEffectiveBitrate:
    """Tests for effective_bitrate."""

    @pytest.mark.parametrize("source", [None, "N/A", 0, -5, "garbage", float("nan")])
    def test_unusable_source_uses_declared(self, source):
        assert effective_bitrate(source, 2_500_000) == 2_500_000

    def test_lower_source_is_kept(self):
        assert effective_bitrate(1_200_000, 2_500_000) == 1_200_000

    def test_numeric_string_source(self):
        assert effective_bitrate("96000", 128_000) == 96_000

    def test_equal_or_higher_source_is_capped(self):
        assert effective_bitrate(2_500_000, 2_500_000) == 2_500_000
        assert effective_bitrate(8_000_000, 2_500_000) == 2_500_000


class TestFindDefaultPreset:
    """Tests for find_default_preset."""

    def test_single_default(self):
        presets = [make_preset("1080p", 1080), make_preset("720p", is_default=True)]
        assert find_default_preset(presets).name == "720p"

    def test_no_default(self):
        with pytest.raises(ValidationError, match="No default preset"):
            find_default_preset([make_preset("720p")])

    def test_several_defaults(self):
        presets = [
            make_preset("1080p", 1080, is_default=True),
            make_preset("720p", is_default=True),
        ]
        with pytest.raises(ValidationError, match="found 2: 1080p, 720p"):
            find_default_preset(presets)


class TestDeriveDimensions:
    """Tests for derive_dimensions."""

    def test_height_fits(self):
        constraints = VideoConstraints(width=1280, height=720, bitrate=1)
        assert derive_dimensions(video_track(0, 1920, 1080), constraints) == (1280, 720)

    def test_wide_source_keeps_aspect_ratio(self):
        constraints = VideoConstraints(width=1280, height=720, bitrate=1)
        assert derive_dimensions(video_track(0, 1920, 800), constraints) == (1728, 720)

    def test_width_fits_when_height_does_not(self):
        constraints = VideoConstraints(width=1920, height=1080, bitrate=1)
        assert derive_dimensions(video_track(0, 1920, 800), constraints) == (1920, 800)

    def test_derived_width_is_even(self):
        source = video_track(0, 1000, 562)
        constraints = VideoConstraints(width=640, height=360, bitrate=1)

        width, height = derive_dimensions(source, constraints)

        assert height == 360
        assert width % 2 == 0
        assert abs(width - round(1000 * 360 / 562)) <= 1

    def test_source_too_small(self):
        constraints = VideoConstraints(width=1280, height=720, bitrate=1)
        assert derive_dimensions(video_track(0, 720, 480), constraints) is None

    def test_unknown_dimensions(self):
        constraints = VideoConstraints(width=1280, height=720, bitrate=1)
        assert derive_dimensions(video_track(0, None, None), constraints) is None


class TestPlanOutputs:
    """Tests for plan_outputs."""

    def test_eligible_presets_in_declared_order(self):
        presets = [
            make_preset("1080p", 1080, bitrate=5_000_000),
            make_preset("720p", 720, is_default=True),
            make_preset("2160p", 2160),
        ]
        source = video_track(0, 1920, 1080, bitrate=8_000_000)

        outputs = plan_outputs(_selected(video=source), presets, presets[1])

        assert [o.name for o in outputs] == ["1080p", "720p"]
        assert outputs[0].video.bitrate == 5_000_000
        assert (outputs[1].video.width, outputs[1].video.height) == (1280, 720)
        assert outputs[1].audio.bitrate == 128_000
        assert not any(o.is_fallback for o in outputs)

    def test_low_bitrate_source_not_inflated(self):
        preset = make_preset("720p", is_default=True)
        source = video_track(0, 1920, 1080, bitrate=1_000_000)
        audio = audio_track(1, "eng", bitrate=96_000)

        (output,) = plan_outputs(_selected(video=source, audio=audio), [preset], preset)

        assert output.video.bitrate == 1_000_000
        assert output.video.max_bitrate == 2_500_000
        assert output.audio.bitrate == 96_000

    def test_small_source_falls_back_to_default(self):
        presets = [
            make_preset("1080p", 1080),
            make_preset("720p", 720, width=1280, is_default=True),
        ]
        source = video_track(0, 720, 480, codec="mpeg2video")

        outputs = plan_outputs(_selected(video=source), presets, presets[1])

        assert len(outputs) == 1
        fallback = outputs[0]
        assert fallback.name == "720p"
        assert fallback.is_fallback is True
        assert (fallback.video.width, fallback.video.height) == (720, 480)

    def test_fallback_with_unknown_dimensions(self):
        preset = make_preset("720p", is_default=True)
        with pytest.raises(ValidationError, match="dimensions are unknown"):
            plan_outputs(_selected(video=video_track(0, None, None)), [preset], preset)

    def test_audio_only_selection_drops_video_section(self):
        preset = make_preset("720p", is_default=True)
        (output,) = plan_outputs(_selected(), [preset], preset)
        assert output.video is None
        assert output.audio is not None

    def test_subtitle_section_takes_text_tracks_only(self):
        preset = make_preset(
            "720p", is_default=True, subtitle=SubtitleConstraints(codec="mov_text")
        )
        subtitles = [
            subtitle_track(2, "eng", codec="hdmv_pgs_subtitle"),
            subtitle_track(3, "fre"),
        ]

        (output,) = plan_outputs(
            _selected(video=video_track(0)), [preset], preset, subtitle_tracks=subtitles
        )

        assert [t.index for t in output.subtitle.tracks] == [3]
        assert output.subtitle.is_extraction is False

    def test_subtitle_section_without_text_tracks(self):
        preset = make_preset(
            "720p", is_default=True, subtitle=SubtitleConstraints(codec="mov_text")
        )
        (output,) = plan_outputs(
            _selected(video=video_track(0)),
            [preset],
            preset,
            subtitle_tracks=[subtitle_track(2, codec="dvd_subtitle")],
        )
        assert output.subtitle is None

    def test_thumbnails_need_video(self, caplog):
        preset = make_preset(
            "audio", height=None, is_default=True, thumbnails=ThumbnailConstraints(delay=5)
        )
        (output,) = plan_outputs(_selected(), [preset], preset)
        assert output.thumbnails is None
        assert "requests thumbnails" in caplog.text


class TestPlanThumbnails:
    """Tests for plan_thumbnails."""

    def test_uses_selected_video(self):
        source = video_track(0)
        planned = plan_thumbnails(
            _selected(video=source), ThumbnailConstraints(delay=10, width=160, columns=4)
        )
        assert planned.track == source
        assert planned.columns == 4
        assert planned.extension == "jpg"

    def test_without_video(self):
        with pytest.raises(ValidationError, match="selected video track"):
            plan_thumbnails(_selected(), ThumbnailConstraints(delay=10))


class TestPlanSubtitleExtraction:
    """Tests for plan_subtitle_extraction."""

    def test_extracts_every_text_track(self):
        constraints = SubtitleConstraints(codec="webvtt", format="webvtt", extension="vtt")
        tracks = [subtitle_track(3, "eng"), subtitle_track(4, "rus", codec="ass")]

        planned = plan_subtitle_extraction(tracks, constraints)

        assert [t.index for t in planned.tracks] == [3, 4]
        assert planned.is_extraction

    def test_requires_format_and_extension(self):
        with pytest.raises(ValidationError, match="requires a format"):
            plan_subtitle_extraction([subtitle_track(3)], SubtitleConstraints(codec="srt"))
