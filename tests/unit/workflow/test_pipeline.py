"""Tests for the planning pipeline."""

from pathlib import Path

import pytest
from conftest import load_ffprobe_fixture

from vtp.capabilities import CapabilityProfile
from vtp.config.models import DEFAULT_ENCODERS
from vtp.exceptions import ValidationError
from vtp.introspector import parse_ffprobe_output
from vtp.presets import load_presets_from_dict
from vtp.presets.types import PresetSet, SubtitleConstraints, ThumbnailConstraints
from vtp.workflow import default_prefix, prepare_job

from factories import audio_track, make_preset, make_result, subtitle_track, video_track

OUT = Path("/out")
PROFILE = CapabilityProfile.create(encoders=DEFAULT_ENCODERS)
PRESETS = (
    make_preset("1080p", 1080, bitrate=5_000_000),
    make_preset("720p", 720, is_default=True),
)
EXTRACTION = SubtitleConstraints(codec="webvtt", format="webvtt", extension="vtt")


def _fixture(name: str, path: str = "/media/movie.mkv"):
    return parse_ffprobe_output(Path(path), load_ffprobe_fixture(name))


class TestDefaultPrefix:
    """Tests for default_prefix."""

    def test_plain_name(self):
        assert default_prefix(Path("/media/movie.mkv")) == "movie"

    def test_unsafe_characters(self):
        assert default_prefix(Path("/media/My Movie (2020).mkv")) == "My_Movie_2020"

    def test_nothing_left(self):
        assert default_prefix(Path("/media/....mkv")) == "output"


class TestPrepareJob:
    """Tests for prepare_job."""

    def test_multi_language_source(self):
        presets = PresetSet(
            presets=PRESETS,
            thumbnails=ThumbnailConstraints(delay=0.1, width=160),
            subtitles=EXTRACTION,
        )

        prepared = prepare_job(_fixture("multi_language"), presets, PROFILE, OUT)

        assert prepared.selected.audio.index == 2
        assert prepared.selected.subtitle.index == 3
        assert [o.name for o in prepared.accepted] == ["1080p", "720p"]
        assert prepared.rejected == ()

        plan = prepared.plan
        assert [o.path for o in plan.av_outputs] == [
            OUT / "movie.1080p.mp4",
            OUT / "movie.720p.mp4",
        ]
        assert [s.path.name for s in plan.subtitle_outputs] == [
            "movie.3.vtt",
            "movie.4.vtt",
            "movie.5.vtt",
        ]
        assert plan.thumbnails.sheet_path == OUT / "movie.thumbs.jpg"
        assert plan.filter_graph[0] == "[0:0]split=3[vmain0][vmain1][vmain2]"
        assert plan.total_frames == 2880

    def test_russian_preference(self):
        presets = PresetSet(presets=PRESETS)
        prepared = prepare_job(
            _fixture("multi_language"), presets, PROFILE, OUT, preferred_language="^ru"
        )
        assert prepared.selected.audio.index == 1
        assert prepared.selected.subtitle is None
        assert prepared.plan.subtitle_outputs == ()
        assert prepared.plan.thumbnails is None

    def test_small_source_uses_fallback(self):
        presets = PresetSet(
            presets=(
                make_preset("1080p", 1080),
                make_preset("720p", 720, width=1280, is_default=True),
            )
        )

        prepared = prepare_job(_fixture("sd_source", "/media/dvd.mpg"), presets, PROFILE, OUT)

        (output,) = prepared.accepted
        assert output.is_fallback
        assert prepared.plan.av_outputs[0].resolution == (720, 480)
        assert prepared.plan.av_outputs[0].path == OUT / "dvd.720p.mp4"
        assert prepared.plan.total_frames == 0

    def test_bitmap_subtitles_are_not_extracted(self):
        presets = PresetSet(presets=PRESETS, subtitles=EXTRACTION)
        prepared = prepare_job(
            _fixture("bitmap_subtitles"), presets, PROFILE, OUT, prefix="episode"
        )
        assert [s.path.name for s in prepared.plan.subtitle_outputs] == ["episode.3.vtt"]

    def test_selected_bitmap_subtitle_is_burnt_in(self):
        result = make_result(
            [
                video_track(0, frame_count=100),
                audio_track(1, "jpn"),
                subtitle_track(2, "eng", codec="hdmv_pgs_subtitle", frame_count=700),
            ]
        )
        prepared = prepare_job(result, PresetSet(presets=PRESETS), PROFILE, OUT)

        assert prepared.selected.subtitle.index == 2
        assert prepared.plan.filter_graph[0] == "[0:0][0:2]overlay[vmain]"
        assert prepared.plan.total_frames == 700

    def test_preset_thumbnails_and_extraction(self):
        preset = make_preset(
            "720p",
            is_default=True,
            subtitle=EXTRACTION,
            thumbnails=ThumbnailConstraints(delay=1, columns=3),
        )
        prepared = prepare_job(
            _fixture("multi_language"), PresetSet(presets=(preset,)), PROFILE, OUT
        )

        assert prepared.thumbnails.columns == 3
        assert len(prepared.plan.subtitle_outputs) == 3
        # Extracted subtitles are not muxed into the AV output
        assert prepared.plan.av_outputs[0].maps == ("[v0]", "0:2")

    def test_unsupported_outputs_are_rejected(self):
        presets = PresetSet(
            presets=(
                make_preset("hevc", 1080, video_codec="hevc"),
                make_preset("720p", 720, is_default=True),
            )
        )
        profile = CapabilityProfile.create(encoders={"h264": "libx264", "aac": "aac"})

        prepared = prepare_job(_fixture("multi_language"), presets, profile, OUT)

        assert [o.name for o in prepared.accepted] == ["720p"]
        assert [o.name for o in prepared.rejected] == ["hevc"]

    def test_nothing_supported(self):
        profile = CapabilityProfile.create(encoders={})
        with pytest.raises(ValidationError, match="None of the planned outputs"):
            prepare_job(_fixture("multi_language"), PresetSet(presets=PRESETS), profile, OUT)

    def test_thumbnails_skipped_without_fps_filter(self, caplog):
        profile = CapabilityProfile.create(
            encoders=DEFAULT_ENCODERS, filters={"scale": "scale"}
        )
        presets = PresetSet(presets=PRESETS, thumbnails=ThumbnailConstraints(delay=1))

        prepared = prepare_job(_fixture("multi_language"), presets, profile, OUT)

        assert prepared.thumbnails is None
        assert prepared.plan.thumbnails is None
        assert "Thumbnails cannot be produced" in caplog.text

    def test_audio_only_presets_accept_audio_only_source(self):
        preset = make_preset("audio", height=None, is_default=True)
        result = make_result([audio_track(0, "eng", bitrate=96_000)], Path("/media/song.flac"))

        prepared = prepare_job(result, PresetSet(presets=(preset,)), PROFILE, OUT)

        assert prepared.selected.video is None
        assert prepared.plan.filter_graph == ()
        assert prepared.plan.av_outputs[0].maps == ("0:0",)

    def test_missing_default_preset(self):
        presets = PresetSet(presets=(make_preset("720p"),))
        with pytest.raises(ValidationError, match="No default preset"):
            prepare_job(_fixture("multi_language"), presets, PROFILE, OUT)

    def test_video_presets_need_video(self):
        result = make_result([audio_track(0, "eng")])
        with pytest.raises(ValidationError, match="No video tracks"):
            prepare_job(result, PresetSet(presets=PRESETS), PROFILE, OUT)


class TestDeclaredBitrates:
    """Bitrates declared in a preset file reach the encoder options unchanged."""

    def test_kilobit_suffixes_are_kept(self):
        presets = load_presets_from_dict(
            {
                "presets": [
                    {
                        "name": "720p",
                        "format": "mp4",
                        "extension": "mp4",
                        "default": True,
                        "video": {
                            "width": 1280,
                            "height": 720,
                            "bitrate": "2500k",
                            "codec": "h264",
                        },
                        "audio": {"bitrate": "64k", "channels": 2, "codec": "aac"},
                    }
                ]
            }
        )

        prepared = prepare_job(_fixture("multi_language"), presets, PROFILE, OUT)

        options = prepared.plan.av_outputs[0].options
        assert options[options.index("-b:v") + 1] == "2500k"
        assert options[options.index("-maxrate") + 1] == "2500k"
        assert options[options.index("-bufsize") + 1] == "10000k"
        assert options[options.index("-b:a") + 1] == "64k"
