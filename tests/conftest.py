"""Shared test fixtures for Video Transcode Planner."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from vtp.config.loader import clear_config_cache


@pytest.fixture
def ffprobe_fixtures_dir() -> Path:
    """Return the path to the ffprobe fixtures directory."""
    return Path(__file__).parent / "fixtures" / "ffprobe"


def load_ffprobe_fixture(name: str) -> dict:
    """Load an ffprobe JSON fixture by name.

    Args:
        name: Name of the fixture file (without .json extension).

    Returns:
        Parsed JSON data from the fixture.
    """
    fixture_path = Path(__file__).parent / "fixtures" / "ffprobe" / f"{name}.json"
    return json.loads(fixture_path.read_text())


@pytest.fixture
def multi_language_fixture() -> dict:
    """Load the multi-language ffprobe fixture."""
    return load_ffprobe_fixture("multi_language")


@pytest.fixture
def bitmap_subtitles_fixture() -> dict:
    """Load the bitmap subtitle ffprobe fixture."""
    return load_ffprobe_fixture("bitmap_subtitles")


@pytest.fixture
def sd_source_fixture() -> dict:
    """Load the 480p single-audio ffprobe fixture."""
    return load_ffprobe_fixture("sd_source")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path):
    """Point VTP at an empty config directory for every test.

    Tool path overrides from the developer's environment are removed so
    tests see the same configuration everywhere.
    """
    env = {key: value for key, value in os.environ.items() if not key.startswith("VTP_")}
    env["VTP_CONFIG_PATH"] = str(tmp_path / "vtp-config" / "config.toml")
    clear_config_cache()
    with patch.dict(os.environ, env, clear=True):
        yield tmp_path / "vtp-config"
    clear_config_cache()
