"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (VTP_*)
3. Config file (~/.vtp/config.toml)
4. Default values

Environment variables:
- VTP_FFMPEG_PATH: Path to ffmpeg executable
- VTP_FFPROBE_PATH: Path to ffprobe executable
- VTP_MONTAGE_PATH: Path to ImageMagick montage executable
- VTP_IDENTIFY_PATH: Path to ImageMagick identify executable
- VTP_LOG_LEVEL: Log level (debug, info, warning, error)
- VTP_CONFIG_PATH: Path to config file (overrides default location)
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
import tomllib
from pathlib import Path
from typing import Any

from vtp.capabilities.models import load_profile
from vtp.config.models import (
    DEFAULT_ENCODERS,
    JobsConfig,
    LoggingConfig,
    SelectionConfig,
    ToolPathsConfig,
    VTPConfig,
)
from vtp.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".vtp"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

_TOOL_ENV_VARS: dict[str, str] = {
    "ffmpeg": "VTP_FFMPEG_PATH",
    "ffprobe": "VTP_FFPROBE_PATH",
    "montage": "VTP_MONTAGE_PATH",
    "identify": "VTP_IDENTIFY_PATH",
}

_config_cache: VTPConfig | None = None
_config_cache_lock = threading.Lock()


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by VTP_CONFIG_PATH environment variable.

    Returns:
        Path to config file.
    """
    env_path = os.environ.get("VTP_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ValidationError: If the file is not valid TOML.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValidationError(f"Invalid config file {path}: {e}") from e
    logger.debug("Loaded config from %s", path)
    return config


def _get_env_path(var_name: str) -> Path | None:
    """Get a path from environment variable.

    Args:
        var_name: Environment variable name.

    Returns:
        Path if set and valid, None otherwise.
    """
    value = os.environ.get(var_name)
    if value:
        path = Path(value).expanduser()
        if path.exists():
            return path
        logger.warning(
            "Environment variable %s points to non-existent path: %s",
            var_name,
            value,
        )
    return None


def _file_path(section: dict[str, Any], key: str) -> Path | None:
    value = section.get(key)
    return Path(value).expanduser() if value else None


def _section(file_config: dict[str, Any], name: str) -> dict[str, Any]:
    value = file_config.get(name, {})
    if not isinstance(value, dict):
        raise ValidationError(f"Config section [{name}] must be a table", field=name)
    return value


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    log_level: str | None = None,
) -> VTPConfig:
    """Get VTP configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides VTP_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        log_level: CLI override for the log level.

    Returns:
        VTPConfig with merged configuration.

    Raises:
        ValidationError: If the config file or a section of it is invalid.
    """
    file_config = load_config_file(config_path)

    tools_file = _section(file_config, "tools")
    tools = ToolPathsConfig(
        ffmpeg=(
            ffmpeg_path
            or _get_env_path("VTP_FFMPEG_PATH")
            or _file_path(tools_file, "ffmpeg")
        ),
        ffprobe=(
            ffprobe_path
            or _get_env_path("VTP_FFPROBE_PATH")
            or _file_path(tools_file, "ffprobe")
        ),
        montage=_get_env_path("VTP_MONTAGE_PATH") or _file_path(tools_file, "montage"),
        identify=(
            _get_env_path("VTP_IDENTIFY_PATH") or _file_path(tools_file, "identify")
        ),
    )

    try:
        logging_file = _section(file_config, "logging")
        logging_config = LoggingConfig(
            level=(
                log_level
                or os.environ.get("VTP_LOG_LEVEL")
                or logging_file.get("level", "info")
            ),
            file=_file_path(logging_file, "file"),
            format=logging_file.get("format", "text"),
            include_stderr=logging_file.get("include_stderr", False),
            max_bytes=logging_file.get("max_bytes", 10_485_760),
            backup_count=logging_file.get("backup_count", 5),
        )

        selection_file = _section(file_config, "selection")
        selection = SelectionConfig(
            preferred_language=selection_file.get("preferred_language", "^en"),
            forced_max_frame_count=selection_file.get("forced_max_frame_count", 50),
            forced_title_pattern=selection_file.get("forced_title_pattern", "force"),
        )

        jobs_file = _section(file_config, "jobs")
        jobs = JobsConfig(
            finalize_workers=jobs_file.get("finalize_workers", 4),
            preview_seconds=jobs_file.get("preview_seconds"),
            probe_timeout=jobs_file.get("probe_timeout", 60),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid configuration: {e}") from e

    capabilities_file = _section(file_config, "capabilities")
    if capabilities_file:
        capabilities = load_profile(capabilities_file)
    else:
        capabilities = load_profile({"encoders": DEFAULT_ENCODERS})

    return VTPConfig(
        tools=tools,
        logging=logging_config,
        selection=selection,
        jobs=jobs,
        capabilities=capabilities,
    )


def get_cached_config() -> VTPConfig:
    """Return the process-wide configuration, loading it on first use.

    Thread-safe: uses a lock to protect concurrent first loads.
    """
    global _config_cache
    with _config_cache_lock:
        if _config_cache is None:
            _config_cache = get_config()
        return _config_cache


def set_cached_config(config: VTPConfig | None) -> None:
    """Replace the process-wide configuration (None forces a reload)."""
    global _config_cache
    with _config_cache_lock:
        _config_cache = config


def clear_config_cache() -> None:
    """Clear the cached configuration. Primarily useful for testing."""
    set_cached_config(None)


def get_tool_path(tool_name: str) -> Path | None:
    """Resolve an external tool executable.

    Checks the environment override, then the config file, then PATH.

    Args:
        tool_name: Name of the tool (ffmpeg, ffprobe, montage, identify).

    Returns:
        Path to the tool or None if not available.
    """
    env_var = _TOOL_ENV_VARS.get(tool_name)
    if env_var:
        env_path = _get_env_path(env_var)
        if env_path is not None:
            return env_path

    try:
        configured = get_cached_config().get_tool_path(tool_name)
    except ValidationError as e:
        logger.warning("Ignoring invalid configuration for %s: %s", tool_name, e)
        configured = None
    if configured is not None:
        return configured

    which_result = shutil.which(tool_name)
    if which_result is not None:
        return Path(which_result)
    return None
