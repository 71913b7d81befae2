"""Configuration management for Video Transcode Planner.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (VTP_*)
3. Config file (~/.vtp/config.toml)
4. Default values (lowest priority)
"""

from vtp.config.loader import (
    clear_config_cache,
    get_cached_config,
    get_config,
    get_default_config_path,
    get_tool_path,
    load_config_file,
    set_cached_config,
)
from vtp.config.models import (
    DEFAULT_ENCODERS,
    JobsConfig,
    LoggingConfig,
    SelectionConfig,
    ToolPathsConfig,
    VTPConfig,
)

__all__ = [
    # Models
    "DEFAULT_ENCODERS",
    "JobsConfig",
    "LoggingConfig",
    "SelectionConfig",
    "ToolPathsConfig",
    "VTPConfig",
    # Loader
    "clear_config_cache",
    "get_cached_config",
    "get_config",
    "get_default_config_path",
    "get_tool_path",
    "load_config_file",
    "set_cached_config",
    # Logging
]
