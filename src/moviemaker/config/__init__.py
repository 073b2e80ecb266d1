"""Configuration management for Movie Maker.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (MOVIEMAKER_*)
3. Config file (~/.moviemaker/config.toml)
4. Default values (lowest priority)
"""

from moviemaker.config.env import EnvReader
from moviemaker.config.loader import (
    ConfigError,
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from moviemaker.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from moviemaker.config.models import (
    JobsConfig,
    LoggingConfig,
    MovieMakerConfig,
    ServerConfig,
    StorageConfig,
    ToolPathsConfig,
    UploadConfig,
)

__all__ = [
    # Models
    "JobsConfig",
    "LoggingConfig",
    "MovieMakerConfig",
    "ServerConfig",
    "StorageConfig",
    "ToolPathsConfig",
    "UploadConfig",
    # Loader
    "ConfigError",
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    "EnvReader",
    "build_logging_config",
    "configure_logging_from_cli",
]
