"""
cinelut Utilities Package
Logging and run settings helpers.
"""

from .logging import (
    LogConfig,
    CinelutLogger,
    ErrorAggregator,
    configure_logging,
    configure_from_cli,
    get_logger,
    set_level,
)

from .config_file import (
    ConfigFileManager,
)

__all__ = [
    # Logging
    "LogConfig",
    "CinelutLogger",
    "ErrorAggregator",
    "configure_logging",
    "configure_from_cli",
    "get_logger",
    "set_level",
    # Settings
    "ConfigFileManager",
]
