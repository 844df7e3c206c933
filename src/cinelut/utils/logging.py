"""Structured logging utilities for cinelut.

This module provides configurable, structured logging with support for:
- JSON format for machine parsing
- Human-readable text format
- Component-specific log levels
- Optional rotating log file
- Error aggregation for batch runs

Example usage:
    >>> from cinelut.utils.logging import get_logger, LogConfig, configure_logging
    >>>
    >>> configure_logging(LogConfig(log_level="DEBUG", log_format="json"))
    >>>
    >>> logger = get_logger("batch")
    >>> logger.info("LUT written", path="output/look.cube", size=33)
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

# Type aliases
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["text", "json"]

ROOT_LOGGER_NAME = "cinelut"
VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class LogConfig:
    """Configuration for cinelut logging.

    Attributes:
        log_level: Default log level for all components
        log_format: Output format ('text' for human-readable, 'json' for structured)
        log_file: Optional file path for log output
        component_levels: Dictionary of component-specific log levels
        max_file_size_mb: Maximum log file size before rotation (default: 10MB)
        backup_count: Number of rotated log files to keep (default: 5)
        include_timestamp: Whether to include timestamps in output
        include_source: Whether to include source file/line information
    """

    log_level: LogLevel = "INFO"
    log_format: LogFormat = "text"
    log_file: Optional[str] = None
    component_levels: Dict[str, LogLevel] = field(default_factory=dict)
    max_file_size_mb: int = 10
    backup_count: int = 5
    include_timestamp: bool = True
    include_source: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.log_level.upper() not in VALID_LEVELS:
            raise ValueError(
                f"Invalid log_level '{self.log_level}'. "
                f"Must be one of: {sorted(VALID_LEVELS)}"
            )
        if self.log_format not in ("text", "json"):
            raise ValueError(
                f"Invalid log_format '{self.log_format}'. "
                "Must be 'text' or 'json'"
            )
        for component, level in self.component_levels.items():
            if level.upper() not in VALID_LEVELS:
                raise ValueError(
                    f"Invalid log level '{level}' for component '{component}'. "
                    f"Must be one of: {sorted(VALID_LEVELS)}"
                )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Create LogConfig from dictionary."""
        return cls(
            log_level=data.get("log_level", "INFO"),
            log_format=data.get("log_format", "text"),
            log_file=data.get("log_file"),
            component_levels=data.get("component_levels", {}),
            max_file_size_mb=data.get("max_file_size_mb", 10),
            backup_count=data.get("backup_count", 5),
            include_timestamp=data.get("include_timestamp", True),
            include_source=data.get("include_source", False),
        )


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Outputs one JSON object per record:
    {
        "timestamp": "2025-03-02T10:30:45.123Z",
        "level": "INFO",
        "component": "batch",
        "message": "LUT written",
        "path": "output/look.cube"
    }
    """

    def __init__(self, include_source: bool = False) -> None:
        super().__init__()
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "component": record.name.split(".")[-1],
            "message": record.getMessage(),
        }

        if self.include_source:
            log_entry["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter.

    2025-03-02 10:30:45 | INFO     | batch        | LUT written [path=output/look.cube]
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_source: bool = False,
    ) -> None:
        self.include_timestamp = include_timestamp
        self.include_source = include_source

        if include_timestamp:
            fmt = "%(asctime)s | %(levelname)-8s | %(component)-12s | %(message)s"
        else:
            fmt = "%(levelname)-8s | %(component)-12s | %(message)s"

        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def formatMessage(self, record: logging.LogRecord) -> str:
        """Append structured fields and source info to the message."""
        message = record.message
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            extra_str = ", ".join(f"{k}={v}" for k, v in extra_fields.items())
            message = f"{message} [{extra_str}]"

        if self.include_source:
            message = f"{message} ({record.filename}:{record.lineno})"

        values = dict(record.__dict__)
        values["message"] = message
        values["component"] = record.name.split(".")[-1]
        return self._style._fmt % values


class CinelutLogger(logging.LoggerAdapter):
    """Logger adapter that accepts structured keyword fields.

    ``logger.info("LUT written", path=p, size=17)`` attaches ``path`` and
    ``size`` to the record; the formatter decides how to render them.
    """

    def __init__(
        self,
        logger: logging.Logger,
        component: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(logger, extra or {})
        self.component = component

    def process(
        self,
        msg: str,
        kwargs: Dict[str, Any],
    ) -> tuple:
        """Move structured keyword fields into the record's extra."""
        extra_fields = {}
        for key in list(kwargs.keys()):
            if key not in ("exc_info", "stack_info", "stacklevel", "extra"):
                extra_fields[key] = kwargs.pop(key)

        if self.extra:
            extra_fields.update(self.extra)

        kwargs.setdefault("extra", {})
        kwargs["extra"]["extra_fields"] = extra_fields

        return msg, kwargs

    def lut_written(self, path: Any, size: int, look: str, **kwargs: Any) -> None:
        """Log a successfully written LUT."""
        self.info(f"LUT successfully written to {path}", path=str(path), size=size, look=look, **kwargs)

    def file_skipped(self, path: Any, error: Exception, **kwargs: Any) -> None:
        """Log a config file skipped because of ``error``."""
        self.error(
            f"Skipping {path}: {error}",
            path=str(path),
            error_type=type(error).__name__,
            **kwargs,
        )


# Global configuration
_log_config: Optional[LogConfig] = None
_configured_loggers: Dict[str, CinelutLogger] = {}


def _create_formatter(config: LogConfig) -> logging.Formatter:
    if config.log_format == "json":
        return JSONFormatter(include_source=config.include_source)
    return TextFormatter(
        include_timestamp=config.include_timestamp,
        include_source=config.include_source,
    )


def configure_logging(config: Optional[LogConfig] = None) -> None:
    """Configure global logging settings.

    Call once at application startup to set up handlers and formatters.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    global _log_config

    if config is None:
        config = LogConfig()

    _log_config = config
    level = getattr(logging, config.log_level.upper())

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = _create_formatter(config)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    for component, component_level in config.component_levels.items():
        component_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")
        component_logger.setLevel(getattr(logging, component_level.upper()))

    root_logger.propagate = False


def get_logger(component: str) -> CinelutLogger:
    """Get a logger for a specific component.

    Args:
        component: Component name (e.g., 'batch', 'cli')

    Returns:
        Configured CinelutLogger instance
    """
    if _log_config is None:
        configure_logging()

    if component in _configured_loggers:
        return _configured_loggers[component]

    base_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}")

    if _log_config and component in _log_config.component_levels:
        level = _log_config.component_levels[component]
        base_logger.setLevel(getattr(logging, level.upper()))

    logger = CinelutLogger(base_logger, component)
    _configured_loggers[component] = logger

    return logger


def get_config() -> Optional[LogConfig]:
    """Get current logging configuration."""
    return _log_config


def set_level(level: LogLevel, component: Optional[str] = None) -> None:
    """Set log level dynamically.

    Args:
        level: New log level
        component: Component to set level for (None for root)
    """
    name = f"{ROOT_LOGGER_NAME}.{component}" if component else ROOT_LOGGER_NAME
    logging.getLogger(name).setLevel(getattr(logging, level.upper()))


class ErrorAggregator:
    """Aggregates errors for batch operations.

    Provides summary statistics and categorization of errors that occur
    while processing a batch of config files.
    """

    def __init__(self, component: str) -> None:
        self.component = component
        self.errors: List[Dict[str, Any]] = []
        self._logger = get_logger(component)

    def add_error(
        self,
        error: Exception,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Add an error to the aggregator.

        Args:
            error: The exception that occurred
            context: Additional context about the error
        """
        self.errors.append({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "error_type": type(error).__name__,
            "message": str(error),
            "context": context or {},
        })

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of aggregated errors.

        Returns:
            Dictionary with error counts by type and total
        """
        by_type: Dict[str, int] = {}
        for error in self.errors:
            error_type = error["error_type"]
            by_type[error_type] = by_type.get(error_type, 0) + 1

        return {
            "total_errors": len(self.errors),
            "by_type": by_type,
            "errors": self.errors,
        }

    def log_summary(self) -> None:
        """Log a summary of errors."""
        summary = self.get_summary()
        if summary["total_errors"] > 0:
            self._logger.warning(
                f"Error summary: {summary['total_errors']} total errors",
                error_summary=summary["by_type"],
            )
        else:
            self._logger.info("No errors recorded")

    def has_errors(self) -> bool:
        """Check if any errors have been recorded."""
        return len(self.errors) > 0

    def clear(self) -> None:
        """Clear all recorded errors."""
        self.errors.clear()


# Convenience functions for CLI integration


def configure_from_cli(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
) -> LogConfig:
    """Configure logging from CLI arguments.

    Args:
        log_level: Log level from --log-level argument
        log_format: Format from --log-format argument
        log_file: File path from --log-file argument

    Returns:
        Configured LogConfig instance
    """
    config = LogConfig(
        log_level=log_level.upper() if log_level else "INFO",
        log_format=log_format if log_format in ("text", "json") else "text",
        log_file=log_file,
    )
    configure_logging(config)
    return config


def get_cli_args_parser():
    """Get argparse arguments for logging configuration.

    Returns:
        List of argument tuples for argparse.add_argument()
    """
    return [
        (
            ("--log-level",),
            {
                "type": str.upper,
                "choices": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                "default": None,
                "help": "Set logging level (default: INFO)",
            },
        ),
        (
            ("--log-format",),
            {
                "type": str,
                "choices": ["text", "json"],
                "default": None,
                "help": "Set logging format (default: text)",
            },
        ),
        (
            ("--log-file",),
            {
                "type": str,
                "default": None,
                "help": "Path to log file (default: stderr only)",
            },
        ),
    ]
