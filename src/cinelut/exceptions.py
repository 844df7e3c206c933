"""Exception hierarchy for cinelut.

Every error raised by the package derives from ``CinelutError`` so callers
can catch broadly when they need to. The batch runner distinguishes two
severities:

- file-level errors (read, parse, configuration, write) are logged and the
  offending config file is skipped;
- run-level errors (output directory creation, config tree traversal) abort
  the whole run.

Exception Hierarchy:
    CinelutError (base)
    +-- ConfigurationError
    +-- ConfigReadError
    +-- ConfigParseError
    +-- LUTWriteError
    +-- CubeFormatError
    +-- OutputDirectoryError   (fatal)
    +-- ConfigDiscoveryError   (fatal)
"""

from typing import Any, Dict, Optional


class CinelutError(Exception):
    """Base exception for all cinelut errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
        cause: Original exception that caused this error (if any)
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(CinelutError):
    """Invalid LUT configuration value.

    Examples:
        - ``size`` of 1 (the grid normalization divides by ``size - 1``)
        - negative ``exposure_offset``
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = config_value
        if path:
            details["path"] = path
        super().__init__(message, details=details, cause=cause)


class ConfigReadError(CinelutError):
    """A config file could not be opened or read."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {"path": path} if path else {}
        super().__init__(message, details=details, cause=cause)


class ConfigParseError(CinelutError):
    """A config file is not valid JSON or does not match the config shape.

    Examples:
        - Truncated or otherwise malformed JSON
        - Top-level value that is not an object
        - ``size`` given as a string or a fractional number
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        config_key: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if path:
            details["path"] = path
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details=details, cause=cause)


class LUTWriteError(CinelutError):
    """The destination ``.cube`` file could not be created or written."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {"path": path} if path else {}
        super().__init__(message, details=details, cause=cause)


class CubeFormatError(CinelutError):
    """A ``.cube`` document is malformed."""

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if line_number is not None:
            details["line"] = line_number
        if path:
            details["path"] = path
        super().__init__(message, details=details, cause=cause)


class OutputDirectoryError(CinelutError):
    """The output directory could not be created. Aborts the run."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {"path": path} if path else {}
        super().__init__(message, details=details, cause=cause)


class ConfigDiscoveryError(CinelutError):
    """The config directory tree could not be traversed. Aborts the run."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {"path": path} if path else {}
        super().__init__(message, details=details, cause=cause)


FATAL_ERRORS = (OutputDirectoryError, ConfigDiscoveryError)


def is_fatal(error: BaseException) -> bool:
    """Return True if ``error`` should abort a batch run."""
    return isinstance(error, FATAL_ERRORS)


# Exception mapping for easy lookup
EXCEPTION_MAP = {
    "configuration": ConfigurationError,
    "config_read": ConfigReadError,
    "config_parse": ConfigParseError,
    "lut_write": LUTWriteError,
    "cube_format": CubeFormatError,
    "output_directory": OutputDirectoryError,
    "config_discovery": ConfigDiscoveryError,
}


def get_exception_class(error_type: str) -> type:
    """Get exception class by name.

    Args:
        error_type: Error type name (lowercase)

    Returns:
        Exception class

    Raises:
        KeyError: If error type not found
    """
    return EXCEPTION_MAP[error_type.lower()]
