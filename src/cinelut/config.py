"""LUT configuration records.

A config file is a small JSON object::

    {
        "size": 33,
        "look": "tealOrange",
        "exposure_offset": 1.2,
        "output": "apple_log_teal_orange.cube"
    }

Missing, zero or empty values fall back to the defaults below. Keys are
matched case-insensitively and unknown keys are ignored.
"""
import json
import logging
import math
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .exceptions import ConfigParseError, ConfigReadError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 17
DEFAULT_RED_TINT = 1.05
DEFAULT_BLUE_TINT = 0.95
DEFAULT_OUTPUT = "output.cube"
DEFAULT_LOOK = "none"
DEFAULT_EXPOSURE_OFFSET = 1.0

# JSON key -> expected JSON type
CONFIG_FIELDS = {
    "size": int,
    "red_tint": float,
    "blue_tint": float,
    "output": str,
    "look": str,
    "exposure_offset": float,
}


@dataclass(frozen=True)
class LUTConfig:
    """Fully resolved configuration for one LUT.

    Attributes:
        size: Grid points per axis; the table holds ``size ** 3`` samples
        red_tint: Red multiplier. Carried through but not used by any
            pipeline stage.
        blue_tint: Blue multiplier. Carried through but not used by any
            pipeline stage.
        output: Destination file name, relative to the output directory
            unless absolute
        look: Creative look name ("none", "tealorange", "warmvintage"),
            case-insensitive; anything else behaves as "none"
        exposure_offset: Multiplier applied before the log decode
    """

    size: int = DEFAULT_SIZE
    red_tint: float = DEFAULT_RED_TINT
    blue_tint: float = DEFAULT_BLUE_TINT
    output: str = DEFAULT_OUTPUT
    look: str = DEFAULT_LOOK
    exposure_offset: float = DEFAULT_EXPOSURE_OFFSET

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.size < 2:
            raise ConfigurationError(
                "size must be at least 2",
                config_key="size",
                config_value=self.size,
            )
        if self.exposure_offset < 0:
            raise ConfigurationError(
                "exposure_offset must be non-negative",
                config_key="exposure_offset",
                config_value=self.exposure_offset,
            )

    @property
    def sample_count(self) -> int:
        """Number of samples in the generated table."""
        return self.size ** 3

    def resolve_output_path(self, output_dir: Union[str, Path]) -> Path:
        """Return where this LUT should be written.

        An absolute ``output`` is used as-is; a relative one is placed under
        ``output_dir``.
        """
        output = Path(self.output)
        if output.is_absolute():
            return output
        return Path(output_dir) / output

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], path: Optional[str] = None) -> "LUTConfig":
        """Create a resolved configuration from parsed JSON.

        Zero and empty values are treated as unset: ``size <= 0`` becomes 17,
        a zero tint or exposure offset gets its default, and an empty
        ``output`` or ``look`` gets its default.

        Args:
            data: Parsed JSON document. ``None`` (a JSON ``null``) yields
                the defaults.
            path: Source file, used in error messages

        Returns:
            LUTConfig instance

        Raises:
            ConfigParseError: If the document is not an object or a field
                has the wrong JSON type
            ConfigurationError: If a resolved value is out of range
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigParseError(
                f"Expected a JSON object, got {_json_type_name(data)}",
                path=path,
            )

        # Repeated keys (in any case) apply in document order
        pairs = data.pairs if isinstance(data, JSONObject) else data.items()

        values: Dict[str, Any] = {}
        for key, value in pairs:
            field_name = key.lower()
            if field_name not in CONFIG_FIELDS:
                continue
            if value is None:
                # null leaves the field as it was
                continue
            values[field_name] = _coerce(field_name, value, path)

        size = values.get("size", 0)
        red_tint = values.get("red_tint", 0.0)
        blue_tint = values.get("blue_tint", 0.0)
        output = values.get("output", "")
        look = values.get("look", "")
        exposure_offset = values.get("exposure_offset", 0.0)

        try:
            return cls(
                size=size if size > 0 else DEFAULT_SIZE,
                red_tint=red_tint if red_tint != 0 else DEFAULT_RED_TINT,
                blue_tint=blue_tint if blue_tint != 0 else DEFAULT_BLUE_TINT,
                output=output or DEFAULT_OUTPUT,
                look=look or DEFAULT_LOOK,
                exposure_offset=exposure_offset if exposure_offset != 0 else DEFAULT_EXPOSURE_OFFSET,
            )
        except ConfigurationError as e:
            if path:
                e.details["path"] = path
            raise


def _coerce(field_name: str, value: Any, path: Optional[str]) -> Any:
    """Check a JSON value against the field's type and convert it."""
    expected = CONFIG_FIELDS[field_name]

    # bool is an int subclass but never a valid number here
    if isinstance(value, bool):
        ok = False
    elif expected is int:
        ok = isinstance(value, int)
    elif expected is float:
        ok = isinstance(value, (int, float))
    else:
        ok = isinstance(value, expected)

    if not ok:
        raise ConfigParseError(
            f"Cannot use {_json_type_name(value)} {value!r} for field '{field_name}' "
            f"(expected {_TYPE_NAMES[expected]})",
            path=path,
            config_key=field_name,
        )

    if expected is float:
        value = float(value)
        if not math.isfinite(value):
            raise ConfigParseError(
                f"Value for field '{field_name}' is out of range",
                path=path,
                config_key=field_name,
            )
    return value


_TYPE_NAMES = {int: "integer", float: "number", str: "string"}


def _json_type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class JSONObject(dict):
    """Decoded JSON object that also keeps every key/value pair in
    document order, duplicates included."""

    def __init__(self, pairs: List[Tuple[str, Any]]) -> None:
        super().__init__(pairs)
        self.pairs = pairs


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_config(text: Union[str, bytes], path: Optional[str] = None) -> LUTConfig:
    """Parse JSON config text into a resolved LUTConfig.

    Raises:
        ConfigParseError: If the text is not valid JSON, is nested too deeply
            to decode, or has the wrong shape
        ConfigurationError: If a resolved value is out of range
    """
    try:
        data = json.loads(text, parse_constant=_reject_constant, object_pairs_hook=JSONObject)
    except ValueError as e:
        raise ConfigParseError(f"Invalid JSON: {e}", path=path, cause=e) from e
    except RecursionError as e:
        raise ConfigParseError("Invalid JSON: document nested too deeply", path=path, cause=e) from e

    return LUTConfig.from_dict(data, path=path)


def load_config(path: Union[str, Path]) -> LUTConfig:
    """Read and resolve a JSON config file.

    Args:
        path: Path to the JSON file

    Returns:
        Resolved LUTConfig

    Raises:
        ConfigReadError: If the file cannot be read
        ConfigParseError: If the content is not a valid config document
        ConfigurationError: If a resolved value is out of range
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigReadError(f"Cannot read config file: {e}", path=str(path), cause=e) from e

    config = parse_config(raw, path=str(path))
    logger.debug(f"Loaded config {path}: {config.to_dict()}")
    return config
