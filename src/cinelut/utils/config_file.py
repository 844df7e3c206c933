"""Run settings file management for cinelut.

Supports loading run settings from:
1. User config: ~/.cinelut/config.yaml
2. Project config: .cinelut.yaml (in current directory)
3. CLI arguments (highest precedence)

These settings control a batch run (where to look for JSON configs, where
to write ``.cube`` files, logging). Per-LUT parameters live in the JSON
config files themselves.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


# Settings schema
CONFIG_SCHEMA = {
    "defaults": {
        "config_dir": {"type": str, "default": "configs"},
        "output_dir": {"type": str, "default": "output"},
        "workers": {"type": int, "range": (1, 64), "default": 1},
        "log_level": {"type": str, "choices": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], "default": "INFO"},
        "log_format": {"type": str, "choices": ["text", "json"], "default": "text"},
        "log_file": {"type": str, "default": None},
    },
}

# Default config file template
DEFAULT_CONFIG_TEMPLATE = """\
# cinelut settings
# Location: ~/.cinelut/config.yaml or .cinelut.yaml (project-local)
#
# CLI arguments take precedence over these values.
# Project-local settings (.cinelut.yaml) override user settings.

defaults:
  # Directory scanned recursively for *.json LUT configs
  config_dir: configs

  # Directory the generated .cube files are written to
  output_dir: output

  # Number of config files processed concurrently
  workers: 1

  # Logging
  log_level: INFO
  log_format: text
  # log_file: ./logs/cinelut.log
"""

# CLI argument name -> settings key
CLI_TO_CONFIG_MAP = {
    "config_dir": "config_dir",
    "output_dir": "output_dir",
    "workers": "workers",
    "log_level": "log_level",
    "log_format": "log_format",
    "log_file": "log_file",
}


@dataclass
class ValidationError:
    """Represents a settings validation error."""
    path: str
    message: str
    value: Any = None


@dataclass
class ConfigFileManager:
    """Manages settings file loading, saving, and merging.

    Attributes:
        user_config_path: Path to user-level settings file
        project_config_path: Path to project-local settings file
        loaded_config: The merged settings dictionary
    """

    user_config_path: Path = field(default_factory=lambda: Path.home() / ".cinelut" / "config.yaml")
    project_config_path: Path = field(default_factory=lambda: Path.cwd() / ".cinelut.yaml")
    loaded_config: Dict[str, Any] = field(default_factory=dict)
    _validation_errors: List[ValidationError] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if not isinstance(self.user_config_path, Path):
            self.user_config_path = Path(self.user_config_path)
        if not isinstance(self.project_config_path, Path):
            self.project_config_path = Path(self.project_config_path)

    def load(self) -> Dict[str, Any]:
        """Load and merge settings from all sources.

        Order of precedence (later overrides earlier):
        1. Built-in defaults
        2. User settings (~/.cinelut/config.yaml)
        3. Project settings (.cinelut.yaml)

        Returns:
            Merged settings dictionary
        """
        self._validation_errors = []

        config: Dict[str, Any] = self._get_builtin_defaults()

        for path in (self.user_config_path, self.project_config_path):
            if path.exists():
                file_config = self._load_yaml_file(path)
                if file_config:
                    config = self._deep_merge(config, file_config)

        self._validate_config(config)

        self.loaded_config = config
        return config

    def _get_builtin_defaults(self) -> Dict[str, Any]:
        """Get built-in default settings."""
        return {
            "defaults": {
                key: schema["default"]
                for key, schema in CONFIG_SCHEMA["defaults"].items()
            }
        }

    def _load_yaml_file(self, path: Path) -> Optional[Dict[str, Any]]:
        """Load a YAML settings file.

        Returns:
            Parsed settings dictionary, or None if loading fails
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self._validation_errors.append(
                ValidationError(path=str(path), message=f"YAML parsing error: {e}")
            )
            return None
        except OSError as e:
            self._validation_errors.append(
                ValidationError(path=str(path), message=f"Failed to read file: {e}")
            )
            return None

        if not isinstance(data, dict):
            self._validation_errors.append(
                ValidationError(path=str(path), message="Top-level value must be a mapping")
            )
            return None
        return data

    def _deep_merge(self, base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, overlay takes precedence.

        A None in the overlay (an empty YAML value) keeps the base value.
        """
        result = base.copy()

        for key, value in overlay.items():
            if value is None and key in result:
                continue
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate settings against schema."""
        defaults = config.get("defaults", {})
        if not isinstance(defaults, dict):
            self._validation_errors.append(
                ValidationError(path="defaults", message="Must be a mapping", value=defaults)
            )
            return

        for key, schema in CONFIG_SCHEMA["defaults"].items():
            value = defaults.get(key)
            if value is None:
                continue

            expected_type = schema.get("type")
            if expected_type and (not isinstance(value, expected_type) or isinstance(value, bool)):
                self._validation_errors.append(
                    ValidationError(
                        path=f"defaults.{key}",
                        message=f"Expected {expected_type.__name__}, got {type(value).__name__}",
                        value=value,
                    )
                )
                continue

            choices = schema.get("choices")
            if choices and value not in choices:
                self._validation_errors.append(
                    ValidationError(
                        path=f"defaults.{key}",
                        message=f"Invalid value. Must be one of: {choices}",
                        value=value,
                    )
                )

            value_range = schema.get("range")
            if value_range and isinstance(value, (int, float)):
                min_val, max_val = value_range
                if not (min_val <= value <= max_val):
                    self._validation_errors.append(
                        ValidationError(
                            path=f"defaults.{key}",
                            message=f"Value must be between {min_val} and {max_val}",
                            value=value,
                        )
                    )

    def get_validation_errors(self) -> List[ValidationError]:
        """Get list of validation errors from last load."""
        return self._validation_errors

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a settings value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., "defaults.output_dir")
            default: Default value if key not found
        """
        value: Any = self.loaded_config

        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def init_config(self, target: str = "user") -> Path:
        """Write a settings file populated with the default template.

        Args:
            target: "user" for ~/.cinelut/config.yaml,
                   "project" for .cinelut.yaml

        Returns:
            Path to created settings file
        """
        config_path = self.user_config_path if target == "user" else self.project_config_path

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG_TEMPLATE)

        return config_path

    def show_config(self) -> str:
        """Return the merged settings as YAML."""
        return yaml.safe_dump(self.loaded_config, default_flow_style=False, sort_keys=False)

    def merge_with_cli_args(self, cli_args: Dict[str, Any]) -> Dict[str, Any]:
        """Merge loaded settings with CLI arguments.

        CLI arguments that are not None take precedence over file values.
        Settings that failed validation fall back to their built-in default.
        """
        result = self._get_builtin_defaults()["defaults"]
        invalid = {error.path for error in self._validation_errors}

        file_defaults = self.loaded_config.get("defaults", {})
        if not isinstance(file_defaults, dict):
            file_defaults = {}

        for key, value in file_defaults.items():
            # A null in the file leaves the built-in default
            if value is not None and key in result and f"defaults.{key}" not in invalid:
                result[key] = value

        for cli_key, config_key in CLI_TO_CONFIG_MAP.items():
            if cli_args.get(cli_key) is not None:
                result[config_key] = cli_args[cli_key]

        return result

    def config_exists(self) -> bool:
        """Check if any settings file exists."""
        return self.user_config_path.exists() or self.project_config_path.exists()
