import os
from typing import Any, Dict, List, Optional

import yaml

from ovlrefine.alignment.aligner import DEFAULT_SCORING
from ovlrefine.errors import ConfigurationError
from ovlrefine.parallel.orchestrator import DEFAULT_BATCH_SIZE

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    "output_file": None,
    "threads": None,
    "batch_size": DEFAULT_BATCH_SIZE,
    "left_align": False,
    "progress": True,
    "aligner": {},
}

# Required configuration parameters
REQUIRED_PARAMS: List[str] = ["reads_file", "overlaps_file"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config:
    """
    Manages configuration settings for the application.

    Loads settings from a YAML file and applies explicit overrides on top
    (usually command-line options). Validates required parameters and value
    types.
    """
    def __init__(self):
        self._settings: Dict[str, Any] = {
            key: (dict(value) if isinstance(value, dict) else value)
            for key, value in DEFAULT_CONFIG.items()
        }

    def load(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Loads configuration from a file and overrides.

        Args:
            config_file: Optional path to a YAML configuration file.
            overrides: Settings that take precedence over the file. Keys
                whose value is None are ignored.
        """
        # 1. Load from config file if specified
        if config_file:
            if not os.path.exists(config_file):
                raise ConfigurationError(f"Config file not found: {config_file}")
            try:
                with open(config_file, 'r') as f:
                    file_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Error parsing config file {config_file}: {e}")
            if file_config:
                if not isinstance(file_config, dict):
                    raise ConfigurationError(f"Config file {config_file} must contain a mapping")
                self._merge(file_config)

        # 2. Apply explicit overrides
        if overrides:
            self._merge({key: value for key, value in overrides.items() if value is not None})

        # 3. Validate
        self._validate_required()
        self._validate_values()
        return self

    def _merge(self, settings: Dict[str, Any]):
        for key, value in settings.items():
            if key == "aligner":
                if not isinstance(value, dict):
                    raise ConfigurationError("'aligner' must be a mapping of scoring parameters")
                self._settings["aligner"].update(value)
            else:
                self._settings[key] = value

    def _validate_required(self):
        """Checks if all required parameters are set and point to existing files."""
        missing = [param for param in REQUIRED_PARAMS if self._settings.get(param) is None]
        if missing:
            raise ConfigurationError(f"Missing required configuration parameters: {', '.join(missing)}")

        for param in REQUIRED_PARAMS:
            filepath = str(self._settings[param])
            if not os.path.exists(filepath):
                raise ConfigurationError(f"Required file not found: {param} = {filepath}")

    def _validate_values(self):
        level = str(self._settings["log_level"]).upper()
        if level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self._settings['log_level']}")
        self._settings["log_level"] = level

        threads = self._settings["threads"]
        if threads is not None and (not isinstance(threads, int) or isinstance(threads, bool) or threads <= 0):
            raise ConfigurationError(f"threads must be a positive integer, got {threads!r}")

        batch_size = self._settings["batch_size"]
        if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size <= 0:
            raise ConfigurationError(f"batch_size must be a positive integer, got {batch_size!r}")

        for flag in ("left_align", "progress"):
            if not isinstance(self._settings[flag], bool):
                raise ConfigurationError(f"{flag} must be true or false, got {self._settings[flag]!r}")

        for name, value in self._settings["aligner"].items():
            if name not in DEFAULT_SCORING:
                raise ConfigurationError(f"Unknown aligner parameter: {name}")
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ConfigurationError(f"Aligner parameter {name} must be a number, got {value!r}")

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a configuration value."""
        return self._settings.get(key, default)

    def get_all(self) -> Dict[str, Any]:
        """Retrieves all configuration settings."""
        settings = self._settings.copy()
        settings["aligner"] = dict(self._settings["aligner"])
        return settings

    def aligner_scoring(self) -> Dict[str, float]:
        """Scoring parameters for the pairwise aligner, defaults filled in."""
        return {**DEFAULT_SCORING, **self._settings["aligner"]}
