"""Configuration manager for loading and validating .backstep.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from backstep.domain.config import AppConfig, BackoffConfig, IntervalsConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".backstep.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .backstep.yml and environment variables

    Configuration priority:
    1. Default values
    2. .backstep.yml file (searched from current directory upwards)
    3. Environment variables (BACKSTEP_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "intervals": {
            "kind": "exponential",
            "base": 2.0,
            "unit": 1.0,
            "initial": 0.5,
            "max": 20.0,
            "jitter_max": 0.5,
        },
        "backoff": {
            "tries": 5,
            "timeout": None,
        },
    }

    # env var -> (section, key, converter)
    ENV_OVERRIDES = {
        "BACKSTEP_INTERVALS_KIND": ("intervals", "kind", str),
        "BACKSTEP_TRIES": ("backoff", "tries", int),
        "BACKSTEP_TIMEOUT": ("backoff", "timeout", float),
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .backstep.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If the file cannot be read or validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .backstep.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and environment, then validate

        Raises:
            ConfigurationError: If the file cannot be read or parsed
            ValidationError: If configuration is invalid
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(
                    f"Failed to load config from {self.config_path}: {e}"
                ) from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Config file {self.config_path} must contain a mapping"
                )
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply BACKSTEP_* environment variable overrides

        Raises:
            ConfigurationError: If a value cannot be converted
        """
        for env_name, (section, key, convert) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            try:
                converted = convert(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_name}: {value!r}") from e
            if not isinstance(config.get(section), dict):
                config[section] = {}
            logger.debug(f"Overriding {section}.{key} from {env_name}")
            config[section][key] = converted
        return config

    def get_intervals_config(self) -> IntervalsConfig:
        return self.config.intervals

    def get_backoff_config(self) -> BackoffConfig:
        return self.config.backoff
