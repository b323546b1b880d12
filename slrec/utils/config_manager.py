"""
Configuration management utilities.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jsonschema
import yaml

from ..data.structs import ReconstructionConfig
from .error_handling import ConfigurationError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

PACKAGE_CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
DEFAULTS_NAME = "defaults.yaml"
RECONSTRUCTION_SCHEMA_NAME = "reconstruction_config_schema.json"


class ConfigManager:
    """
    Manages loading, validation, and merging of configurations.
    """

    def __init__(self, config_dir: Optional[str] = None, schema_dir: Optional[str] = None):
        self.config_dir = Path(config_dir) if config_dir else PACKAGE_CONFIG_DIR
        self.schema_dir = Path(schema_dir) if schema_dir else PACKAGE_CONFIG_DIR / "schemas"

    def _resolve(self, config_name: Union[str, Path]) -> Path:
        path = Path(config_name)
        if path.is_absolute() or path.exists():
            return path
        return self.config_dir / path

    def load_config(
        self,
        config_name: Union[str, Path],
        schema_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Load a configuration file (YAML or JSON).
        Optionally validate against a schema.

        Args:
            config_name: File name inside config_dir, or a path
            schema_name: Name of schema file inside schema_dir

        Returns:
            Loaded configuration dictionary
        """
        config_path = self._resolve(config_name)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            if config_path.suffix in (".yaml", ".yml"):
                config = yaml.safe_load(f) or {}
            elif config_path.suffix == ".json":
                config = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration format: {config_path.suffix}")

        if schema_name:
            self.validate_config(config, schema_name)

        return config

    def validate_config(self, config: Dict[str, Any], schema_name: str) -> None:
        """
        Validate configuration against a schema.

        Args:
            config: Configuration dictionary
            schema_name: Name of schema file

        Raises:
            ConfigurationError: If the configuration does not match the schema
        """
        schema_path = self.schema_dir / schema_name
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_path}")

        with open(schema_path, "r") as f:
            schema = json.load(f)

        try:
            jsonschema.validate(instance=config, schema=schema)
        except jsonschema.exceptions.ValidationError as e:
            path_str = " -> ".join(str(p) for p in e.path) if e.path else "root"
            error_msg = f"Configuration validation failed at '{path_str}': {e.message}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        logger.debug(f"Configuration validated against {schema_name}")

    def merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two configurations.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        merged = base.copy()
        for key, value in override.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self.merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    def get_value(self, config: Dict[str, Any], path: str, default: Any = None) -> Any:
        """
        Get a value from configuration using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path (e.g., 'reconstruction.neurons')
            default: Default value if path not found

        Returns:
            Value at path or default
        """
        current = config
        for key in path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def load_merged(
        self,
        config_path: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Packaged defaults, then the file at config_path, then overrides.
        The merged result is validated against the reconstruction schema.
        """
        config = self.load_config(PACKAGE_CONFIG_DIR / DEFAULTS_NAME)
        if config_path is not None:
            config = self.merge_configs(config, self.load_config(config_path))
        if overrides:
            config = self.merge_configs(config, overrides)
        self.validate_config(config, RECONSTRUCTION_SCHEMA_NAME)
        return config

    def load_reconstruction_config(
        self,
        config_path: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> ReconstructionConfig:
        """
        Build the immutable run configuration.

        Args:
            config_path: Optional YAML/JSON file overriding the defaults
            overrides: Optional nested overrides, e.g. {'reconstruction': {'analysis': 'RNN'}}

        Returns:
            ReconstructionConfig
        """
        config = self.load_merged(config_path, overrides)
        return ReconstructionConfig.from_dict(config["reconstruction"])

    def setup_logging(
        self,
        config: Optional[Dict[str, Any]] = None,
        config_path: Optional[Union[str, Path]] = None
    ) -> Dict[str, Any]:
        """
        Install the handlers described by the `logging` section.

        Args:
            config: Already merged configuration; loaded via load_merged when omitted
            config_path: Optional file layered over the defaults when loading

        Returns:
            The `logging` section that was applied
        """
        if config is None:
            config = self.load_merged(config_path)
        settings = self.get_value(config, "logging", default={}) or {}
        configure_logging(settings)
        return settings
