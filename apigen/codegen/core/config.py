"""
Configuration management for code generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for backend settings.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ...logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass
class GeneratorConfig:
    """Base configuration for renderers."""

    # Code style settings
    indent_size: int = 4

    # Emit JSDoc / prose from summaries and descriptions
    add_comments: bool = True

    # Binding wiring
    transport_import: str = "./bin"
    client_interface: str = "IClient"
    module_class_suffix: str = "Module"

    # Factories for enum variants
    emit_constructors: bool = True

    # Custom settings (backend-specific)
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def indent(self) -> str:
        return " " * self.indent_size


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._configs: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load default configurations for supported backends."""
        self._configs["ts"] = {
            "indent_size": 4,
            "add_comments": True,
            "transport_import": "./bin",
            "client_interface": "IClient",
            "module_class_suffix": "Module",
            "emit_constructors": True,
        }

        # Code samples embedded in docs stay free of JSDoc noise
        self._configs["docs"] = {
            "indent_size": 4,
            "add_comments": False,
            "emit_constructors": False,
            "custom": {
                "index_file": "modules.md",
            },
        }

    def get_config(self, language: str, custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
        """
        Get complete configuration for a backend.

        Args:
            language: Backend name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration for the backend
        """
        base_config = dict(self._configs.get(language, {}))
        base_config["custom"] = dict(base_config.get("custom", {}))

        if config_file:
            file_config = self._load_config_file(config_file)
            self._merge(base_config, file_config)

        if custom_config:
            self._merge(base_config, custom_config)

        return self._dict_to_config(base_config)

    @staticmethod
    def _merge(base: Dict[str, Any], overrides: Dict[str, Any]):
        for key, value in overrides.items():
            if key == "custom" and isinstance(value, dict):
                base["custom"].update(value)
            else:
                base[key] = value

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path).expanduser()

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == '.json':
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {str(e)}")
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {str(e)}")

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.debug("Loaded configuration from %s", path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f for f in GeneratorConfig.__dataclass_fields__}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys land in custom
        if custom_args:
            existing_custom = config_args.get('custom', {})
            existing_custom.update(custom_args)
            config_args['custom'] = existing_custom

        return GeneratorConfig(**config_args)

    def validate_config(self, config: GeneratorConfig, language: str) -> list[str]:
        """
        Validate configuration for a backend.

        Returns:
            List of validation warnings
        """
        warnings = []

        if not isinstance(config.indent_size, int) or not 1 <= config.indent_size <= 8:
            warnings.append(f"Invalid indent_size: {config.indent_size}")

        if not config.client_interface.isidentifier():
            warnings.append(f"Invalid client_interface name: {config.client_interface}")

        if config.module_class_suffix and not config.module_class_suffix.isidentifier():
            warnings.append(f"Invalid module_class_suffix: {config.module_class_suffix}")

        if language == "ts" and not config.transport_import:
            warnings.append("transport_import must not be empty")

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(language: str = "ts", custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        language: Backend name
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration for the backend
    """
    manager = get_config_manager()
    return manager.get_config(language, custom_config, config_file)
