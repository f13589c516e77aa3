#!/usr/bin/env python3
"""
Configuration Management Module for the NFT Registry CLI

Handles hierarchical configuration loading, environment variable mapping and
validation of collection, CLI and replay settings.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml


# Project file first, then the per-user file
CONFIG_SEARCH_PATHS = [
    Path.cwd() / '.nftreg.yml',
    Path.cwd() / '.nftreg.json',
    Path.home() / '.nftreg' / 'config.yml',
    Path.home() / '.nftreg' / 'config.json',
]

# Environment variable prefix
ENV_PREFIX = 'NFTREG_'

# Options whose environment values are taken verbatim
STRING_OPTIONS = {
    'collection': {'name', 'symbol', 'base_uri', 'admin'},
    'cli': {'output_format'},
}

# Default configuration values
DEFAULT_CONFIG = {
    # Collection created for replays that do not define their own
    'collection': {
        'name': 'TestNFT',
        'symbol': 'TNFT',
        'max_supply': 100,
        'base_uri': 'https://example.com/metadata',
        'admin': 'admin',
    },

    # CLI behavior
    'cli': {
        'output_format': 'table',  # table, json, yaml
        'verbose': 0,
    },

    # Replay settings
    'replay': {
        'stop_on_error': False,
        'log_events': False,
    },
}

# Configuration profiles
PROFILES = {
    'production': {
        'cli': {'verbose': 0},
        'replay': {'stop_on_error': True, 'log_events': True},
    },
    'development': {
        'cli': {'verbose': 2},
        'replay': {'stop_on_error': False, 'log_events': True},
    },
}


class ConfigurationError(Exception):
    """Raised when a configuration source cannot be loaded."""
    pass


class ConfigurationManager:
    """Merges registry CLI settings from defaults, profile, file and environment."""

    def __init__(self, config_file: Optional[str] = None, profile: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit configuration file path
            profile: Configuration profile to load (production, development)
        """
        self.logger = logging.getLogger('nftreg.config')
        self.config_file = config_file
        self.profile = profile
        self._config_cache: Optional[Dict[str, Any]] = None
        self._config_sources: List[str] = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigurationError: unknown profile or unreadable explicit config file
        """
        if self._config_cache is not None:
            return self._config_cache

        self._config_sources = []
        configs = []

        # Built-in defaults
        configs.append(copy.deepcopy(DEFAULT_CONFIG))
        self._config_sources.append("defaults")

        # Named profile
        if self.profile:
            if self.profile not in PROFILES:
                raise ConfigurationError(f"Unknown configuration profile: {self.profile}")
            configs.append(PROFILES[self.profile])
            self._config_sources.append(f"profile:{self.profile}")
            self.logger.debug(f"Applied profile: {self.profile}")

        # Explicit file, else the first file found on the search path
        if self.config_file:
            configs.append(self._load_config_file(Path(self.config_file)))
            self._config_sources.append(f"file:{self.config_file}")
        else:
            for config_path in CONFIG_SEARCH_PATHS:
                if config_path.exists():
                    configs.append(self._load_config_file(config_path))
                    self._config_sources.append(f"file:{config_path}")
                    self.logger.debug(f"Loaded config from {config_path}")
                    break

        # NFTREG_* variables
        env_config = self._load_environment_variables()
        if env_config:
            configs.append(env_config)
            self._config_sources.append("environment")

        # Later sources override earlier ones
        self._config_cache = self._deep_merge(*configs)
        return self._config_cache

    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from file."""
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path, 'r') as f:
                if path.suffix == '.json':
                    data = json.load(f)
                elif path.suffix in ['.yml', '.yaml']:
                    data = yaml.safe_load(f)
                else:
                    raise ConfigurationError(f"Unknown config file format: {path}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            # NFTREG_COLLECTION_MAX_SUPPLY -> {'collection': {'max_supply': value}}
            section, _, option = key[len(ENV_PREFIX):].lower().partition('_')
            if not option:
                continue

            if option in STRING_OPTIONS.get(section, ()):
                env_config.setdefault(section, {})[option] = value
            else:
                env_config.setdefault(section, {})[option] = self._parse_env_value(value)

        return env_config

    def _parse_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Parse environment variable value to appropriate type."""
        # Try to parse as JSON first (for numbers and complex types)
        try:
            return json.loads(value)
        except ValueError:
            pass

        # Boolean values
        if value.lower() in ['true', 'yes']:
            return True
        elif value.lower() in ['false', 'no']:
            return False

        # Default to string
        return value

    def _deep_merge(self, *dicts: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple dictionaries."""
        result: Dict[str, Any] = {}

        for dictionary in dicts:
            for key, value in dictionary.items():
                if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                    result[key] = self._deep_merge(result[key], value)
                else:
                    result[key] = copy.deepcopy(value)

        return result

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'collection.max_supply')
            default: Default value if key not found
        """
        current: Any = self.load()

        for key in key_path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def set(self, key_path: str, value: Any):
        """Set configuration value by dot-notation path."""
        config = self.load()

        keys = key_path.split('.')
        current = config

        for key in keys[:-1]:
            current = current.setdefault(key, {})

        current[keys[-1]] = value

    def save(self, path: Optional[str] = None, format: str = 'yaml') -> Path:
        """
        Save current configuration to file.

        Args:
            path: File path to save to (default: project config file)
            format: Output format ('yaml' or 'json')
        """
        config = self.load()

        if not path:
            path = Path.cwd() / ('.nftreg.yml' if format == 'yaml' else '.nftreg.json')

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            if format == 'yaml':
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(config, f, indent=2)

        self.logger.info(f"Configuration saved to {path}")
        return path

    def validate(self) -> List[str]:
        """
        Validate current configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        config = self.load()
        errors = []

        collection = config.get('collection', {})
        max_supply = collection.get('max_supply')
        if isinstance(max_supply, bool) or not isinstance(max_supply, int) or max_supply <= 0:
            errors.append(f"collection.max_supply must be a positive integer: {max_supply}")
        for key in ('name', 'symbol', 'admin'):
            if not isinstance(collection.get(key), str) or not collection.get(key):
                errors.append(f"collection.{key} is required")
        if not isinstance(collection.get('base_uri', ''), str):
            errors.append("collection.base_uri must be a string")

        output_format = config.get('cli', {}).get('output_format')
        if output_format not in ['table', 'json', 'yaml']:
            errors.append(f"Invalid output format: {output_format}")

        return errors

    def get_sources(self) -> List[str]:
        """Get list of configuration sources that were loaded."""
        self.load()
        return list(self._config_sources)

    def reset(self):
        """Drop the merged configuration so the next access reloads it."""
        self._config_cache = None
        self._config_sources = []


def load_config(config_file: Optional[str] = None,
                profile: Optional[str] = None) -> Dict[str, Any]:
    """Convenience function to load configuration."""
    return ConfigurationManager(config_file, profile).load()
