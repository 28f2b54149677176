"""
Configuration loader for the task registry.

This module provides configuration management with:
- Multiple configuration sources (dicts, JSON, YAML, TOML and .env files)
- Environment variable overrides
- Schema validation through pydantic
- Configuration merging by source priority
"""

import os
import json
import yaml
import toml
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from .logging import get_logger, setup_logging
from .errors import ConfigurationError


logger = get_logger("task-registry.config")

ENV_PREFIX = "TASK_REGISTRY_"
ENV_NESTING = "__"


class RegistryVariant(str, Enum):
    """Admission policy a registry is built with."""
    REJECT = "reject"
    FIFO = "fifo"
    PRIORITY = "priority"


class ConfigSource(BaseModel):
    """Configuration source definition."""
    path: Optional[Path] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 0
    source_type: str = "dict"

    model_config = ConfigDict(arbitrary_types_allowed=True)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    directory: Optional[Path] = None
    enable_sentry: bool = False
    sentry_dsn: Optional[str] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        """Validate log format."""
        if v not in ("json", "console"):
            raise ValueError(f"Invalid log format: {v}")
        return v

    @field_validator('directory')
    @classmethod
    def expand_directory(cls, v):
        """Expand a leading ~ in the log directory."""
        return v.expanduser() if v is not None else v


class RegistryConfig(BaseModel):
    """Main registry configuration."""
    name: str = "default"
    variant: RegistryVariant = RegistryVariant.REJECT
    maximum_size: int = Field(default=10, gt=0)
    reject_duplicate_ids: bool = False

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(validate_assignment=True)


class ConfigLoader:
    """Configuration loader with multiple source support."""

    def __init__(self, env_prefix: str = ENV_PREFIX):
        """Initialize configuration loader."""
        self.env_prefix = env_prefix
        self._sources: List[ConfigSource] = []
        self._config: Optional[RegistryConfig] = None

    def add_source(
        self,
        source: Union[str, Path, Dict[str, Any]],
        priority: int = 0,
        source_type: Optional[str] = None
    ) -> None:
        """
        Add configuration source.

        Args:
            source: Configuration source (file path or dict)
            priority: Source priority (higher wins)
            source_type: Source type (auto-detected if None)
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not source_type:
                source_type = self._detect_source_type(path)

            self._sources.append(ConfigSource(
                path=path,
                priority=priority,
                source_type=source_type
            ))
        else:
            self._sources.append(ConfigSource(
                data=source,
                priority=priority,
                source_type="dict"
            ))

        # Lowest priority first so later merges win
        self._sources.sort(key=lambda s: s.priority)

    def _detect_source_type(self, path: Path) -> str:
        """Detect configuration file type."""
        suffix = path.suffix.lower()
        if suffix == ".json":
            return "json"
        elif suffix in (".yaml", ".yml"):
            return "yaml"
        elif suffix == ".toml":
            return "toml"
        elif suffix == ".env" or path.name == ".env":
            return "env"
        else:
            raise ConfigurationError(f"Unknown config file type: {suffix}")

    def load(self) -> RegistryConfig:
        """
        Load configuration from all sources, then the environment.

        Returns:
            Merged and validated configuration
        """
        merged_data: Dict[str, Any] = {}

        for source in self._sources:
            data = self._load_source(source)
            merged_data = self._deep_merge(merged_data, data)

        env_data = self._load_env_vars()
        merged_data = self._deep_merge(merged_data, env_data)

        try:
            self._config = RegistryConfig(**merged_data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"{field}: {error['msg']}")

            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                cause=e
            ) from e

        logger.info("configuration_loaded", sources=len(self._sources))
        return self._config

    def _load_source(self, source: ConfigSource) -> Dict[str, Any]:
        """Load data from a configuration source."""
        if source.path is None:
            return source.data

        if not source.path.exists():
            logger.warning("config_file_not_found", path=str(source.path))
            return {}

        content = source.path.read_text()

        try:
            if source.source_type == "json":
                return json.loads(content)
            elif source.source_type == "yaml":
                return yaml.safe_load(content) or {}
            elif source.source_type == "toml":
                return toml.loads(content)
            elif source.source_type == "env":
                return self._parse_env_file(content)
        except (json.JSONDecodeError, yaml.YAMLError, toml.TomlDecodeError) as e:
            raise ConfigurationError(
                f"Failed to parse {source.path}",
                cause=e
            ) from e

        raise ConfigurationError(f"Unknown source type: {source.source_type}")

    def _parse_env_file(self, content: str) -> Dict[str, Any]:
        """Parse .env file format."""
        values = {}

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            values[key.strip()] = value.strip().strip('"').strip("'")

        return self._nest(values)

    def _load_env_vars(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        return self._nest({
            key: value for key, value in os.environ.items()
            if key.startswith(self.env_prefix)
        })

    def _nest(self, values: Dict[str, str]) -> Dict[str, Any]:
        """Turn PREFIX_SECTION__KEY=value pairs into nested dictionaries."""
        result: Dict[str, Any] = {}

        for key, value in values.items():
            if key.startswith(self.env_prefix):
                key = key[len(self.env_prefix):]

            parts = key.lower().split(ENV_NESTING)
            current = result

            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = value

        return result

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get_config(self) -> RegistryConfig:
        """Get current configuration."""
        if self._config is None:
            raise ConfigurationError("Configuration not loaded")
        return self._config


def load_config(
    config_paths: Optional[List[Union[str, Path]]] = None,
    extra_config: Optional[Dict[str, Any]] = None
) -> RegistryConfig:
    """
    Load configuration from the given files, extra values and the environment.

    Args:
        config_paths: Configuration files, later paths win
        extra_config: Extra configuration merged over the files

    Returns:
        Loaded configuration
    """
    loader = ConfigLoader()

    for i, path in enumerate(config_paths or []):
        loader.add_source(path, priority=20 + i)

    if extra_config:
        loader.add_source(extra_config, priority=100)

    return loader.load()


def configure_logging(config: RegistryConfig, **kwargs) -> Dict[str, Any]:
    """
    Apply the logging section of a configuration.

    Keyword arguments are passed to :func:`setup_logging` and override the
    values taken from ``config.logging``.
    """
    options = {
        "log_level": config.logging.level,
        "log_dir": config.logging.directory,
        "enable_json": config.logging.format == "json",
        "enable_sentry": config.logging.enable_sentry,
        "sentry_dsn": config.logging.sentry_dsn,
    }
    options.update(kwargs)
    return setup_logging(**options)


__all__ = [
    'RegistryVariant',
    'RegistryConfig',
    'LoggingConfig',
    'ConfigLoader',
    'load_config',
    'configure_logging',
]
