"""
Configuration builder for creating Config instances.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .loader import load_sources
from .models import FileFormat
from .schema import Schema
from .sources import (
    CLI_PRIORITY,
    ENVIRONMENT_PRIORITY,
    FILE_PRIORITY,
    CliConfigurationSource,
    ConfigurationSource,
    EnvironmentConfigurationSource,
    FileConfigurationSource,
)
from .store import Config


class ConfigurationBuilder:
    """
    Builder for creating Config instances with multiple sources.

    Supports files, environment variables, CLI arguments, custom sources,
    defaults, schema attachment and hot reload.
    """

    def __init__(self):
        self._sources: List[ConfigurationSource] = []
        self._defaults: Dict[str, Any] = {}
        self._schema: Optional[Schema] = None
        self._validate: bool = False
        self._enable_hot_reload: bool = False
        self._reload_callback: Optional[Callable[[Config], None]] = None

    def add_file(
        self,
        path: Union[str, Path],
        required: bool = True,
        format: Union[str, FileFormat] = FileFormat.AUTO,
        priority: int = FILE_PRIORITY,
    ) -> 'ConfigurationBuilder':
        """
        Add a JSON, TOML or YAML configuration file.

        Args:
            path: Path to the configuration file
            required: Whether a missing or malformed file aborts the load
            format: File format, detected from the extension by default
            priority: Priority of this source (higher = more important)
        """
        self._sources.append(FileConfigurationSource(path, required, format, priority))
        return self

    def add_environment(
        self,
        prefix: str,
        separator: str = "_",
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Union[str, Path]] = None,
        priority: int = ENVIRONMENT_PRIORITY,
    ) -> 'ConfigurationBuilder':
        """
        Add environment variable configuration source.

        Args:
            prefix: Variable prefix, e.g. ``APP`` for ``APP_DATABASE_HOST``
            separator: Separator between prefix and path segments
            environ: Environment mapping to read instead of the process environment
            dotenv_path: Optional .env file read underneath the environment
            priority: Priority of this source (higher = more important)
        """
        self._sources.append(EnvironmentConfigurationSource(prefix, separator, environ, dotenv_path, priority))
        return self

    def add_cli(self, args: Sequence[str], priority: int = CLI_PRIORITY) -> 'ConfigurationBuilder':
        """Add command-line arguments."""
        self._sources.append(CliConfigurationSource(args, priority))
        return self

    def add_source(self, source: ConfigurationSource) -> 'ConfigurationBuilder':
        """Add a custom configuration source."""
        self._sources.append(source)
        return self

    def with_default(self, key: str, value: Any) -> 'ConfigurationBuilder':
        self._defaults[key] = value
        return self

    def with_schema(self, schema: Schema, validate: bool = True) -> 'ConfigurationBuilder':
        """
        Attach a schema to the built store.

        Args:
            schema: Schema whose defaults are registered in the store
            validate: Raise ConfigValidationError from build() when invalid
        """
        self._schema = schema
        self._validate = validate
        return self

    def enable_hot_reload(
        self,
        enable: bool = True,
        callback: Optional[Callable[[Config], None]] = None,
    ) -> 'ConfigurationBuilder':
        """
        Enable or disable hot reload of configuration files.

        Args:
            enable: Whether to snapshot files for ``check_and_reload``
            callback: Called with the store after every reload
        """
        self._enable_hot_reload = enable
        self._reload_callback = callback
        return self

    def build(self) -> Config:
        """
        Build the configuration instance with all added sources.

        Returns:
            Config with all sources loaded

        Raises:
            ConfigValidationError: If a schema was attached with validation
                enabled and the configuration does not satisfy it
        """
        config = load_sources(self._sources.copy())
        try:
            for key, value in self._defaults.items():
                config.set_default(key, value)
            if self._schema is not None:
                config.set_schema(self._schema)
                if self._validate:
                    config.validate().raise_for_errors()
            if self._enable_hot_reload:
                config.enable_hot_reload(self._reload_callback)
        except Exception:
            config.close()
            raise
        return config


def load_configuration_from_file(
    file_path: Union[str, Path],
    env_prefix: Optional[str] = None,
    enable_hot_reload: bool = False,
) -> Config:
    """
    Load configuration from a single file with optional environment overrides.

    Args:
        file_path: Path to the configuration file
        env_prefix: Environment variable prefix; no environment source when omitted
        enable_hot_reload: Whether to enable hot reload of the file

    Returns:
        Config instance
    """
    builder = ConfigurationBuilder().add_file(file_path)
    if env_prefix:
        builder.add_environment(env_prefix)
    return builder.enable_hot_reload(enable_hot_reload).build()


def create_configuration_builder() -> ConfigurationBuilder:
    """Create a new configuration builder."""
    return ConfigurationBuilder()
