"""
Flare Configuration Management

Hierarchical configuration from files, environment variables and
command-line arguments with dotted-path access, type coercion, schema
validation and polling hot reload.
"""

from .exceptions import (
    FlareException,
    ConfigurationError,
    ParseError,
    IoError,
    MissingKeyError,
    TypeMismatchError,
    InvalidPathError,
    InvalidArrayIndexError,
    InvalidFormatError,
    SchemaValidationError,
    ConfigValidationError
)

from .value import Value, ValueKind, kind_of, to_value, clone_value

from .paths import KeyPath, parse_path, format_path, flatten_path

from .models import FileFormat, FileSource, EnvSource, CliSource, LoadOptions

from .sources import (
    ConfigurationSource,
    FileConfigurationSource,
    EnvironmentConfigurationSource,
    CliConfigurationSource
)

from .schema import Schema, SchemaKind, ObjectSchemaBuilder

from .validation_result import SchemaErrorKind, ValidationIssue, ValidationWarning, ValidationResult

from .validation import Validator, validate_config

from .store import Config

from .hot_reload import HotReloadWatcher

from .loader import load, load_sources

from .builder import ConfigurationBuilder, load_configuration_from_file, create_configuration_builder

from .log import configure_logging

__version__ = "0.3.0"

__all__ = [
    # Errors
    'FlareException',
    'ConfigurationError',
    'ParseError',
    'IoError',
    'MissingKeyError',
    'TypeMismatchError',
    'InvalidPathError',
    'InvalidArrayIndexError',
    'InvalidFormatError',
    'SchemaValidationError',
    'ConfigValidationError',

    # Values and paths
    'Value',
    'ValueKind',
    'kind_of',
    'to_value',
    'clone_value',
    'KeyPath',
    'parse_path',
    'format_path',
    'flatten_path',

    # Options and sources
    'FileFormat',
    'FileSource',
    'EnvSource',
    'CliSource',
    'LoadOptions',
    'ConfigurationSource',
    'FileConfigurationSource',
    'EnvironmentConfigurationSource',
    'CliConfigurationSource',

    # Schema and validation
    'Schema',
    'SchemaKind',
    'ObjectSchemaBuilder',
    'SchemaErrorKind',
    'ValidationIssue',
    'ValidationWarning',
    'ValidationResult',
    'Validator',
    'validate_config',

    # Store
    'Config',
    'HotReloadWatcher',
    'load',
    'load_sources',
    'ConfigurationBuilder',
    'load_configuration_from_file',
    'create_configuration_builder',

    # Logging
    'configure_logging',
]
