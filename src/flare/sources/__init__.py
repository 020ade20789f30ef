"""
Configuration sources: files, environment variables and CLI arguments.
"""

from .base import ConfigurationSource, FILE_PRIORITY, ENVIRONMENT_PRIORITY, CLI_PRIORITY
from .files import FileConfigurationSource, flatten_document
from .environment import EnvironmentConfigurationSource, parse_env_value, env_key_to_path
from .cli import CliConfigurationSource, parse_cli_value, cli_key_to_path

__all__ = [
    'ConfigurationSource',
    'FILE_PRIORITY',
    'ENVIRONMENT_PRIORITY',
    'CLI_PRIORITY',
    'FileConfigurationSource',
    'flatten_document',
    'EnvironmentConfigurationSource',
    'parse_env_value',
    'env_key_to_path',
    'CliConfigurationSource',
    'parse_cli_value',
    'cli_key_to_path',
]
