"""
Environment variable configuration source.

``APP__DATABASE__HOST=db`` with prefix ``APP`` and separator ``__`` becomes
``database.host = "db"``.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import dotenv_values

from ..coercion import parse_float, parse_int
from ..models import EnvSource
from ..paths import KeyPath
from .base import ConfigurationSource, ENVIRONMENT_PRIORITY

logger = logging.getLogger(__name__)


def parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    if value in ('true', 'TRUE'):
        return True
    if value in ('false', 'FALSE'):
        return False

    parsed_int = parse_int(value)
    if parsed_int is not None:
        return parsed_int

    parsed_float = parse_float(value)
    if parsed_float is not None:
        return parsed_float

    return value


def env_key_to_path(raw_key: str, separator: str) -> KeyPath:
    """
    Convert the part of a variable name after the prefix to a key path.

    ``DB__HOST`` with separator ``__`` -> ``("db", "host")``
    """
    return tuple(raw_key.lower().split(separator.lower()))


class EnvironmentConfigurationSource(ConfigurationSource):
    """Environment variable configuration source."""

    def __init__(
        self,
        prefix: str,
        separator: str = "_",
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[Union[str, Path]] = None,
        priority: int = ENVIRONMENT_PRIORITY,
    ):
        if not separator:
            raise ValueError("Environment separator must not be empty")
        self.prefix = prefix
        self.separator = separator
        self.environ = environ
        self.dotenv_path = Path(dotenv_path) if dotenv_path else None
        self.priority = priority

    @classmethod
    def from_options(cls, options: EnvSource, priority: int = ENVIRONMENT_PRIORITY) -> "EnvironmentConfigurationSource":
        return cls(options.prefix, options.separator, options.environ, options.dotenv_path, priority)

    @property
    def name(self) -> str:
        return f"env:{self.prefix}"

    def _variables(self) -> Dict[str, str]:
        variables: Dict[str, str] = {}
        if self.dotenv_path is not None:
            if self.dotenv_path.exists():
                loaded = dotenv_values(self.dotenv_path)
                variables.update({k: v for k, v in loaded.items() if v is not None})
                logger.debug(f"Read {len(loaded)} variables from {self.dotenv_path}")
            else:
                logger.warning(f".env file not found: {self.dotenv_path}")
        # the real environment wins over .env entries
        variables.update(os.environ if self.environ is None else self.environ)
        return variables

    def load(self) -> Dict[KeyPath, Any]:
        """Load configuration from environment variables."""
        config: Dict[KeyPath, Any] = {}
        marker = (self.prefix + self.separator).upper()

        for key, value in self._variables().items():
            if len(key) <= len(marker) or not key.upper().startswith(marker):
                continue

            path = env_key_to_path(key[len(marker):], self.separator)
            if not all(path):
                logger.debug(f"Skipping environment variable with empty path segment: {key}")
                continue
            config[path] = parse_env_value(value)

        logger.debug(f"Loaded {len(config)} keys from environment prefix {self.prefix!r}")
        return config

    def get_priority(self) -> int:
        return self.priority
