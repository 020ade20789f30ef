"""
Base class for configuration sources.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..paths import KeyPath

FILE_PRIORITY = 100
ENVIRONMENT_PRIORITY = 200
CLI_PRIORITY = 300


class ConfigurationSource(ABC):
    """Abstract base class for configuration sources."""

    # optional sources are skipped when they fail to load
    required: bool = True

    @abstractmethod
    def load(self) -> Dict[KeyPath, Any]:
        """Load key path -> value pairs from the source."""
        pass

    @abstractmethod
    def get_priority(self) -> int:
        """Get the priority of this source (higher number = higher priority)."""
        pass

    @property
    def name(self) -> str:
        return type(self).__name__
