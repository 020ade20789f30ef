"""
File configuration source: JSON, TOML and YAML documents.

Nested objects are flattened into key paths, so ``{"database": {"host": x}}``
is stored under ``("database", "host")`` and is reachable as
``database.host`` or through the ``database_host`` alias.
"""

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from ..exceptions import IoError, ParseError, TypeMismatchError
from ..models import FileFormat, FileSource
from ..paths import KeyPath
from ..value import fits_int64, to_value
from .base import ConfigurationSource, FILE_PRIORITY

logger = logging.getLogger(__name__)


def convert_node(node: Any) -> Any:
    """Convert a parsed document node into a configuration value."""
    if isinstance(node, bool) or node is None:
        return node
    if isinstance(node, int):
        # integers outside int64 degrade to floats
        return node if fits_int64(node) else float(node)
    if isinstance(node, (list, tuple)):
        return [convert_node(item) for item in node]
    if isinstance(node, dict):
        return {str(key): convert_node(item) for key, item in node.items()}
    return to_value(node)


def flatten_document(document: Dict[str, Any], prefix: KeyPath = ()) -> Dict[KeyPath, Any]:
    """
    Recursively flatten a parsed document.

    Each object level extends the key path; arrays are kept whole with their
    elements converted (objects inside arrays become maps).
    """
    flattened: Dict[KeyPath, Any] = {}
    for key, node in document.items():
        path = prefix + (str(key),)
        if isinstance(node, dict):
            flattened.update(flatten_document(node, path))
        else:
            flattened[path] = convert_node(node)
    return flattened


class FileConfigurationSource(ConfigurationSource):
    """JSON/TOML/YAML file configuration source."""

    def __init__(
        self,
        file_path: Union[str, Path],
        required: bool = True,
        format: Union[str, FileFormat] = FileFormat.AUTO,
        priority: int = FILE_PRIORITY,
    ):
        self.file_path = Path(file_path)
        self.required = required
        self.format = FileFormat.parse(format)
        self.priority = priority

    @classmethod
    def from_options(cls, options: FileSource, priority: int = FILE_PRIORITY) -> "FileConfigurationSource":
        return cls(options.path, options.required, options.format, priority)

    @property
    def name(self) -> str:
        return str(self.file_path)

    def resolved_format(self) -> FileFormat:
        if self.format is FileFormat.AUTO:
            return FileFormat.detect(self.file_path)
        return self.format

    def load(self) -> Dict[KeyPath, Any]:
        """Load configuration from the file."""
        document = self.read_document()
        try:
            flattened = flatten_document(document)
        except TypeMismatchError as e:
            raise ParseError(
                f"Unsupported value in configuration file {self.file_path}: {e.message}",
                source=str(self.file_path),
                cause=e,
            ) from e
        logger.debug(f"Loaded {len(flattened)} keys from {self.file_path}")
        return flattened

    def get_priority(self) -> int:
        return self.priority

    def signature(self) -> Optional[Tuple[int, int]]:
        """Modification signature of the file, or None when it does not exist."""
        try:
            stat = self.file_path.stat()
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def read_document(self) -> Dict[str, Any]:
        """Parse the file into its raw document, a mapping at the root."""
        if not self.file_path.exists():
            raise IoError(f"Configuration file not found: {self.file_path}", path=str(self.file_path))

        fmt = self.resolved_format()
        try:
            if fmt is FileFormat.TOML:
                with open(self.file_path, 'rb') as f:
                    document = tomllib.load(f)
            else:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    if fmt is FileFormat.YAML:
                        document = yaml.safe_load(f)
                    else:
                        document = json.load(f)
        except OSError as e:
            raise IoError(
                f"Error reading configuration file: {self.file_path}",
                path=str(self.file_path),
                cause=e,
            ) from e
        except UnicodeDecodeError as e:
            raise ParseError(
                f"Configuration file is not valid UTF-8: {self.file_path}",
                source=str(self.file_path),
                cause=e,
            ) from e
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Invalid JSON in configuration file: {self.file_path}",
                source=str(self.file_path),
                context={"line": e.lineno, "column": e.colno, "error": e.msg},
                cause=e,
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise ParseError(
                f"Invalid TOML in configuration file: {self.file_path}",
                source=str(self.file_path),
                context={"error": str(e)},
                cause=e,
            ) from e
        except yaml.YAMLError as e:
            raise ParseError(
                f"Invalid YAML in configuration file: {self.file_path}",
                source=str(self.file_path),
                context={"yaml_error": str(e)},
                cause=e,
            ) from e

        if document is None and fmt is FileFormat.YAML:
            document = {}
        if not isinstance(document, dict):
            raise ParseError(
                f"Configuration file {self.file_path} must contain a mapping at the root",
                source=str(self.file_path),
            )
        return document
