"""
Command-line argument configuration source.

Grammar::

    --key=value     --key value     --flag      (flag -> true)
    -k value        -k              (-k -> true)
    --                               (end of options)

Dashes inside long keys become path separators: ``--database-host`` sets
``database.host``.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..coercion import parse_float, parse_int
from ..exceptions import InvalidPathError
from ..models import CliSource
from ..paths import KeyPath, format_path, has_index, parse_path
from .base import ConfigurationSource, CLI_PRIORITY
from .files import convert_node

logger = logging.getLogger(__name__)


def parse_cli_value(value: str) -> Any:
    """Parse CLI argument value into the appropriate configuration value."""
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

    if (value.startswith('[') and value.endswith(']')) or (value.startswith('{') and value.endswith('}')):
        try:
            return convert_node(json.loads(value))
        except json.JSONDecodeError:
            logger.debug(f"CLI value looks like JSON but does not parse, keeping string: {value!r}")

    return value


def cli_key_to_path(key: str) -> KeyPath:
    """
    Convert a flag name to a key path: ``database-host`` -> ``("database", "host")``.

    Raises:
        InvalidPathError: If the flag addresses an array element.
    """
    path = parse_path(key.replace('-', '.'))
    if has_index(path):
        raise InvalidPathError(format_path(path), "array indexes cannot be set from the command line")
    return path


def _takes_value(token: str) -> bool:
    """A following token is a value unless it looks like another flag."""
    return not token.startswith('-') or parse_float(token) is not None


class CliConfigurationSource(ConfigurationSource):
    """Command-line argument configuration source."""

    def __init__(self, args: Sequence[str], priority: int = CLI_PRIORITY):
        self.args = list(args)
        self.priority = priority
        self.positional: List[str] = []

    @classmethod
    def from_options(cls, options: CliSource, priority: int = CLI_PRIORITY) -> "CliConfigurationSource":
        return cls(options.args, priority)

    @property
    def name(self) -> str:
        return "cli"

    def load(self) -> Dict[KeyPath, Any]:
        """Parse the arguments into key path -> value pairs."""
        config: Dict[KeyPath, Any] = {}
        positional: List[str] = []
        args = self.args
        i = 0

        while i < len(args):
            arg = args[i]
            following: Optional[str] = args[i + 1] if i + 1 < len(args) else None

            if arg == '--':
                positional.extend(args[i + 1:])
                break

            if arg.startswith('--'):
                body = arg[2:]
                if '=' in body:
                    key, value = body.split('=', 1)
                    config[cli_key_to_path(key)] = parse_cli_value(value)
                elif following is not None and _takes_value(following):
                    config[cli_key_to_path(body)] = parse_cli_value(following)
                    i += 1
                else:
                    config[cli_key_to_path(body)] = True
            elif arg.startswith('-') and len(arg) > 1 and parse_float(arg) is None:
                flag = arg[1:]
                if following is not None and _takes_value(following):
                    config[cli_key_to_path(flag)] = parse_cli_value(following)
                    i += 1
                else:
                    config[cli_key_to_path(flag)] = True
            else:
                positional.append(arg)

            i += 1

        self.positional = positional
        logger.debug(f"Parsed {len(config)} keys and {len(positional)} positional arguments from CLI")
        return config

    def get_priority(self) -> int:
        return self.priority
