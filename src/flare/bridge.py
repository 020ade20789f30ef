"""
Bridge between command-line frameworks and flare.

A framework hands over the flags it parsed for a command; the bridge turns
them into ``--key=value`` arguments for the CLI source, loads the full
pipeline (files, environment, flags), validates against an optional schema
and runs the command handler with the resulting store.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .loader import load
from .models import CliSource, EnvSource, FileSource
from .schema import Schema
from .sources.cli import parse_cli_value
from .store import Config
from .value import Value

logger = logging.getLogger(__name__)


@dataclass
class FlagContext:
    """Flags and raw arguments parsed by a command-line framework."""
    flags: Dict[str, str] = field(default_factory=dict)
    args: List[str] = field(default_factory=list)
    command: Optional[str] = None


class FlagLink(BaseModel):
    """Maps a framework flag (and its short form) onto a configuration key."""
    model_config = ConfigDict(frozen=True)

    flag_name: str
    config_key: str
    short: Optional[str] = None

    def matches(self, flag: str) -> bool:
        return flag == self.flag_name or (self.short is not None and flag == self.short)


class BridgeOptions(BaseModel):
    """Sources and schema used when a command loads its configuration."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    config_files: List[FileSource] = Field(default_factory=list)
    env_source: Optional[EnvSource] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")
    flag_links: List[FlagLink] = Field(default_factory=list)

    def link_for(self, flag: str) -> Optional[FlagLink]:
        for link in self.flag_links:
            if link.matches(flag):
                return link
        return None


def flags_to_args(ctx: FlagContext, options: BridgeOptions) -> List[str]:
    """Translate framework flags to CLI source arguments, raw args appended."""
    args = []
    for flag, value in ctx.flags.items():
        link = options.link_for(flag)
        key = link.config_key if link is not None else flag
        args.append(f"--{key}={value}")
    args.extend(ctx.args)
    return args


def init_with_flags(ctx: FlagContext, options: Optional[BridgeOptions] = None) -> Config:
    """Load files, environment and the context's flags into a new store."""
    options = options or BridgeOptions()
    return load(
        files=options.config_files,
        env=options.env_source,
        cli=CliSource(args=flags_to_args(ctx, options)),
    )


@dataclass
class CommandContext:
    """What a command handler receives: the flag context and a loaded store."""
    flags: FlagContext
    config: Config
    options: BridgeOptions

    def get_config_value(self, key: str) -> Optional[Value]:
        """Value for ``key``, preferring a flag given for it on the command line."""
        for flag, raw in self.flags.flags.items():
            link = self.options.link_for(flag)
            if flag == key or (link is not None and link.config_key == key):
                return parse_cli_value(raw)
        return self.config.get(key)

    def get_string(self, key: str, *default: Any) -> str:
        return self.config.get_string(key, *default)

    def get_int(self, key: str, *default: Any) -> int:
        return self.config.get_int(key, *default)

    def get_float(self, key: str, *default: Any) -> float:
        return self.config.get_float(key, *default)

    def get_bool(self, key: str, *default: Any) -> bool:
        return self.config.get_bool(key, *default)

    def get_array(self, key: str, *default: Any) -> List[Value]:
        return self.config.get_array(key, *default)

    def get_map(self, key: str, *default: Any) -> Dict[str, Value]:
        return self.config.get_map(key, *default)


Handler = Callable[[CommandContext], Any]


def config_middleware(ctx: FlagContext, options: BridgeOptions, handler: Handler) -> Any:
    """
    Load and validate configuration, then run ``handler``.

    The store is closed when the handler returns.

    Raises:
        ConfigValidationError: If a schema is configured and validation fails;
            the handler is not called.
    """
    config = init_with_flags(ctx, options)
    with config:
        if options.schema_ is not None:
            config.set_schema(options.schema_)
            result = config.validate()
            if result.has_errors():
                for error in result.errors:
                    logger.error(f"Configuration validation failed: {error.path}: {error.message}")
                result.raise_for_errors()

        return handler(CommandContext(flags=ctx, config=config, options=options))


@dataclass
class ConfigAwareCommand:
    """A command whose handler runs with configuration already loaded."""
    name: str
    about: str
    options: BridgeOptions
    handler: Handler

    def run(self, ctx: FlagContext) -> Any:
        logger.debug(f"Running command {self.name}")
        return config_middleware(ctx, self.options, self.handler)


def create_config_command(
    name: str,
    about: str,
    handler: Handler,
    options: Optional[BridgeOptions] = None,
    flag_links: Optional[List[FlagLink]] = None,
) -> ConfigAwareCommand:
    """Create a command; ``flag_links`` extend the links in ``options``."""
    options = options or BridgeOptions()
    if flag_links:
        options = options.model_copy(update={"flag_links": [*options.flag_links, *flag_links]})
    return ConfigAwareCommand(name=name, about=about, options=options, handler=handler)
