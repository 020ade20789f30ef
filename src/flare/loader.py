"""
Load a configuration store from files, environment variables and CLI args.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .models import CliSource, EnvSource, FileSource, LoadOptions
from .sources import (
    CliConfigurationSource,
    ConfigurationSource,
    EnvironmentConfigurationSource,
    FileConfigurationSource,
)
from .store import Config

logger = logging.getLogger(__name__)

FileLike = Union[str, Path, FileSource]


def build_sources(options: LoadOptions) -> List[ConfigurationSource]:
    """Create the sources described by ``options``: files, then env, then CLI."""
    sources: List[ConfigurationSource] = [FileConfigurationSource.from_options(f) for f in options.files]
    if options.env is not None:
        sources.append(EnvironmentConfigurationSource.from_options(options.env))
    if options.cli is not None:
        sources.append(CliConfigurationSource.from_options(options.cli))
    return sources


def load_sources(sources: Sequence[ConfigurationSource]) -> Config:
    """Create a store populated from ``sources`` in priority order."""
    config = Config()
    try:
        config.load_sources(sources)
    except Exception:
        config.close()
        raise
    logger.info(f"Configuration loaded from {len(sources)} source(s) ({len(config)} keys)")
    return config


def load(
    options: Optional[LoadOptions] = None,
    *,
    files: Optional[Sequence[FileLike]] = None,
    env: Optional[EnvSource] = None,
    cli: Optional[Union[CliSource, Sequence[str]]] = None,
) -> Config:
    """
    Load configuration with precedence CLI > environment > files > defaults.

    Either pass a ``LoadOptions`` or the individual keyword arguments.

    Raises:
        IoError: If a required file is missing or unreadable.
        ParseError: If a required file is malformed.
    """
    if options is None:
        if cli is not None and not isinstance(cli, CliSource):
            cli = CliSource(args=list(cli))
        options = LoadOptions(files=list(files or []), env=env, cli=cli)
    elif files is not None or env is not None or cli is not None:
        raise ValueError("Pass either LoadOptions or individual sources, not both")

    return load_sources(build_sources(options))
