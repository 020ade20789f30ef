"""
``flare`` command: inspect and validate layered configuration.

Usage examples:

  # Show the merged configuration of two files with APP_* overrides
  flare show -f config.toml --optional-file local.toml --env-prefix APP

  # Pass CLI overrides after --
  flare show -f config.json -- --database-port=6543

  # Validate against a schema document, JSON report
  flare validate -f config.yaml --schema schema.yaml --format json

Exit codes:
  0 = success (configuration valid)
  1 = schema validation errors found
  2 = load error (unreadable file, malformed content, bad arguments)
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

from .exceptions import FlareException
from .loader import load
from .log import configure_logging
from .models import CliSource, EnvSource, FileSource, LoadOptions
from .schema import Schema
from .sources.files import FileConfigurationSource
from .store import Config

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def split_passthrough(argv: List[str]) -> Tuple[List[str], List[str]]:
    """Split at the first ``--``; what follows goes to the CLI source."""
    if '--' in argv:
        index = argv.index('--')
        return argv[:index], argv[index + 1:]
    return argv, []


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-f", "--file", action="append", default=[], help="Required configuration file (repeatable)")
    common.add_argument("--optional-file", action="append", default=[], help="Optional configuration file (repeatable)")
    common.add_argument("--env-prefix", help="Load environment variables with this prefix")
    common.add_argument("--env-separator", default="_", help="Separator between environment key segments")
    common.add_argument("--dotenv", help=".env file read underneath the environment")
    common.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    common.add_argument("--log-level", default="WARNING", help="Logging level")
    common.add_argument("--log-json", action="store_true", help="Emit logs as JSON")

    ap = argparse.ArgumentParser(
        prog="flare",
        description="Load layered configuration from files, environment and CLI arguments",
        epilog="Arguments after -- are loaded as CLI overrides, e.g. -- --server-port=8080",
    )
    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("show", parents=[common], help="Print the merged configuration")
    validate = sub.add_parser("validate", parents=[common], help="Validate against a schema document")
    validate.add_argument("--schema", required=True, help="Schema document (JSON, TOML or YAML)")
    return ap


def options_from_args(args: argparse.Namespace, passthrough: List[str]) -> LoadOptions:
    files = [FileSource(path=p) for p in args.file]
    files += [FileSource(path=p, required=False) for p in args.optional_file]
    env = None
    if args.env_prefix:
        env = EnvSource(prefix=args.env_prefix, separator=args.env_separator, dotenv_path=args.dotenv)
    cli = CliSource(args=passthrough) if passthrough else None
    return LoadOptions(files=files, env=env, cli=cli)


def load_schema(path: str) -> Schema:
    return Schema.from_dict(FileConfigurationSource(path).read_document())


def render_config(config: Config, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(config.to_dict(), indent=2)
    lines = [f"{key} = {json.dumps(value)}" for key, value in sorted(config.items(), key=lambda item: item[0])]
    return "\n".join(lines)


def run_show(config: Config, args: argparse.Namespace) -> int:
    print(render_config(config, args.format))
    return EXIT_OK


def run_validate(config: Config, args: argparse.Namespace) -> int:
    schema = load_schema(args.schema)
    config.set_schema(schema)
    result = config.validate()

    if args.format == "json":
        print(json.dumps(result.to_dict(), indent=2))
    else:
        for error in result.errors:
            print(f" - ERROR {error.kind.value} | {error.path} | {error.message}")
        for warning in result.warnings:
            print(f" - WARNING | {warning.path} | {warning.message}")
        print(f"VALID: {result.is_valid}")

    return EXIT_OK if result.is_valid else EXIT_INVALID


def main(argv: Optional[List[str]] = None) -> int:
    own_args, passthrough = split_passthrough(list(sys.argv[1:] if argv is None else argv))
    args = build_parser().parse_args(own_args)
    configure_logging(args.log_level, use_json=args.log_json)

    try:
        with load(options_from_args(args, passthrough)) as config:
            if args.command == "validate":
                return run_validate(config, args)
            return run_show(config, args)
    except FlareException as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e.message}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
