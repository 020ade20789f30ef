"""
Structured logging for flare.

Modules log through the standard ``logging`` hierarchy under ``flare``.
This module supplies JSON and human readable formatters, a helper to wire
them up, and a context variable naming the source currently being loaded so
every record emitted during a load can be traced back to it.
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "flare"

source_var: ContextVar[Optional[str]] = ContextVar('flare_source', default=None)

_STANDARD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


def _build_record(record: logging.LogRecord) -> Dict[str, Any]:
    """Create a structured log record"""
    data = {
        'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        'level': record.levelname,
        'logger': record.name,
        'message': record.getMessage(),
        'source': getattr(record, 'source', None) or source_var.get(),
    }

    extra = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS and k != 'source'}
    if extra:
        data['extra'] = extra

    if record.exc_info and record.exc_info[1] is not None:
        exc = record.exc_info[1]
        data['exception'] = {
            'type': type(exc).__name__,
            'message': str(exc),
            'module': type(exc).__module__
        }

    # Remove None values to keep logs clean
    return {k: v for k, v in data.items() if v is not None}


class JSONLogFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(_build_record(record), default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development/debugging"""

    def format(self, record: logging.LogRecord) -> str:
        data = _build_record(record)
        base_msg = f"[{data['timestamp']}] {data['level']} {data['logger']}: {data['message']}"

        if data.get('source'):
            base_msg += f" [source={data['source']}]"

        if data.get('extra'):
            extra_str = ', '.join(f"{k}={v}" for k, v in data['extra'].items())
            base_msg += f" [{extra_str}]"

        if 'exception' in data:
            base_msg += f" [{data['exception']['type']}: {data['exception']['message']}]"

        return base_msg


@contextmanager
def source_context(name: str):
    """Context manager tagging log records with the source being loaded"""
    token = source_var.set(name)
    try:
        yield name
    finally:
        source_var.reset(token)


def get_current_source() -> Optional[str]:
    """Get the source currently being loaded, if any"""
    return source_var.get()


def configure_logging(
    level: Union[int, str] = logging.INFO,
    use_json: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    stream=None,
) -> logging.Logger:
    """
    Configure the ``flare`` logger.

    Replaces handlers previously installed by this function, so calling it
    again reconfigures instead of duplicating output.
    """
    formatter = JSONLogFormatter() if use_json else HumanReadableFormatter()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(logger.handlers):
        if getattr(handler, '_flare_handler', False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler._flare_handler = True
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler._flare_handler = True
        logger.addHandler(file_handler)

    return logger
