"""
Shared fixtures for flare tests.
"""

import logging
import textwrap

import pytest

from flare import Config


@pytest.fixture
def write_config(tmp_path):
    """Write a dedented configuration file under tmp_path and return its path."""
    def _write(name: str, content: str):
        path = tmp_path / name
        path.write_text(textwrap.dedent(content).lstrip(), encoding='utf-8')
        return path
    return _write


@pytest.fixture
def config():
    """An empty store, closed after the test."""
    with Config() as cfg:
        yield cfg


@pytest.fixture(autouse=True)
def reset_flare_logger():
    """Remove handlers installed by configure_logging between tests."""
    yield
    logger = logging.getLogger("flare")
    for handler in list(logger.handlers):
        if getattr(handler, '_flare_handler', False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)
