"""Shared test fixtures and helpers."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from eventful.hooks import reset_default_hooks


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Keep eventful log output away from the test run's stderr."""
    logger = logging.getLogger("eventful")
    saved_handlers = logger.handlers[:]
    saved_level = logger.level
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    yield
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


@pytest.fixture(autouse=True)
def _reset_hooks():
    """Each test starts and ends with the built-in process-wide hooks."""
    reset_default_hooks()
    yield
    reset_default_hooks()


@pytest.fixture
def error_hook() -> MagicMock:
    return MagicMock(name="error_hook")


@pytest.fixture
def trace_hook() -> MagicMock:
    return MagicMock(name="trace_hook")
