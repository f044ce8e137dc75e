"""Logging helpers for eventful.

The library never configures logging on import: the ``eventful`` logger gets
a ``NullHandler`` and nothing else.  Applications route eventful's records
either by attaching their own handlers or through :func:`setup_logging`,
which ``load_options(setup_logs=True)`` drives from the ``log_level`` and
``log_file`` keys of ``eventful.yaml``.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_ROOT = "eventful"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_LOG_BYTES = 1024 * 1024  # 1 MB
_BACKUP_COUNT = 2

logging.getLogger(_ROOT).addHandler(logging.NullHandler())


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    stderr: bool = True,
) -> logging.Logger:
    """Route eventful's records at *level* to stderr and/or a rotating file.

    Handlers installed by an earlier call are closed first, so calling this
    again reconfigures rather than duplicates output.  Unknown level names
    fall back to WARNING.  With neither destination the logger is left
    silent.
    """
    logger = logging.getLogger(_ROOT)
    _close_handlers(logger)
    logger.setLevel(level_number(level))

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)
    handlers = _build_handlers(log_file, stderr) or [logging.NullHandler()]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def level_number(level: str) -> int:
    """Numeric value of a level name such as ``"debug"``; WARNING if unknown."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.WARNING


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``eventful`` namespace."""
    return logging.getLogger(f"{_ROOT}.{name}")


def _close_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)


def _build_handlers(log_file: str | None, stderr: bool) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if stderr:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(path, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT)
        )
    return handlers
