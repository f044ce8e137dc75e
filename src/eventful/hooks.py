"""Process-wide default hooks.

Every emitter resolves its trace and error hooks when it needs them: its own
option wins, otherwise the current process-wide default is used.  Replacing a
default with :func:`set_default_hooks` is therefore observed immediately by
every emitter that did not override it, including ones created earlier.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from eventful.logging import get_logger
from eventful.types import ErrorContext, ErrorHook, TraceHook

_log = get_logger("emitter")


def noop_trace(host: Any, action: str, payload: Mapping[str, Any]) -> None:
    """Built-in default trace hook: does nothing."""


def log_trace(host: Any, action: str, payload: Mapping[str, Any]) -> None:
    """Trace hook that writes one DEBUG line per action."""
    _log.debug("%s %r on %s", action, payload.get("event"), type(host).__name__)


def log_error(error: BaseException, context: ErrorContext) -> None:
    """Built-in default error hook: log the failure with its traceback."""
    _log.error(
        "listener %r for event %r failed",
        getattr(context["listener"], "__qualname__", context["listener"]),
        context["event"],
        exc_info=(type(error), error, error.__traceback__),
    )


def ignore_error(error: BaseException, context: ErrorContext) -> None:
    """Error hook that discards listener failures."""


@dataclass
class _Defaults:
    trace: TraceHook = noop_trace
    error: ErrorHook = log_error


_defaults = _Defaults()


def default_trace() -> TraceHook:
    return _defaults.trace


def default_error() -> ErrorHook:
    return _defaults.error


def set_default_hooks(
    trace: TraceHook | None = None,
    error: ErrorHook | None = None,
) -> None:
    """Replace the process-wide trace and/or error hook.

    Arguments left as ``None`` keep their current value.
    """
    if trace is not None:
        if not callable(trace):
            raise TypeError("trace hook must be callable")
        _defaults.trace = trace
    if error is not None:
        if not callable(error):
            raise TypeError("error hook must be callable")
        _defaults.error = error


def reset_default_hooks() -> None:
    """Restore the built-in defaults (no-op trace, logging error hook)."""
    _defaults.trace = noop_trace
    _defaults.error = log_error


# Named hooks accepted by the YAML configuration.
TRACE_HOOKS: dict[str, TraceHook] = {"none": noop_trace, "log": log_trace}
ERROR_HOOKS: dict[str, ErrorHook] = {"log": log_error, "ignore": ignore_error}
