"""Typed shapes shared by the emitter, hooks and configuration."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping
from typing import Any, Protocol, TypedDict

EventKey = Hashable
Listener = Callable[..., Any]
TraceHook = Callable[[Any, str, Mapping[str, Any]], None]


class ErrorContext(TypedDict):
    host: Any
    event: EventKey
    listener: Listener


ErrorHook = Callable[[BaseException, ErrorContext], None]


class SubscribePayload(TypedDict):
    """Trace payload for the ``on`` and ``off`` actions."""

    event: EventKey
    listener: Listener


class EmitPayload(TypedDict):
    """Trace payload for the ``emit`` and ``emit_async`` actions."""

    listeners: list[Listener]
    event: EventKey
    args: tuple[Any, ...]
    kwargs: dict[str, Any]


class Unsubscribe(Protocol):
    def __call__(self) -> bool: ...


class Eventful(Protocol):
    """Static view of a host enhanced by :func:`eventful.eventful`."""

    def on(self, event: EventKey, listener: Listener) -> Unsubscribe: ...

    def once(self, event: EventKey, listener: Listener) -> Unsubscribe: ...

    def off(self, event: EventKey, listener: Listener) -> bool: ...

    def emit(self, event: EventKey, *args: Any, **kwargs: Any) -> None: ...

    async def emit_async(self, event: EventKey, *args: Any, **kwargs: Any) -> None: ...

    def has(self, event: EventKey) -> bool: ...
