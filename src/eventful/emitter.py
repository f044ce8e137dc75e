"""Emitter: listener registry with synchronous and asynchronous emission.

The registry maps each event key to an insertion-ordered, duplicate-free
collection of listeners.  An event only has an entry while it has at least
one listener.

Usage::

    emitter = Emitter()
    unsubscribe = emitter.on("saved", lambda doc: print(doc))
    emitter.emit("saved", doc)
    await emitter.emit_async("saved", doc)
    unsubscribe()
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import itertools
from collections.abc import Awaitable, Coroutine, Hashable
from typing import Any

from eventful.config import EmitterOptions
from eventful.hooks import default_error, default_trace
from eventful.logging import get_logger
from eventful.types import EmitPayload, EventKey, Listener, SubscribePayload

_log = get_logger("emitter")


class EventfulError(Exception):
    """Base class for errors raised by eventful itself."""


class ListenerTypeError(EventfulError, TypeError):
    """Raised when a listener is not callable."""


class InvalidHostError(EventfulError, TypeError):
    """Raised when a value cannot carry emitter capabilities."""


class CapabilityCollisionError(EventfulError):
    """Raised when a host already defines one of the capability names."""


class Subscription:
    """Single-use handle removing one (event, listener) registration.

    Calling the handle releases the registration and returns ``True``; any
    later call returns ``False``.  A handle also goes inert once its
    registration is removed by other means (``off``, another handle), so it
    never removes a listener that was subscribed again afterwards.
    """

    __slots__ = ("_emitter", "_event", "_listener", "_serial", "_released")

    def __init__(self, emitter: Emitter, event: EventKey, listener: Listener, serial: int) -> None:
        self._emitter = emitter
        self._event = event
        self._listener = listener
        self._serial = serial
        self._released = False

    @property
    def event(self) -> EventKey:
        return self._event

    @property
    def listener(self) -> Listener:
        return self._listener

    @property
    def active(self) -> bool:
        if self._released:
            return False
        return self._emitter._serial_of(self._event, self._listener) == self._serial

    def __call__(self) -> bool:
        if self._released:
            return False
        self._released = True
        return self._emitter._release(self._event, self._listener, self._serial)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self()

    def __repr__(self) -> str:
        state = "active" if self.active else "released"
        return f"<Subscription {self._event!r} {state}>"


class Emitter:
    """Listener registry bound to a *host* value.

    The host is what hooks receive as the emitting object; it defaults to the
    emitter itself.  *options* are fixed for the emitter's lifetime.
    """

    def __init__(self, host: Any = None, options: EmitterOptions | None = None) -> None:
        self._host = self if host is None else host
        self._options = options or EmitterOptions()
        # event -> {listener identity: (listener, registration serial)}, insertion ordered
        self._registry: dict[EventKey, dict[Hashable, tuple[Listener, int]]] = {}
        self._serials = itertools.count(1)
        self._background_tasks: set[asyncio.Task[Any]] = set()

    @property
    def host(self) -> Any:
        return self._host

    @property
    def options(self) -> EmitterOptions:
        return self._options

    # -- Subscription --

    def on(self, event: EventKey, listener: Listener) -> Subscription:
        """Register *listener* for *event*; registering it twice is a no-op."""
        _check_listener(listener)
        listeners = self._registry.setdefault(event, {})
        key = _identity(listener)
        entry = listeners.get(key)
        if entry is None:
            entry = listeners[key] = (listener, next(self._serials))
        serial = entry[1]
        self._trace("on", SubscribePayload(event=event, listener=listener))
        return Subscription(self, event, listener, serial)

    def once(self, event: EventKey, listener: Listener) -> Subscription:
        """Register *listener* to run on the next emission of *event* only."""
        _check_listener(listener)

        @functools.wraps(listener)
        def fire_once(*args: Any, **kwargs: Any) -> Any:
            # A stale dispatch snapshot may still hold this wrapper.
            if not handle():
                return None
            return listener(*args, **kwargs)

        handle = self.on(event, fire_once)
        return handle

    def off(self, event: EventKey, listener: Listener) -> bool:
        """Remove *listener* from *event*. Returns ``False`` if it was not registered."""
        _check_listener(listener)
        removed = self._remove(event, listener)
        self._trace("off", SubscribePayload(event=event, listener=listener))
        return removed

    def has(self, event: EventKey) -> bool:
        return event in self._registry

    def listeners(self, event: EventKey) -> list[Listener]:
        """Snapshot of the listeners for *event*, in subscription order."""
        return [listener for listener, _ in self._registry.get(event, {}).values()]

    def events(self) -> list[EventKey]:
        """Events that currently have at least one listener."""
        return list(self._registry)

    def __contains__(self, event: EventKey) -> bool:
        return self.has(event)

    # -- Emission --

    def emit(self, event: EventKey, *args: Any, **kwargs: Any) -> None:
        """Call every listener of *event* in subscription order.

        A failing listener is reported to the error hook and the remaining
        listeners still run, unless the emitter is strict: then the failure
        is re-raised and the remaining listeners are skipped.
        """
        listeners = self.listeners(event)
        self._trace(
            "emit",
            EmitPayload(listeners=listeners, event=event, args=args, kwargs=kwargs),
        )
        for listener in listeners:
            try:
                result = listener(*args, **kwargs)
            except Exception as exc:
                self._report(exc, event, listener)
                if self._options.strict:
                    _log.debug("strict emit of %r aborted by %r", event, listener)
                    raise
                continue
            if inspect.isawaitable(result):
                self._schedule(event, listener, result)

    async def emit_async(self, event: EventKey, *args: Any, **kwargs: Any) -> None:
        """Run every listener of *event* concurrently and wait for them.

        Each listener runs in its own task; awaitable results are awaited.
        Non-strict emitters wait for all listeners and never raise listener
        failures.  Strict emitters raise the first failure and leave the
        other listeners running.  Cancelling the caller does not cancel the
        listeners.
        """
        listeners = self.listeners(event)
        self._trace(
            "emit_async",
            EmitPayload(listeners=listeners, event=event, args=args, kwargs=kwargs),
        )
        if not listeners:
            return

        tasks = [
            self._track_task(self._settle(event, listener, args, kwargs))
            for listener in listeners
        ]

        if not self._options.strict:
            await asyncio.wait(tasks)
            # Listener failures come back as results; only a failing hook raises.
            hook_errors = [exc for exc in (task.exception() for task in tasks) if exc is not None]
            if hook_errors:
                raise hook_errors[0]
            return

        for next_done in asyncio.as_completed(tasks):
            failure = await next_done
            if failure is not None:
                _log.debug("strict emit_async of %r failed", event)
                raise failure

    # -- Internals --

    def _track_task(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Create a task and keep it referenced until it finishes."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _settle(
        self,
        event: EventKey,
        listener: Listener,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Exception | None:
        """Run one listener to completion, returning its failure if any."""
        try:
            result = listener(*args, **kwargs)
        except Exception as exc:
            self._report(exc, event, listener)
            return exc
        if inspect.isawaitable(result):
            return await self._complete(event, listener, result)
        return None

    async def _complete(
        self, event: EventKey, listener: Listener, awaitable: Awaitable[Any]
    ) -> Exception | None:
        try:
            await awaitable
        except Exception as exc:
            self._report(exc, event, listener)
            return exc
        return None

    def _schedule(self, event: EventKey, listener: Listener, awaitable: Awaitable[Any]) -> None:
        """Finish an awaitable returned to the synchronous ``emit``."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            _log.warning(
                "listener %r for event %r returned an awaitable outside an event loop; "
                "use emit_async",
                listener,
                event,
            )
            return
        self._track_task(self._complete(event, listener, awaitable))

    def _trace(self, action: str, payload: SubscribePayload | EmitPayload) -> None:
        hook = self._options.trace or default_trace()
        hook(self.host, action, payload)

    def _report(self, error: Exception, event: EventKey, listener: Listener) -> None:
        hook = self._options.error or default_error()
        hook(error, {"host": self.host, "event": event, "listener": listener})

    def _serial_of(self, event: EventKey, listener: Listener) -> int | None:
        listeners = self._registry.get(event)
        entry = listeners.get(_identity(listener)) if listeners else None
        return entry[1] if entry else None

    def _remove(self, event: EventKey, listener: Listener) -> bool:
        listeners = self._registry.get(event)
        key = _identity(listener)
        if not listeners or key not in listeners:
            return False
        del listeners[key]
        if not listeners:
            del self._registry[event]
        return True

    def _release(self, event: EventKey, listener: Listener, serial: int) -> bool:
        if self._serial_of(event, listener) != serial:
            return False
        self._remove(event, listener)
        self._trace("off", SubscribePayload(event=event, listener=listener))
        return True


def _check_listener(listener: Any) -> None:
    if not callable(listener):
        raise ListenerTypeError(f"listener must be callable, got {type(listener).__name__}")


def _identity(listener: Listener) -> Hashable:
    """Registry key for *listener*: its identity, bound methods by receiver and function."""
    if inspect.ismethod(listener):
        return (id(listener.__self__), id(listener.__func__))
    return id(listener)
