"""EmitterMixin: the subclassing alternative to :func:`eventful.eventful`."""

from __future__ import annotations

from typing import Any, ClassVar

from eventful.config import EmitterOptions
from eventful.emitter import Emitter, Subscription
from eventful.types import EventKey, Listener


class EmitterMixin:
    """Mixin that adds event registration and emission.

    Usage::

        class Upload(EmitterMixin):
            emitter_options = EmitterOptions(strict=True)

            def finish(self):
                self.emit("done", self)

        upload = Upload()
        upload.on("done", lambda u: print(u))

    The emitter is created on first use, so subclasses need no ``__init__``
    cooperation.  Hooks receive the instance as the host.
    """

    emitter_options: ClassVar[EmitterOptions | None] = None

    def _init_emitter(self) -> Emitter:
        """Create the emitter explicitly, e.g. from a subclass ``__init__``."""
        emitter = Emitter(self, self.emitter_options)
        self._emitter = emitter
        return emitter

    @property
    def emitter(self) -> Emitter:
        emitter = getattr(self, "_emitter", None)
        if emitter is None:
            emitter = self._init_emitter()
        return emitter

    def on(self, event: EventKey, listener: Listener) -> Subscription:
        """Register *listener* for *event*."""
        return self.emitter.on(event, listener)

    def once(self, event: EventKey, listener: Listener) -> Subscription:
        return self.emitter.once(event, listener)

    def off(self, event: EventKey, listener: Listener) -> bool:
        return self.emitter.off(event, listener)

    def has(self, event: EventKey) -> bool:
        return self.emitter.has(event)

    def emit(self, event: EventKey, *args: Any, **kwargs: Any) -> None:
        """Fire all listeners registered for *event*."""
        self.emitter.emit(event, *args, **kwargs)

    async def emit_async(self, event: EventKey, *args: Any, **kwargs: Any) -> None:
        await self.emitter.emit_async(event, *args, **kwargs)
