"""eventful(): turn an arbitrary value into an event emitter in place.

The capabilities are bound onto the host without requiring it to inherit
from anything.  For ordinary instances they live on a private subclass that
is swapped in as the host's ``__class__``, which keeps ``vars(host)`` and
dataclass fields untouched; the subclass still reports the original class
through ``host.__class__`` so dataclass ``==`` and ``repr`` behave as before.
Values that refuse a class swap (functions, instances of builtin types) get
them as plain attributes instead.  A class host carries them as class-only
attributes, so its instances stay plain and can be enhanced on their own.
"""

from __future__ import annotations

import types
from typing import Any

from eventful.config import EmitterOptions
from eventful.emitter import CapabilityCollisionError, Emitter, InvalidHostError

CAPABILITIES = ("on", "once", "off", "emit", "emit_async", "has")

_EMITTER_ATTR = "_eventful_emitter"

# Values that can never carry attributes of their own.
_IMMUTABLE = (type(None), bool, int, float, complex, str, bytes, tuple, frozenset)


class Host:
    """Empty host created when :func:`eventful` is called without one."""

    def __repr__(self) -> str:
        return f"<eventful.Host at {id(self):#x}>"


def eventful(host: Any = None, options: EmitterOptions | None = None, **overrides: Any) -> Any:
    """Attach emitter capabilities to *host* and return the same object.

    Keyword *overrides* (``strict``, ``trace``, ``error``) are applied on top
    of *options*.  Raises :class:`InvalidHostError` for values that cannot
    carry attributes and :class:`CapabilityCollisionError` when the host
    already has one of the capability names; in both cases the host is left
    unchanged.
    """
    if host is None:
        host = Host()
    elif isinstance(host, _IMMUTABLE):
        raise InvalidHostError(f"eventful() expects an object, got {type(host).__name__}")

    for name in CAPABILITIES:
        if hasattr(host, name):
            raise CapabilityCollisionError(f"object already has attribute {name!r}")

    opts = options or EmitterOptions()
    if overrides:
        opts = opts.merge(**overrides)

    emitter = Emitter(host, opts)
    attrs: dict[str, Any] = {name: getattr(emitter, name) for name in CAPABILITIES}
    attrs[_EMITTER_ATTR] = emitter

    if isinstance(host, type):
        _set_attributes(host, {name: _ClassAttribute(value) for name, value in attrs.items()})
    elif not _swap_class(host, attrs):
        _set_attributes(host, attrs)
    return host


def emitter_of(host: Any) -> Emitter | None:
    """Return the :class:`Emitter` behind an enhanced host, or ``None``."""
    emitter = getattr(host, _EMITTER_ATTR, None)
    return emitter if isinstance(emitter, Emitter) else None


class _ClassAttribute:
    """Capability stored on a class host; its instances do not inherit it."""

    def __init__(self, value: Any) -> None:
        self._value = value

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is not None:
            raise AttributeError("emitter capabilities belong to the class, not its instances")
        return self._value


def _swap_class(host: Any, attrs: dict[str, Any]) -> bool:
    cls = type(host)

    def body(ns: dict[str, Any]) -> None:
        ns["__slots__"] = ()
        ns["__module__"] = cls.__module__
        ns["__qualname__"] = cls.__qualname__
        ns["__class__"] = property(lambda self: cls)
        for name, value in attrs.items():
            ns[name] = staticmethod(value) if callable(value) else value

    try:
        enhanced = types.new_class(cls.__name__, (cls,), exec_body=body)
        host.__class__ = enhanced
    except TypeError:
        return False
    return True


def _set_attributes(host: Any, attrs: dict[str, Any]) -> None:
    applied: list[str] = []
    try:
        for name, value in attrs.items():
            setattr(host, name, value)
            applied.append(name)
    except (AttributeError, TypeError) as exc:
        for name in applied:
            delattr(host, name)
        raise InvalidHostError(
            f"eventful() cannot attach to {type(host).__name__}: {exc}"
        ) from exc
