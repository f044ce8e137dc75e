"""eventful: attach an in-process event emitter to any object."""

from __future__ import annotations

from eventful.attach import CAPABILITIES, Host, emitter_of, eventful
from eventful.config import ConfigError, EmitterOptions, load_config, load_options
from eventful.emitter import (
    CapabilityCollisionError,
    Emitter,
    EventfulError,
    InvalidHostError,
    ListenerTypeError,
    Subscription,
)
from eventful.hooks import (
    default_error,
    default_trace,
    ignore_error,
    log_error,
    log_trace,
    reset_default_hooks,
    set_default_hooks,
)
from eventful.mixin import EmitterMixin

__all__ = [
    "CAPABILITIES",
    "CapabilityCollisionError",
    "ConfigError",
    "Emitter",
    "EmitterMixin",
    "EmitterOptions",
    "EventfulError",
    "Host",
    "InvalidHostError",
    "ListenerTypeError",
    "Subscription",
    "default_error",
    "default_trace",
    "emitter_of",
    "eventful",
    "ignore_error",
    "load_config",
    "load_options",
    "log_error",
    "log_trace",
    "reset_default_hooks",
    "set_default_hooks",
]
