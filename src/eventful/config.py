"""Emitter options and the YAML configuration loader."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from eventful.hooks import ERROR_HOOKS, TRACE_HOOKS
from eventful.logging import setup_logging
from eventful.types import ErrorHook, TraceHook

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(Exception):
    """Raised when eventful.yaml is invalid."""


@dataclass(frozen=True)
class EmitterOptions:
    """Per-emitter settings, fixed once the emitter is created.

    ``trace``/``error`` left as ``None`` resolve to the process-wide
    defaults in :mod:`eventful.hooks` each time they are needed.
    """

    strict: bool = False
    trace: TraceHook | None = None
    error: ErrorHook | None = None

    def merge(self, **overrides: Any) -> EmitterOptions:
        """Return a copy with *overrides* applied."""
        return dataclasses.replace(self, **overrides)


@dataclass
class EventfulConfig:
    """Contents of an ``eventful.yaml`` file."""

    strict: bool = False
    trace: str = "default"  # "default" | "none" | "log"
    error: str = "default"  # "default" | "log" | "ignore"
    log_level: str = "WARNING"
    log_file: str | None = None
    source_path: str | None = None

    def to_options(self) -> EmitterOptions:
        return EmitterOptions(
            strict=self.strict,
            trace=TRACE_HOOKS.get(self.trace),
            error=ERROR_HOOKS.get(self.error),
        )

    def apply_logging(self, stderr: bool = True) -> None:
        """Configure the ``eventful`` logger from ``log_level`` and ``log_file``."""
        setup_logging(self.log_level, self.log_file, stderr=stderr)

    def apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if val := os.environ.get("EVENTFUL_STRICT"):
            lowered = val.strip().lower()
            if lowered in _TRUE:
                self.strict = True
            elif lowered in _FALSE:
                self.strict = False
            else:
                raise ConfigError(f"EVENTFUL_STRICT must be a boolean flag, got {val!r}")


def validate_config(data: dict[str, Any]) -> list[str]:
    """Validate raw YAML data, returning a list of error messages (empty = valid)."""
    errors: list[str] = []

    known = {"strict", "trace", "error", "log_level", "log_file"}
    for key in data:
        if key not in known:
            errors.append(f"Unknown key: '{key}'")

    if "strict" in data and not isinstance(data["strict"], bool):
        errors.append("strict must be true or false")

    trace = data.get("trace", "default")
    if not isinstance(trace, str) or (trace != "default" and trace not in TRACE_HOOKS):
        valid = ", ".join(["default", *TRACE_HOOKS])
        errors.append(f"trace must be one of {valid}, got '{trace}'")

    error = data.get("error", "default")
    if not isinstance(error, str) or (error != "default" and error not in ERROR_HOOKS):
        valid = ", ".join(["default", *ERROR_HOOKS])
        errors.append(f"error must be one of {valid}, got '{error}'")

    level = data.get("log_level", "WARNING")
    if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
        errors.append(f"log_level must be one of {', '.join(sorted(_LOG_LEVELS))}")

    if data.get("log_file") is not None and not isinstance(data["log_file"], str):
        errors.append("log_file must be a path string")

    return errors


def load_config(path: str | None = None) -> EventfulConfig:
    """Load config from explicit path, eventful.yaml in CWD, or ~/.config/eventful/config.yaml."""
    candidates = []
    if path:
        candidates.append(Path(path))
    else:
        candidates.append(Path.cwd() / "eventful.yaml")
        candidates.append(Path.home() / ".config" / "eventful" / "config.yaml")

    config = EventfulConfig()
    for candidate in candidates:
        if candidate.exists():
            config = _parse_config(candidate)
            break
    else:
        if path:
            raise ConfigError(f"Config file not found: {path}")

    config.apply_env_overrides()
    return config


def load_options(path: str | None = None, setup_logs: bool = False) -> EmitterOptions:
    """Load emitter options from config; with *setup_logs*, also configure logging."""
    config = load_config(path)
    if setup_logs:
        config.apply_logging()
    return config.to_options()


def _parse_config(path: Path) -> EventfulConfig:
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    errors = validate_config(data)
    if errors:
        raise ConfigError(f"{path}: " + "; ".join(errors))

    return EventfulConfig(
        strict=data.get("strict", False),
        trace=data.get("trace", "default"),
        error=data.get("error", "default"),
        log_level=data.get("log_level", "WARNING").upper(),
        log_file=data.get("log_file"),
        source_path=str(path),
    )


def _hook_name(hook: Any, table: dict[str, Any]) -> str:
    if hook is None:
        return "default"
    for name, candidate in table.items():
        if candidate is hook:
            return name
    raise ConfigError(f"hook {hook!r} has no configuration name")


def serialize_options(options: EmitterOptions) -> dict[str, Any]:
    """Serialize options built from named hooks back to their YAML form."""
    return {
        "strict": options.strict,
        "trace": _hook_name(options.trace, TRACE_HOOKS),
        "error": _hook_name(options.error, ERROR_HOOKS),
    }


def save_config(config: EventfulConfig, path: str | None = None) -> None:
    """Write *config* as YAML. Defaults to config.source_path, falls back to ./eventful.yaml."""
    target = Path(path or config.source_path or "eventful.yaml")
    data = {
        "strict": config.strict,
        "trace": config.trace,
        "error": config.error,
        "log_level": config.log_level,
    }
    if config.log_file:
        data["log_file"] = config.log_file
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    config.source_path = str(target)
