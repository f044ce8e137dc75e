"""Tests for config.py: options, YAML loading, validation and env overrides."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest
import yaml

from eventful.config import (
    ConfigError,
    EmitterOptions,
    EventfulConfig,
    load_config,
    load_options,
    save_config,
    serialize_options,
    validate_config,
)
from eventful.hooks import ignore_error, log_error, log_trace, noop_trace


def _write_yaml(tmp_path: Path, data: object) -> Path:
    p = tmp_path / "eventful.yaml"
    p.write_text(yaml.dump(data, default_flow_style=False))
    return p


class TestEmitterOptions:
    def test_defaults(self):
        options = EmitterOptions()
        assert options.strict is False
        assert options.trace is None
        assert options.error is None

    def test_frozen(self):
        options = EmitterOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.strict = True

    def test_merge_returns_copy(self):
        base = EmitterOptions()
        merged = base.merge(strict=True, trace=log_trace)
        assert merged.strict is True
        assert merged.trace is log_trace
        assert base.strict is False


class TestLoadConfig:
    def test_explicit_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("EVENTFUL_STRICT", raising=False)
        p = _write_yaml(tmp_path, {"strict": True, "trace": "log", "error": "ignore"})
        config = load_config(str(p))
        assert config.strict is True
        assert config.trace == "log"
        assert config.error == "ignore"
        assert config.source_path == str(p)

    def test_cwd_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("EVENTFUL_STRICT", raising=False)
        _write_yaml(tmp_path, {"strict": True})
        monkeypatch.chdir(tmp_path)
        assert load_config().strict is True

    def test_no_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("EVENTFUL_STRICT", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        config = load_config()
        assert config == EventfulConfig()

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("EVENTFUL_STRICT", raising=False)
        p = tmp_path / "eventful.yaml"
        p.write_text("")
        assert load_config(str(p)).strict is False

    def test_non_mapping_rejected(self, tmp_path):
        p = _write_yaml(tmp_path, ["strict"])
        with pytest.raises(ConfigError, match="mapping"):
            load_config(str(p))

    def test_invalid_values_rejected(self, tmp_path):
        p = _write_yaml(tmp_path, {"strict": "maybe", "trace": "loud"})
        with pytest.raises(ConfigError) as excinfo:
            load_config(str(p))
        assert "strict" in str(excinfo.value)
        assert "trace" in str(excinfo.value)

    def test_log_level_normalized(self, tmp_path):
        p = _write_yaml(tmp_path, {"log_level": "debug"})
        assert load_config(str(p)).log_level == "DEBUG"

    def test_log_file_read(self, tmp_path):
        p = _write_yaml(tmp_path, {"log_file": "~/logs/eventful.log"})
        assert load_config(str(p)).log_file == "~/logs/eventful.log"


class TestEnvOverrides:
    @pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
    def test_truthy(self, tmp_path, monkeypatch, value):
        monkeypatch.setenv("EVENTFUL_STRICT", value)
        p = _write_yaml(tmp_path, {"strict": False})
        assert load_config(str(p)).strict is True

    def test_falsy_overrides_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EVENTFUL_STRICT", "off")
        p = _write_yaml(tmp_path, {"strict": True})
        assert load_config(str(p)).strict is False

    def test_garbage_rejected(self, monkeypatch):
        monkeypatch.setenv("EVENTFUL_STRICT", "sometimes")
        config = EventfulConfig()
        with pytest.raises(ConfigError, match="EVENTFUL_STRICT"):
            config.apply_env_overrides()


class TestValidate:
    def test_valid(self):
        assert validate_config({"strict": True, "trace": "none", "error": "log"}) == []

    def test_unknown_key(self):
        errors = validate_config({"verbose": True})
        assert errors == ["Unknown key: 'verbose'"]

    def test_bad_error_hook_name(self):
        errors = validate_config({"error": "explode"})
        assert len(errors) == 1
        assert "error must be one of" in errors[0]

    def test_bad_log_level(self):
        assert validate_config({"log_level": "CHATTY"})

    def test_bad_log_file(self):
        assert validate_config({"log_file": 3}) == ["log_file must be a path string"]

    def test_non_string_hook_name(self):
        errors = validate_config({"trace": ["log"]})
        assert len(errors) == 1
        assert errors[0].startswith("trace must be one of")


class TestToOptions:
    def test_named_hooks_resolved(self, tmp_path, monkeypatch):
        monkeypatch.delenv("EVENTFUL_STRICT", raising=False)
        p = _write_yaml(tmp_path, {"strict": True, "trace": "none", "error": "ignore"})
        options = load_options(str(p))
        assert options == EmitterOptions(strict=True, trace=noop_trace, error=ignore_error)

    def test_default_names_leave_hooks_unset(self):
        options = EventfulConfig().to_options()
        assert options.trace is None
        assert options.error is None


class TestSerialize:
    def test_serialize_named_hooks(self):
        options = EmitterOptions(strict=True, trace=log_trace, error=log_error)
        assert serialize_options(options) == {"strict": True, "trace": "log", "error": "log"}

    def test_serialize_defaults(self):
        assert serialize_options(EmitterOptions()) == {
            "strict": False,
            "trace": "default",
            "error": "default",
        }

    def test_unnamed_hook_rejected(self):
        with pytest.raises(ConfigError):
            serialize_options(EmitterOptions(trace=lambda *a: None))

    def test_save_and_reload(self, tmp_path, monkeypatch):
        monkeypatch.delenv("EVENTFUL_STRICT", raising=False)
        target = tmp_path / "nested" / "eventful.yaml"
        save_config(EventfulConfig(strict=True, error="ignore"), str(target))
        reloaded = load_config(str(target))
        assert reloaded.strict is True
        assert reloaded.error == "ignore"
        assert reloaded.trace == "default"
        assert reloaded.log_file is None

    def test_save_keeps_log_file(self, tmp_path):
        target = tmp_path / "eventful.yaml"
        save_config(EventfulConfig(log_level="INFO", log_file="eventful.log"), str(target))
        assert yaml.safe_load(target.read_text())["log_file"] == "eventful.log"
        assert load_config(str(target)).log_file == "eventful.log"
