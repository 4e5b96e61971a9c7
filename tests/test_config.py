"""
Tests for look_compat/config.py and look_compat/utils/logging.py.

What we test
------------
load_config():
  - The committed config/default.toml loads and validates.
  - Explicit path; missing path raises FileNotFoundError.
  - local.toml next to the config is deep-merged over it.
  - LOOK_COMPAT_* environment overrides.
  - Validation: market must be US, repeat_calls >= 2, log level known.

_JsonFormatter:
  - One JSON object per record, with extra= fields at the top level.

configure_logging():
  - Console handler writes to stderr, never stdout.
  - log_file adds a file handler; repeated calls do not stack handlers.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest
from pydantic import ValidationError

from look_compat.config import AppConfig, LoggingConfig, load_config
from look_compat.taxonomy.face_taxonomy import PreferenceMode
from look_compat.utils.logging import _JsonFormatter, configure_logging


def _write_toml(path, body: str):
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for var in ("LOOK_COMPAT_LOG_LEVEL", "LOOK_COMPAT_LOG_FILE", "LOOK_COMPAT_DEBUG"):
        monkeypatch.delenv(var, raising=False)


class TestLoadConfig:
    def test_default_file(self):
        config = load_config()
        assert isinstance(config, AppConfig)
        assert config.engine.market == "US"
        assert config.engine.default_preference_mode == PreferenceMode.STRUCTURE
        assert config.evaluation.repeat_calls == 2

    def test_explicit_path(self, tmp_path):
        path = _write_toml(
            tmp_path / "custom.toml",
            '[engine]\ndefault_preference_mode = "vibe"\ndefault_locale = "en-US"\n'
            '[logging]\nlevel = "debug"\n',
        )
        config = load_config(path)
        assert config.engine.default_preference_mode == PreferenceMode.VIBE
        assert config.engine.default_locale == "en-US"
        assert config.logging.level == "DEBUG"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_local_override(self, tmp_path):
        path = _write_toml(
            tmp_path / "default.toml",
            '[engine]\ndefault_locale = "en"\n[evaluation]\nrepeat_calls = 2\n',
        )
        _write_toml(tmp_path / "local.toml", "[evaluation]\nrepeat_calls = 5\n")
        config = load_config(path)
        assert config.evaluation.repeat_calls == 5
        assert config.engine.default_locale == "en"

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = _write_toml(tmp_path / "c.toml", "[project]\ndebug = false\n")
        monkeypatch.setenv("LOOK_COMPAT_LOG_LEVEL", "warning")
        monkeypatch.setenv("LOOK_COMPAT_DEBUG", "true")
        config = load_config(path)
        assert config.logging.level == "WARNING"
        assert config.debug is True

    def test_project_debug(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", "[project]\ndebug = true\n")
        assert load_config(path).debug is True


class TestValidation:
    def test_non_us_market(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", '[engine]\nmarket = "JP"\n')
        with pytest.raises(ValidationError):
            load_config(path)

    def test_repeat_calls_minimum(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", "[evaluation]\nrepeat_calls = 1\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_unknown_log_level(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", '[logging]\nlevel = "LOUD"\n')
        with pytest.raises(ValidationError):
            load_config(path)

    def test_unknown_mode(self, tmp_path):
        path = _write_toml(tmp_path / "c.toml", '[engine]\ndefault_preference_mode = "glam"\n')
        with pytest.raises(ValidationError):
            load_config(path)


class TestJsonFormatter:
    def test_emits_json_with_extras(self):
        record = logging.LogRecord(
            name="look_compat.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="scored %s",
            args=("s-1",),
            exc_info=None,
        )
        record.sample_id = "s-1"
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "look_compat.test"
        assert payload["msg"] == "scored s-1"
        assert payload["sample_id"] == "s-1"
        assert "pathname" not in payload


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_console_on_stderr(self):
        configure_logging(LoggingConfig(level="warning"))
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_file_handler_without_stacking(self, tmp_path):
        log_file = tmp_path / "logs" / "look_compat.log"
        config = LoggingConfig(level="INFO", log_file=str(log_file), json_format=True)
        configure_logging(config)
        configure_logging(config)
        root = logging.getLogger()
        assert len(root.handlers) == 2
        logging.getLogger("look_compat.test").info("gated", extra={"sample_id": "s-9"})
        for handler in root.handlers:
            handler.flush()
        payload = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert payload["msg"] == "gated"
        assert payload["sample_id"] == "s-9"
