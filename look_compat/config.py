"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``LOOK_COMPAT_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Scoring weights and gate thresholds are NOT configuration: they are
compiled-in policy constants (see ``compatibility/tables.py`` and
``policy/thresholds.py``).  This file only covers the runtime surface:
engine defaults, logging, and the evaluation harness.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from look_compat.taxonomy.face_taxonomy import PreferenceMode

# ── Sub-config models ─────────────────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Defaults applied when a request omits them."""

    model_config = ConfigDict(frozen=True)

    market: str = "US"
    default_preference_mode: PreferenceMode = PreferenceMode.STRUCTURE
    default_locale: str = "en"

    @field_validator("market")
    @classmethod
    def validate_market(cls, v: str) -> str:
        if v != "US":
            raise ValueError(f"Only the 'US' market is supported, got '{v}'.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class EvaluationConfig(BaseModel):
    """Dataset evaluation harness settings."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/outputs/evaluation"
    repeat_calls: int = 2

    @field_validator("repeat_calls")
    @classmethod
    def validate_repeat_calls(cls, v: int) -> int:
        if v < 2:
            raise ValueError(f"repeat_calls must be >= 2 to check determinism, got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration.

    CLI commands receive an ``AppConfig`` instance constructed by
    ``load_config()``, which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = EngineConfig()
    logging: LoggingConfig = LoggingConfig()
    evaluation: EvaluationConfig = EvaluationConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply LOOK_COMPAT_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply LOOK_COMPAT_* env vars to the raw config dict.

    Supported overrides:
      LOOK_COMPAT_LOG_LEVEL  → raw["logging"]["level"]
      LOOK_COMPAT_LOG_FILE   → raw["logging"]["log_file"]
      LOOK_COMPAT_DEBUG      → raw["debug"]
    """
    if log_level := os.environ.get("LOOK_COMPAT_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if log_file := os.environ.get("LOOK_COMPAT_LOG_FILE"):
        raw.setdefault("logging", {})["log_file"] = log_file

    if debug := os.environ.get("LOOK_COMPAT_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        engine=EngineConfig(**raw.get("engine", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        evaluation=EvaluationConfig(**raw.get("evaluation", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
