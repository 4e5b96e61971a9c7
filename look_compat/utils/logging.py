"""
Logging setup for the look-compat CLI.

The engine, gate and harness only ever call ``logging.getLogger(__name__)``;
they are embedded in host services that own logging.  ``configure_logging``
is for the CLI process alone and is called once per command.

Console output goes to stderr: ``score`` and ``gate`` print their JSON on
stdout, and log lines there would corrupt it.

With ``json_format = true`` each record becomes one line::

    {"ts": "2026-02-24T15:00:00Z", "level": "INFO", "logger": "look_compat.policy.gate",
     "msg": "Gate soft_degrade | reasons=MISSING_SELFIE", "sample_id": "s-001"}

Keys passed through ``extra=`` (e.g. ``sample_id``) are merged at top level.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from look_compat.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Instance attributes of a bare LogRecord; anything beyond these came from extra=.
_BUILTIN_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object (``ts``/``level``/``logger``/``msg``)."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict = {
            "ts": ts.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val)
            for key, val in vars(record).items()
            if key not in _BUILTIN_RECORD_KEYS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)


def _make_handlers(config: "LoggingConfig", level: int) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = _make_formatter(config.json_format)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Replaces any handlers from a previous call, so commands invoked
    repeatedly in one process (tests, notebooks) do not stack output.

    Args:
        config: ``[logging]`` section of ``AppConfig``.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, handlers=_make_handlers(config, level), force=True)
