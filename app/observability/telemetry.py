"""Structured, redacting event logger passed explicitly to pipeline stages."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

REDACTED = "[REDACTED]"
SENSITIVE_KEYS = ("apikey", "api_key", "password", "token", "secret", "authorization")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class TelemetryConfig:
    format: str = "text"
    logger_name: str = "enrichment"


def redact(context: Mapping[str, Any]) -> dict[str, Any]:
    """Copy ``context`` with credential-like keys masked, descending into mappings."""
    sanitized: dict[str, Any] = {}
    for key, value in context.items():
        if any(token in str(key).lower() for token in SENSITIVE_KEYS):
            sanitized[key] = REDACTED
        elif isinstance(value, Mapping):
            sanitized[key] = redact(value)
        else:
            sanitized[key] = value
    return sanitized


class PipelineLogger:
    """Emit timestamped ``info``/``warn``/``error`` events with redacted context."""

    def __init__(self, config: TelemetryConfig | None = None) -> None:
        self._config = config or TelemetryConfig()
        self._logger = logging.getLogger(self._config.logger_name)

    @property
    def name(self) -> str:
        return self._config.logger_name

    def debug(self, message: str, **context: Any) -> None:
        self._emit("debug", message, context)

    def info(self, message: str, **context: Any) -> None:
        self._emit("info", message, context)

    def warn(self, message: str, **context: Any) -> None:
        self._emit("warn", message, context)

    def error(self, message: str, **context: Any) -> None:
        self._emit("error", message, context)

    def _emit(self, level: str, message: str, context: dict[str, Any]) -> None:
        log_level = _LEVELS[level]
        if not self._logger.isEnabledFor(log_level):
            return
        payload = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level,
            "message": message,
            **redact(context),
        }
        if self._config.format == "json":
            self._logger.log(log_level, json.dumps(payload, sort_keys=True, default=str))
        else:
            fields = " ".join(f"{key}={value}" for key, value in payload.items() if key not in {"level", "message"})
            self._logger.log(log_level, "%s %s", message, fields, extra={"event": payload})


def build_pipeline_logger(log_format: str | None = None, *, name: str = "enrichment") -> PipelineLogger:
    fmt = (log_format or "text").strip().lower()
    return PipelineLogger(TelemetryConfig(format=fmt if fmt in {"json", "text"} else "text", logger_name=name))
