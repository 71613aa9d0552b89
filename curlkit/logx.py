"""Structured logging on top of the standard logging module."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Mapping, Optional, Union

DEFAULT_LOGGER_NAME = "curlkit"


@dataclass(frozen=True)
class ContextLogger:
    """A logger carrying key/value fields and an optional duration in seconds."""

    logger: logging.Logger
    fields: Mapping[str, Any] = field(default_factory=dict)
    duration: Optional[float] = None

    def with_fields(self, **kwargs: Any) -> "ContextLogger":
        return replace(self, fields={**self.fields, **kwargs})

    def with_duration(self, duration: Union[float, timedelta]) -> "ContextLogger":
        if isinstance(duration, timedelta):
            duration = duration.total_seconds()
        return replace(self, duration=float(duration))

    def info(self, message: str) -> None:
        self._log(logging.INFO, message)

    def error(self, message: str) -> None:
        self._log(logging.ERROR, message)

    def debug(self, message: str) -> None:
        self._log(logging.DEBUG, message)

    def _log(self, level: int, message: str) -> None:
        parts = [message]
        if self.duration is not None:
            parts.append(f"duration={self.duration * 1000:.1f}ms")
        parts.extend(f"{key}={value}" for key, value in self.fields.items())
        self.logger.log(level, "%s", "\t".join(parts))


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> ContextLogger:
    """Return a field-less ContextLogger over the named logger."""
    return ContextLogger(logging.getLogger(name))