"""Request identifiers, trace propagation and the request logger."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Union

from curlkit.logx import ContextLogger, get_logger

HTTP_LOGGER_NAME = "curlkit.http"

_current_trace_id: ContextVar[Optional[str]] = ContextVar("curlkit_trace_id", default=None)


@contextmanager
def trace_context(trace_id: str) -> Iterator[str]:
    """Make ``trace_id`` the current trace id within the block."""
    token = _current_trace_id.set(trace_id)
    try:
        yield trace_id
    finally:
        _current_trace_id.reset(token)


def get_trace_id() -> str:
    """Return the current trace id, or a new request id."""
    return _current_trace_id.get() or generate_request_id()


def generate_request_id() -> str:
    return str(uuid.uuid4())


def remove_newline(data: Union[bytes, str]) -> str:
    """Return ``data`` as text without line feeds."""
    if isinstance(data, str):
        return data.replace("\n", "")
    return data.replace(b"\n", b"").decode("utf-8", errors="replace")


def request_logger() -> ContextLogger:
    """Return the logger for outgoing HTTP requests."""
    log = get_logger(HTTP_LOGGER_NAME).with_fields(action="httpCurl")
    current = _current_trace_id.get()
    return log.with_fields(trace=current) if current else log