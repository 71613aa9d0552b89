"""Retrying a call with a pause after each failure."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 0
DEFAULT_INTERVAL = 1.0


@dataclass
class RetryConfig:
    """Number of retries and the pause (in seconds) after a failure."""

    max_retries: int = DEFAULT_MAX_RETRIES
    interval: float = DEFAULT_INTERVAL

    def run(self, func: Callable[[], T]) -> Optional[T]:
        """Call ``func`` up to ``max_retries + 1`` times; raise the last error."""
        error: Optional[Exception] = None
        for _ in range(self.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                error = exc
            time.sleep(max(self.interval, 0.0))
        if error is not None:
            raise error
        return None