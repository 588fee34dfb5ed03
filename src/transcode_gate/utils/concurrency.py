"""Concurrency-related helpers."""
from __future__ import annotations

import time
from threading import Event


def sleep_with_stop(seconds: float, stop_event: Event) -> bool:
    """Sleep up to ``seconds``; return ``True`` if ``stop_event`` interrupted it."""

    deadline = time.monotonic() + max(0.0, seconds)
    while not stop_event.is_set():
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        stop_event.wait(min(remaining, 0.25))
    return True


__all__ = ["sleep_with_stop"]
