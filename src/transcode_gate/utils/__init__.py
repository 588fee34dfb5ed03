"""Utility helpers shared across the transcode gate."""
from __future__ import annotations

from .coerce import coerce_float, coerce_int, to_string_list
from .concurrency import sleep_with_stop
from .urls import join_url, strip_trailing_slash

__all__ = [
    "coerce_float",
    "coerce_int",
    "join_url",
    "sleep_with_stop",
    "strip_trailing_slash",
    "to_string_list",
]
