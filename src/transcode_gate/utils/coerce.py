"""Coercion helpers for configuration values and loosely typed payloads."""
from __future__ import annotations

from typing import Any, List


def to_string_list(value: Any) -> List[str]:
    """Split comma separated strings; iterables are stripped item by item."""

    if value is None:
        return []
    if isinstance(value, str):
        return [fragment.strip() for fragment in value.split(",") if fragment.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [str(value).strip()]


def coerce_int(value: Any, fallback: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def coerce_float(value: Any, fallback: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return fallback


__all__ = [
    "coerce_float",
    "coerce_int",
    "to_string_list",
]
