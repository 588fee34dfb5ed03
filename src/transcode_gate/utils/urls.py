"""URL manipulation helpers."""
from __future__ import annotations


def strip_trailing_slash(url: str) -> str:
    trimmed = (url or "").strip()
    while trimmed.endswith("/"):
        trimmed = trimmed[:-1]
    return trimmed


def join_url(base_url: str, path: str) -> str:
    return f"{strip_trailing_slash(base_url)}/{path.lstrip('/')}"


__all__ = ["join_url", "strip_trailing_slash"]
