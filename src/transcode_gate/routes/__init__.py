"""Blueprint registry for the transcode gate HTTP surface."""
from __future__ import annotations

from .api import api_bp

API_BLUEPRINTS = (api_bp,)

__all__ = ["API_BLUEPRINTS", "api_bp"]
