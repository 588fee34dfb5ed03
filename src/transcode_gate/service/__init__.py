"""Transcode service layer."""
from __future__ import annotations

from .transcode import (
    INTERNAL_ERROR_MESSAGE,
    ServiceResponse,
    TranscodeService,
    get_transcode_service,
    init_transcode_service,
)

__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "ServiceResponse",
    "TranscodeService",
    "get_transcode_service",
    "init_transcode_service",
]
