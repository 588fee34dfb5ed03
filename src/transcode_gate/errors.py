"""Exception types shared across the transcode gate."""
from __future__ import annotations


class TranscodeGateError(RuntimeError):
    """Base class for transcode gate failures."""


class ValidationError(TranscodeGateError, ValueError):
    """Raised when a transcode request cannot be accepted as submitted."""


class TranscoderServiceError(TranscodeGateError):
    """Raised when the transcode service cannot be reached."""


class TranscoderTimeoutError(TranscoderServiceError):
    """Raised when the transcode service does not answer in time."""


__all__ = [
    "TranscodeGateError",
    "TranscoderServiceError",
    "TranscoderTimeoutError",
    "ValidationError",
]
