"""Transcode gate: a code transcoding service with a retrying client."""
from __future__ import annotations

from .models import (
    FailureKind,
    Language,
    RetryState,
    Success,
    TerminalFailure,
    TranscodeMetadata,
    TranscodeOutcome,
    TranscodeRequest,
    TranscodeResult,
    TransientFailure,
)

__version__ = "0.1.0"

__all__ = [
    "FailureKind",
    "Language",
    "RetryState",
    "Success",
    "TerminalFailure",
    "TranscodeMetadata",
    "TranscodeOutcome",
    "TranscodeRequest",
    "TranscodeResult",
    "TransientFailure",
    "__version__",
]
