"""Client side of the transcode protocol: transport, classification and retries."""
from __future__ import annotations

from .classification import classify_response, classify_transport_error, is_retryable
from .local import LocalEndpoint
from .orchestrator import ProgressListener, RetryOrchestrator, TranscodeEndpoint, TranscodeJob
from .retry import BackoffStrategy, RetryPolicy
from .transcoder_client import TranscoderClient

__all__ = [
    "BackoffStrategy",
    "LocalEndpoint",
    "ProgressListener",
    "RetryOrchestrator",
    "RetryPolicy",
    "TranscodeEndpoint",
    "TranscodeJob",
    "TranscoderClient",
    "classify_response",
    "classify_transport_error",
    "is_retryable",
]
