"""Mapping from transport results to transcode outcomes.

Every response status and transport error the client can observe is
classified here and nowhere else:

* 2xx with a result body is a success, a malformed 2xx body is rejected.
* 400 is a validation failure and is never retried.
* 408 and 429 are transient, other 4xx responses are rejected.
* Every other status, network errors and timeouts are transient.
"""
from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping, Optional

from ..errors import TranscoderServiceError, TranscoderTimeoutError
from ..models import (
    FailureKind,
    Success,
    TerminalFailure,
    TranscodeOutcome,
    TranscodeResult,
    TransientFailure,
)

NETWORK_ERROR_MESSAGE = "Network Error: Failed to connect to transcode service."
TIMEOUT_MESSAGE = "Request timed out"
INVALID_RESPONSE_MESSAGE = "Invalid response format from server"

TRANSIENT_CLIENT_STATUSES = frozenset({HTTPStatus.REQUEST_TIMEOUT.value, HTTPStatus.TOO_MANY_REQUESTS.value})


def _error_message(payload: Any, status: int) -> str:
    if isinstance(payload, Mapping):
        error = payload.get("error")
        details = payload.get("details") or payload.get("message")
        if isinstance(error, str) and error.strip():
            if isinstance(details, str) and details.strip():
                return f"{error.strip()}: {details.strip()}"
            return error.strip()
    return f"HTTP {status}"


def classify_response(status: int, payload: Optional[Any]) -> TranscodeOutcome:
    if 200 <= status < 300:
        try:
            return Success(TranscodeResult.from_payload(payload))
        except ValueError:
            return TerminalFailure(INVALID_RESPONSE_MESSAGE, kind=FailureKind.REJECTED, status=status)

    message = _error_message(payload, status)
    if status == HTTPStatus.BAD_REQUEST.value:
        if message == f"HTTP {status}":
            message = "Invalid request"
        return TerminalFailure(message, kind=FailureKind.VALIDATION, status=status)
    if status in TRANSIENT_CLIENT_STATUSES:
        return TransientFailure(message, status=status)
    if 400 <= status < 500:
        return TerminalFailure(message, kind=FailureKind.REJECTED, status=status)
    return TransientFailure(message, status=status)


def classify_transport_error(exc: BaseException) -> TransientFailure:
    if isinstance(exc, TranscoderTimeoutError):
        return TransientFailure(TIMEOUT_MESSAGE)
    if isinstance(exc, TranscoderServiceError):
        return TransientFailure(NETWORK_ERROR_MESSAGE)
    return TransientFailure(str(exc) or exc.__class__.__name__)


def is_retryable(outcome: TranscodeOutcome) -> bool:
    return isinstance(outcome, TransientFailure)


__all__ = [
    "INVALID_RESPONSE_MESSAGE",
    "NETWORK_ERROR_MESSAGE",
    "TIMEOUT_MESSAGE",
    "TRANSIENT_CLIENT_STATUSES",
    "classify_response",
    "classify_transport_error",
    "is_retryable",
]
