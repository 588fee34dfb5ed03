from __future__ import annotations

import pytest

from transcode_gate.client.classification import (
    INVALID_RESPONSE_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    TIMEOUT_MESSAGE,
    classify_response,
    classify_transport_error,
    is_retryable,
)
from transcode_gate.errors import TranscoderServiceError, TranscoderTimeoutError
from transcode_gate.models import FailureKind, Success, TerminalFailure, TransientFailure

SUCCESS_BODY = {
    "output": "def add(a,b) : return a+b",
    "metadata": {"timestamp": "2024-01-01T00:00:00Z", "sourceLanguage": "javascript", "targetLanguage": "python"},
}


def test_success_body_parses_result() -> None:
    outcome = classify_response(200, SUCCESS_BODY)

    assert isinstance(outcome, Success)
    assert outcome.result.output == SUCCESS_BODY["output"]
    assert outcome.result.metadata.timestamp.year == 2024
    assert outcome.result.metadata.target_language == "python"


def test_success_without_output_is_rejected() -> None:
    outcome = classify_response(200, {"metadata": {}})

    assert outcome == TerminalFailure(INVALID_RESPONSE_MESSAGE, kind=FailureKind.REJECTED, status=200)


def test_bad_request_is_terminal_validation() -> None:
    outcome = classify_response(400, {"error": "Code is required"})

    assert outcome == TerminalFailure("Code is required", kind=FailureKind.VALIDATION, status=400)


@pytest.mark.parametrize("status", [500, 502, 503, 504, 408, 429, 302])
def test_retryable_statuses_are_transient(status: int) -> None:
    assert isinstance(classify_response(status, None), TransientFailure)


@pytest.mark.parametrize("status", [401, 403, 404, 413, 422])
def test_other_client_errors_are_rejected(status: int) -> None:
    outcome = classify_response(status, {"error": "nope"})

    assert isinstance(outcome, TerminalFailure)
    assert outcome.kind is FailureKind.REJECTED


def test_server_error_reason_includes_details() -> None:
    outcome = classify_response(500, {"error": "An error occurred during transcoding", "details": "boom"})

    assert outcome == TransientFailure("An error occurred during transcoding: boom", status=500)


def test_server_error_without_body_uses_status() -> None:
    assert classify_response(503, None) == TransientFailure("HTTP 503", status=503)


def test_transport_errors_are_transient() -> None:
    assert classify_transport_error(TranscoderTimeoutError("slow")) == TransientFailure(TIMEOUT_MESSAGE)
    assert classify_transport_error(TranscoderServiceError("down")) == TransientFailure(NETWORK_ERROR_MESSAGE)
    assert classify_transport_error(RuntimeError("odd")) == TransientFailure("odd")


def test_only_transient_failures_are_retryable() -> None:
    ok = classify_response(200, {"output": "x", "metadata": {}})

    assert isinstance(ok, Success)
    assert not is_retryable(ok)
    assert not is_retryable(classify_response(400, {"error": "Code is required"}))
    assert not is_retryable(classify_response(404, None))
    assert is_retryable(classify_response(503, None))
    assert is_retryable(classify_response(429, None))
    assert is_retryable(classify_transport_error(TranscoderServiceError("down")))
