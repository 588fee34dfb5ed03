from __future__ import annotations

from datetime import datetime, timezone

import pytest

from fakes import BlockingEndpoint, RecordingListener, ScriptedEndpoint
from transcode_gate.client import RetryOrchestrator, RetryPolicy
from transcode_gate.errors import TranscoderServiceError
from transcode_gate.models import (
    FailureKind,
    Success,
    TerminalFailure,
    TranscodeMetadata,
    TranscodeRequest,
    TranscodeResult,
    TransientFailure,
)

REQUEST = TranscodeRequest("function add(a,b) { return a+b; }")
SUCCESS = Success(
    TranscodeResult(
        output="def add(a,b) : return a+b",
        metadata=TranscodeMetadata(timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc)),
    )
)
BUSY = TransientFailure("HTTP 503", status=503)


def _orchestrator(endpoint, max_attempts: int = 3, sleeps=None) -> RetryOrchestrator:
    def _sleep(seconds, stop_event):
        if sleeps is not None:
            sleeps.append(seconds)
        return False

    return RetryOrchestrator(endpoint, RetryPolicy(max_attempts=max_attempts), sleep=_sleep)


@pytest.mark.parametrize("failures", [0, 1, 2])
def test_transient_failures_then_success(failures: int) -> None:
    endpoint = ScriptedEndpoint([BUSY] * failures + [SUCCESS])
    listener = RecordingListener()

    outcome = _orchestrator(endpoint).run(REQUEST, listener)

    assert outcome == SUCCESS
    assert len(endpoint.calls) == failures + 1
    assert [state.attempt for state in listener.progress] == list(range(1, failures + 2))
    assert listener.outcomes == [SUCCESS]


def test_always_transient_exhausts_exactly_max_attempts() -> None:
    endpoint = ScriptedEndpoint([BUSY])
    listener = RecordingListener()

    outcome = _orchestrator(endpoint, max_attempts=4).run(REQUEST, listener)

    assert len(endpoint.calls) == 4
    assert isinstance(outcome, TerminalFailure)
    assert outcome.kind is FailureKind.EXHAUSTED
    assert outcome.reason == "Failed after 4 attempts: HTTP 503"
    assert listener.outcomes == [outcome]


def test_validation_failure_stops_immediately() -> None:
    rejected = TerminalFailure("Code is required", kind=FailureKind.VALIDATION, status=400)
    endpoint = ScriptedEndpoint([rejected, SUCCESS])
    listener = RecordingListener()

    outcome = _orchestrator(endpoint).run(REQUEST, listener)

    assert outcome == rejected
    assert len(endpoint.calls) == 1
    assert [state.attempt for state in listener.progress] == [1]


def test_progress_carries_previous_failure_reason() -> None:
    endpoint = ScriptedEndpoint([TransientFailure("Request timed out"), SUCCESS])
    listener = RecordingListener()

    _orchestrator(endpoint).run(REQUEST, listener)

    second = listener.progress[1]
    assert (second.attempt, second.max_attempts, second.last_message) == (2, 3, "Request timed out")


def test_backoff_delays_follow_policy() -> None:
    sleeps: list[float] = []
    endpoint = ScriptedEndpoint([BUSY])

    _orchestrator(endpoint, max_attempts=3, sleeps=sleeps).run(REQUEST)

    assert sleeps == [1.0, 2.0]


def test_endpoint_exception_is_classified_and_retried() -> None:
    endpoint = ScriptedEndpoint([TranscoderServiceError("down"), SUCCESS])

    outcome = _orchestrator(endpoint).run(REQUEST)

    assert outcome == SUCCESS
    assert len(endpoint.calls) == 2


def test_cancel_during_backoff_prevents_further_attempts() -> None:
    endpoint = ScriptedEndpoint([BUSY, SUCCESS])
    listener = RecordingListener()
    orchestrator = RetryOrchestrator(endpoint, RetryPolicy(max_attempts=3))
    job = orchestrator.create_job(REQUEST)

    def _sleep(seconds, stop_event):
        job.cancel()
        return stop_event.is_set()

    orchestrator._sleep = _sleep
    outcome = orchestrator.run(REQUEST, listener, job=job)

    assert len(endpoint.calls) == 1
    assert isinstance(outcome, TerminalFailure)
    assert outcome.kind is FailureKind.CANCELLED
    assert listener.outcomes == []
    assert job.done


def test_cancel_while_attempt_in_flight_suppresses_stale_success() -> None:
    endpoint = BlockingEndpoint(SUCCESS)
    listener = RecordingListener()
    orchestrator = _orchestrator(endpoint)

    job = orchestrator.submit(REQUEST, listener)
    assert endpoint.entered.wait(2)
    job.cancel()
    endpoint.release.set()
    outcome = job.wait(2)

    assert isinstance(outcome, TerminalFailure)
    assert outcome.kind is FailureKind.CANCELLED
    assert listener.outcomes == []
    assert endpoint.calls == 1


def test_submit_returns_before_job_finishes() -> None:
    endpoint = BlockingEndpoint(SUCCESS)
    listener = RecordingListener()

    job = _orchestrator(endpoint).submit(REQUEST, listener)
    assert endpoint.entered.wait(2)
    assert not job.done

    endpoint.release.set()

    assert job.wait(2) == SUCCESS
    assert job.attempts == 1
    assert listener.outcomes == [SUCCESS]


def test_listener_errors_do_not_break_the_job() -> None:
    class ExplodingListener:
        def on_progress(self, job_id, state):
            raise RuntimeError("render failed")

        def on_outcome(self, job_id, outcome):
            raise RuntimeError("render failed")

    endpoint = ScriptedEndpoint([BUSY, SUCCESS])

    assert _orchestrator(endpoint).run(REQUEST, ExplodingListener()) == SUCCESS


def test_jobs_do_not_share_state() -> None:
    orchestrator = _orchestrator(ScriptedEndpoint([SUCCESS]))

    first = orchestrator.create_job(REQUEST)
    second = orchestrator.create_job(REQUEST)
    first.cancel()

    assert first.job_id != second.job_id
    assert not second.cancelled
    assert orchestrator.run(REQUEST, job=second) == SUCCESS
