"""Drive one transcode job through a bounded sequence of attempts."""
from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Optional, Protocol

from ..models import (
    FailureKind,
    RetryState,
    Success,
    TerminalFailure,
    TranscodeOutcome,
    TranscodeRequest,
)
from ..utils import sleep_with_stop
from .classification import classify_transport_error, is_retryable
from .retry import RetryPolicy

LOGGER = logging.getLogger(__name__)

FIRST_ATTEMPT_MESSAGE = "Transcoding..."
CANCELLED_MESSAGE = "Transcode cancelled"


class TranscodeEndpoint(Protocol):
    def attempt(self, request: TranscodeRequest) -> TranscodeOutcome: ...


class ProgressListener(Protocol):
    def on_progress(self, job_id: str, state: RetryState) -> None: ...

    def on_outcome(self, job_id: str, outcome: TranscodeOutcome) -> None: ...


class TranscodeJob:
    """Handle for one logical transcode; owns its cancel flag and attempt count."""

    def __init__(self, request: TranscodeRequest, *, job_id: Optional[str] = None) -> None:
        self.request = request
        self.job_id = job_id or uuid.uuid4().hex
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()
        self._attempts = 0
        self._outcome: Optional[TranscodeOutcome] = None

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def outcome(self) -> Optional[TranscodeOutcome]:
        return self._outcome

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def done(self) -> bool:
        return self._done_event.is_set()

    def cancel(self) -> None:
        if not self._cancel_event.is_set():
            LOGGER.info("Cancelling transcode job %s", self.job_id)
        self._cancel_event.set()

    def wait(self, timeout: Optional[float] = None) -> Optional[TranscodeOutcome]:
        self._done_event.wait(timeout)
        return self._outcome

    def _complete(self, outcome: TranscodeOutcome) -> None:
        self._outcome = outcome
        self._done_event.set()


class RetryOrchestrator:
    """Turn one transcode intent into 1..max_attempts sequential endpoint calls."""

    def __init__(
        self,
        endpoint: TranscodeEndpoint,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: Callable[[float, threading.Event], bool] = sleep_with_stop,
    ) -> None:
        self._endpoint = endpoint
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def create_job(self, request: TranscodeRequest) -> TranscodeJob:
        return TranscodeJob(request)

    def submit(
        self,
        request: TranscodeRequest,
        listener: Optional[ProgressListener] = None,
        *,
        job: Optional[TranscodeJob] = None,
    ) -> TranscodeJob:
        """Run the job on a background thread and return its handle immediately."""

        job = job or self.create_job(request)
        thread = threading.Thread(
            target=self.run,
            args=(request, listener),
            kwargs={"job": job},
            name=f"transcode-job-{job.job_id[:8]}",
            daemon=True,
        )
        thread.start()
        return job

    def run(
        self,
        request: TranscodeRequest,
        listener: Optional[ProgressListener] = None,
        *,
        job: Optional[TranscodeJob] = None,
    ) -> TranscodeOutcome:
        job = job or self.create_job(request)
        policy = self._policy
        state = RetryState(attempt=1, max_attempts=policy.max_attempts, last_message=FIRST_ATTEMPT_MESSAGE)

        while True:
            if job.cancelled:
                return self._cancelled(job)

            job._attempts = state.attempt
            self._notify_progress(listener, job, state)
            outcome = self._attempt(request)

            if job.cancelled:
                return self._cancelled(job)

            if isinstance(outcome, Success):
                LOGGER.info("Transcode job %s succeeded on attempt %d/%d", job.job_id, state.attempt, state.max_attempts)
                break
            if not is_retryable(outcome):
                LOGGER.warning(
                    "Transcode job %s failed on attempt %d/%d (not retried): %s",
                    job.job_id,
                    state.attempt,
                    state.max_attempts,
                    outcome.reason,
                )
                break
            if state.is_last_attempt:
                outcome = TerminalFailure(
                    f"Failed after {state.max_attempts} attempts: {outcome.reason}",
                    kind=FailureKind.EXHAUSTED,
                    status=outcome.status,
                )
                LOGGER.error("Transcode job %s: %s", job.job_id, outcome.reason)
                break

            delay = policy.delay_after(state.attempt)
            LOGGER.warning(
                "Transcode job %s attempt %d/%d failed: %s; retrying in %.1fs",
                job.job_id,
                state.attempt,
                state.max_attempts,
                outcome.reason,
                delay,
            )
            if delay > 0 and self._sleep(delay, job._cancel_event):
                return self._cancelled(job)
            state = state.next_attempt(outcome.reason)

        if not job.cancelled:
            self._notify_outcome(listener, job, outcome)
        job._complete(outcome)
        return outcome

    def _attempt(self, request: TranscodeRequest) -> TranscodeOutcome:
        try:
            return self._endpoint.attempt(request)
        except Exception as exc:
            LOGGER.exception("Transcode endpoint raised unexpectedly")
            return classify_transport_error(exc)

    def _cancelled(self, job: TranscodeJob) -> TranscodeOutcome:
        outcome = TerminalFailure(CANCELLED_MESSAGE, kind=FailureKind.CANCELLED)
        LOGGER.info("Transcode job %s stopped after %d attempt(s): cancelled", job.job_id, job.attempts)
        job._complete(outcome)
        return outcome

    @staticmethod
    def _notify_progress(listener: Optional[ProgressListener], job: TranscodeJob, state: RetryState) -> None:
        if listener is None:
            return
        try:
            listener.on_progress(job.job_id, state)
        except Exception:
            LOGGER.exception("Progress listener failed for job %s", job.job_id)

    @staticmethod
    def _notify_outcome(listener: Optional[ProgressListener], job: TranscodeJob, outcome: TranscodeOutcome) -> None:
        if listener is None:
            return
        try:
            listener.on_outcome(job.job_id, outcome)
        except Exception:
            LOGGER.exception("Outcome listener failed for job %s", job.job_id)


__all__ = [
    "CANCELLED_MESSAGE",
    "FIRST_ATTEMPT_MESSAGE",
    "ProgressListener",
    "RetryOrchestrator",
    "TranscodeEndpoint",
    "TranscodeJob",
]
