"""Projection of transcode job events onto renderable UI states.

The presenter never retries, never counts attempts and never talks to the
service. It only remembers which job is currently shown and turns that job's
progress and outcome notifications into one of four states::

    Idle -> InProgress(attempt, max_attempts, message) -> Succeeded | TerminalError

``dismiss()`` returns to ``Idle`` from any state and forgets the job, so late
events from it cannot bring back stale counters.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from .client.orchestrator import FIRST_ATTEMPT_MESSAGE
from .models import (
    FailureKind,
    RetryState,
    Success,
    TerminalFailure,
    TranscodeOutcome,
    TranscodeResult,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class InProgress:
    job_id: str
    attempt: int
    max_attempts: int
    message: str

    @property
    def retrying(self) -> bool:
        return self.attempt > 1


@dataclass(frozen=True)
class Succeeded:
    job_id: str
    result: TranscodeResult


@dataclass(frozen=True)
class TerminalError:
    message: str
    kind: Optional[FailureKind] = None
    job_id: Optional[str] = None


PresenterState = Union[Idle, InProgress, Succeeded, TerminalError]
StateCallback = Callable[[PresenterState], None]


class FailurePresenter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: PresenterState = Idle()
        self._active_job: Optional[str] = None
        self._subscribers: List[StateCallback] = []

    @property
    def state(self) -> PresenterState:
        with self._lock:
            return self._state

    @property
    def active_job_id(self) -> Optional[str]:
        with self._lock:
            return self._active_job

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def begin(self, job_id: str, max_attempts: int) -> None:
        self._transition(
            InProgress(job_id=job_id, attempt=1, max_attempts=max_attempts, message=FIRST_ATTEMPT_MESSAGE),
            active_job=job_id,
        )

    def on_progress(self, job_id: str, state: RetryState) -> None:
        self._transition(
            InProgress(
                job_id=job_id,
                attempt=state.attempt,
                max_attempts=state.max_attempts,
                message=state.last_message,
            ),
            only_for=job_id,
        )

    def on_outcome(self, job_id: str, outcome: TranscodeOutcome) -> None:
        if isinstance(outcome, Success):
            new_state: PresenterState = Succeeded(job_id=job_id, result=outcome.result)
        elif isinstance(outcome, TerminalFailure):
            if outcome.kind is FailureKind.CANCELLED:
                return
            new_state = TerminalError(message=outcome.reason, kind=outcome.kind, job_id=job_id)
        else:
            new_state = TerminalError(message=outcome.reason, job_id=job_id)
        self._transition(new_state, only_for=job_id)

    def show_error(self, message: str, kind: Optional[FailureKind] = FailureKind.VALIDATION) -> None:
        """Show an error that did not come from a job, e.g. a refused empty input."""

        self._transition(TerminalError(message=message, kind=kind), active_job=None)

    def dismiss(self) -> None:
        self._transition(Idle(), active_job=None)

    def _transition(self, new_state: PresenterState, *, only_for: Optional[str] = None, **changes: Optional[str]) -> None:
        with self._lock:
            if only_for is not None and only_for != self._active_job:
                LOGGER.debug("Ignoring event from inactive job %s", only_for)
                return
            if "active_job" in changes:
                self._active_job = changes["active_job"]
            self._state = new_state
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(new_state)
            except Exception:
                LOGGER.exception("Presenter subscriber failed")


def render(state: PresenterState) -> str:
    """Return the banner text for ``state``; ``Idle`` renders as an empty string."""

    if isinstance(state, InProgress):
        if state.retrying:
            return f"Retry attempt {state.attempt}/{state.max_attempts}: {state.message}"
        return f"{state.message} (attempt {state.attempt}/{state.max_attempts})"
    if isinstance(state, Succeeded):
        return "Transcoded successfully"
    if isinstance(state, TerminalError):
        return f"Error: {state.message}"
    return ""


__all__ = [
    "FailurePresenter",
    "Idle",
    "InProgress",
    "PresenterState",
    "Succeeded",
    "TerminalError",
    "render",
]
