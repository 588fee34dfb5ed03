"""User-facing transcode gate: one user action becomes one orchestrated job."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from .client import RetryOrchestrator, TranscodeJob
from .errors import ValidationError
from .history import TranscodeLog, TranscodeLogEntry
from .models import (
    FailureKind,
    Language,
    RetryState,
    Success,
    TerminalFailure,
    TranscodeOutcome,
    TranscodeRequest,
    TranscodeResult,
)
from .presenter import FailurePresenter

LOGGER = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please enter some code to transcode"


def format_output(result: TranscodeResult) -> str:
    metadata = result.metadata
    return "\n".join(
        [
            f"# Transcoded from {metadata.source_language} to {metadata.target_language}",
            f"# Timestamp: {metadata.timestamp.isoformat()}",
            "",
            result.output,
        ]
    )


class _JobListener:
    """Forward one job's events to the presenter and record its outcome."""

    def __init__(self, gate: "TranscodeGate", job: TranscodeJob) -> None:
        self._gate = gate
        self._job = job

    def on_progress(self, job_id: str, state: RetryState) -> None:
        self._gate.presenter.on_progress(job_id, state)

    def on_outcome(self, job_id: str, outcome: TranscodeOutcome) -> None:
        self._gate._record(self._job, outcome)
        self._gate.presenter.on_outcome(job_id, outcome)


class TranscodeGate:
    def __init__(
        self,
        orchestrator: RetryOrchestrator,
        presenter: Optional[FailurePresenter] = None,
        log: Optional[TranscodeLog] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self.presenter = presenter or FailurePresenter()
        self.log = log or TranscodeLog()
        self._lock = threading.Lock()
        self._job: Optional[TranscodeJob] = None
        self._last_output: Optional[str] = None

    @property
    def current_job(self) -> Optional[TranscodeJob]:
        with self._lock:
            return self._job

    @property
    def last_output(self) -> Optional[str]:
        with self._lock:
            return self._last_output

    def transcode(
        self,
        code: str,
        source_language: Language | str = Language.AUTO,
        target_language: Language | str = Language.AUTO,
    ) -> Optional[TranscodeJob]:
        """Start a job for ``code``; returns ``None`` when the input is refused locally."""

        if not code or not code.strip():
            self.presenter.show_error(EMPTY_INPUT_MESSAGE)
            return None
        try:
            request = TranscodeRequest(code, Language.parse(source_language), Language.parse(target_language))
        except ValidationError as exc:
            self.presenter.show_error(str(exc))
            return None

        job = self._orchestrator.create_job(request)
        with self._lock:
            previous, self._job = self._job, job
        if previous is not None and not previous.done:
            previous.cancel()

        self.presenter.begin(job.job_id, self._orchestrator.policy.max_attempts)
        self._orchestrator.submit(request, _JobListener(self, job), job=job)
        return job

    def dismiss(self) -> None:
        """Stop the current job, if any, and clear whatever the presenter shows."""

        with self._lock:
            job, self._job = self._job, None
        if job is not None and not job.done:
            job.cancel()
        self.presenter.dismiss()

    def wait(self, timeout: Optional[float] = None) -> Optional[TranscodeOutcome]:
        job = self.current_job
        if job is None:
            return None
        return job.wait(timeout)

    def _record(self, job: TranscodeJob, outcome: TranscodeOutcome) -> None:
        request = job.request
        now = datetime.now(timezone.utc)
        if isinstance(outcome, Success):
            output = format_output(outcome.result)
            with self._lock:
                if self._job is job:
                    self._last_output = output
            entry = TranscodeLogEntry(
                id=f"transcode-{job.job_id}",
                timestamp=now,
                source_code=request.source_code,
                output=output,
                source_language=outcome.result.metadata.source_language,
                target_language=outcome.result.metadata.target_language,
                success=True,
            )
        else:
            if isinstance(outcome, TerminalFailure) and outcome.kind is FailureKind.CANCELLED:
                return
            LOGGER.error("Transcode error: %s", outcome.reason)
            entry = TranscodeLogEntry(
                id=f"transcode-{job.job_id}",
                timestamp=now,
                source_code=request.source_code,
                output="",
                source_language=request.source_language.value,
                target_language=request.target_language.value,
                success=False,
                error=outcome.reason,
            )
        self.log.add(entry)


__all__ = ["EMPTY_INPUT_MESSAGE", "TranscodeGate", "format_output"]
