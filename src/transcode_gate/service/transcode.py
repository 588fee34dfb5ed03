"""Request handling for the transcode endpoint, independent of Flask."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Callable, Mapping, Tuple

from flask import Flask

from ..errors import ValidationError
from ..models import (
    FailureKind,
    Language,
    Success,
    TerminalFailure,
    TranscodeMetadata,
    TranscodeOutcome,
    TranscodeRequest,
    TranscodeResult,
)
from . import rules

LOGGER = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An error occurred during transcoding"

Transform = Callable[[str, Language, Language], Tuple[str, Language, Language]]


@dataclass(frozen=True)
class ServiceResponse:
    """HTTP status and JSON body for one handled request, plus its outcome."""

    status: int
    body: dict[str, Any]
    outcome: TranscodeOutcome


class TranscodeService:
    """Stateless handler turning request bodies into transcode responses."""

    def __init__(
        self,
        *,
        simulated_delay: float = 0.0,
        transform: Transform = rules.transcode,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._simulated_delay = max(0.0, float(simulated_delay))
        self._transform = transform
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, payload: Any) -> ServiceResponse:
        if not isinstance(payload, Mapping):
            payload = {}
        try:
            request = TranscodeRequest.from_payload(payload)
        except ValidationError as exc:
            LOGGER.info("Rejected transcode request: %s", exc)
            return ServiceResponse(
                status=HTTPStatus.BAD_REQUEST.value,
                body={"error": str(exc)},
                outcome=TerminalFailure(str(exc), kind=FailureKind.VALIDATION, status=HTTPStatus.BAD_REQUEST.value),
            )
        return self.execute(request)

    def execute(self, request: TranscodeRequest) -> ServiceResponse:
        code = request.source_code
        LOGGER.info("Transcoding %d chars (first 100: %r)", len(code), code[:100])
        try:
            output, source, target = self._transform(code, request.source_language, request.target_language)
            if self._simulated_delay:
                time.sleep(self._simulated_delay)
        except Exception as exc:
            LOGGER.exception("Error during transcode")
            details = str(exc) or exc.__class__.__name__
            return ServiceResponse(
                status=HTTPStatus.INTERNAL_SERVER_ERROR.value,
                body={"error": INTERNAL_ERROR_MESSAGE, "details": details},
                outcome=TerminalFailure(
                    INTERNAL_ERROR_MESSAGE,
                    kind=FailureKind.INTERNAL,
                    status=HTTPStatus.INTERNAL_SERVER_ERROR.value,
                    details=details,
                ),
            )

        result = TranscodeResult(
            output=output,
            metadata=TranscodeMetadata(
                timestamp=self._clock(),
                source_language=source.value,
                target_language=target.value,
            ),
        )
        LOGGER.info("Transcode successful (%s -> %s)", source.value, target.value)
        return ServiceResponse(status=HTTPStatus.OK.value, body=result.to_payload(), outcome=Success(result))


def init_transcode_service(app: Flask) -> TranscodeService:
    service = TranscodeService(simulated_delay=app.config.get("TRANSCODE_SIMULATED_DELAY_SECONDS", 0.0) or 0.0)
    app.extensions["transcode_service"] = service
    return service


def get_transcode_service(app: Flask) -> TranscodeService:
    service = app.extensions.get("transcode_service")
    if not isinstance(service, TranscodeService):
        raise RuntimeError("Transcode service not initialised on Flask app.")
    return service


__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "ServiceResponse",
    "TranscodeService",
    "get_transcode_service",
    "init_transcode_service",
]
