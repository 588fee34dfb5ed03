"""In-process endpoint that skips HTTP but keeps the wire classification."""
from __future__ import annotations

from ..models import TranscodeOutcome, TranscodeRequest
from ..service import TranscodeService
from .classification import classify_response


class LocalEndpoint:
    def __init__(self, service: TranscodeService | None = None) -> None:
        self._service = service or TranscodeService()

    def attempt(self, request: TranscodeRequest) -> TranscodeOutcome:
        response = self._service.execute(request)
        return classify_response(response.status, response.body)


__all__ = ["LocalEndpoint"]
