"""HTTP client for interacting with the transcode service."""
from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping, Optional, Tuple

import requests

from ..errors import TranscoderServiceError, TranscoderTimeoutError
from ..models import TranscodeOutcome, TranscodeRequest
from ..utils import coerce_float, join_url, strip_trailing_slash
from .classification import classify_response, classify_transport_error

LOGGER = logging.getLogger(__name__)


class TranscoderClient:
    """Thin wrapper around the transcode HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("base_url must be provided")
        self._base_url = strip_trailing_slash(base_url)
        self._timeout = max(0.1, timeout)
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **overrides: Any) -> "TranscoderClient":
        base_url = overrides.pop("base_url", None) or config.get("TRANSCODE_GATE_API_URL")
        timeout = overrides.pop("timeout", None) or coerce_float(config.get("TRANSCODE_GATE_TIMEOUT_SECONDS"), 30.0)
        return cls(str(base_url), timeout=timeout, **overrides)

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._session.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Mapping[str, Any]] = None,
    ) -> Tuple[int, Optional[MutableMapping[str, Any]]]:
        url = join_url(self._base_url, path)
        LOGGER.debug("[API Request] %s -> %s", method, url)
        try:
            response = self._session.request(method, url, json=json, timeout=self._timeout)
        except requests.Timeout as exc:
            LOGGER.warning("Transcode service request timed out: %s", exc)
            raise TranscoderTimeoutError("transcode service timed out") from exc
        except requests.RequestException as exc:
            LOGGER.warning("Transcode service request failed: %s", exc)
            raise TranscoderServiceError("transcode service unavailable") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None
        LOGGER.debug("[API Response] %s <- %s (%s)", method, url, response.status_code)
        return response.status_code, payload

    def health(self) -> Tuple[int, Optional[MutableMapping[str, Any]]]:
        return self._request("GET", "/health")

    def is_healthy(self) -> bool:
        try:
            status, payload = self.health()
        except TranscoderServiceError:
            return False
        return status == 200 and isinstance(payload, Mapping) and payload.get("status") == "ok"

    def transcode(self, request: TranscodeRequest) -> Tuple[int, Optional[MutableMapping[str, Any]]]:
        return self._request("POST", "/api/transcode", json=request.to_payload())

    def attempt(self, request: TranscodeRequest) -> TranscodeOutcome:
        """Issue one transcode call and classify whatever happened."""

        try:
            status, payload = self.transcode(request)
        except TranscoderServiceError as exc:
            return classify_transport_error(exc)
        return classify_response(status, payload)


__all__ = ["TranscoderClient"]
