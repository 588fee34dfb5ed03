"""HTTP routes exposed by the transcode gate service."""
from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request

from ..service import TranscodeService, get_transcode_service

api_bp = Blueprint("transcode_gate_api", __name__)


def _service() -> TranscodeService:
    return get_transcode_service(current_app)


@api_bp.route("/health", methods=["GET"])
def health_endpoint():
    payload = {
        "status": "ok",
        "message": "Server is running",
        "service": "transcode-gate",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return jsonify(payload), HTTPStatus.OK


@api_bp.route("/api/transcode", methods=["POST"])
def transcode_endpoint():
    payload = request.get_json(silent=True) or {}
    response = _service().handle(payload)
    return jsonify(response.body), response.status


__all__ = ["api_bp"]
