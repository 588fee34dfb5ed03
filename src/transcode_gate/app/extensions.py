"""Extension wiring for the transcode gate Flask application."""
from __future__ import annotations

import logging
import time
from http import HTTPStatus
from typing import Iterable, Sequence

from flask import Flask, Response, g, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..service import init_transcode_service
from ..utils import to_string_list

LOGGER = logging.getLogger(__name__)

_ALLOWED_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
_ALLOWED_HEADERS = "Content-Type,Authorization"


def resolve_cors_origins(raw_origins: str | Iterable[str] | None) -> Sequence[str] | str:
    """Return ``"*"`` or the explicit list of allowed origins."""

    allowed = to_string_list(raw_origins)
    if not allowed or "*" in allowed:
        return "*"
    return [origin.rstrip("/") for origin in allowed]


def configure_cors(app: Flask, allowed_origins: Sequence[str] | str) -> None:
    @app.after_request
    def add_cors_headers(response: Response) -> Response:
        origin = request.headers.get("Origin")
        if allowed_origins == "*":
            allowed_origin = origin or "*"
        elif origin and origin.rstrip("/") in allowed_origins:
            allowed_origin = origin
        else:
            allowed_origin = None

        if allowed_origin is not None:
            response.headers["Access-Control-Allow-Origin"] = allowed_origin
            response.headers.setdefault("Access-Control-Allow-Headers", _ALLOWED_HEADERS)
            response.headers.setdefault("Access-Control-Allow-Methods", _ALLOWED_METHODS)
            if allowed_origin != "*":
                response.headers.setdefault("Access-Control-Allow-Credentials", "true")
        if origin:
            response.headers.add("Vary", "Origin")
        return response


def register_request_logging(app: Flask) -> None:
    @app.before_request
    def track_request_start() -> None:
        g.request_started = time.perf_counter()
        LOGGER.info("%s %s", request.method, request.path)

    @app.after_request
    def log_request(response: Response) -> Response:
        duration_ms = None
        if hasattr(g, "request_started"):
            duration_ms = (time.perf_counter() - g.request_started) * 1000
        duration_display = f"{duration_ms:.2f}" if duration_ms is not None else "?"
        LOGGER.info(
            "%s %s -> %s in %s ms (client=%s)",
            request.method,
            request.path,
            response.status_code,
            duration_display,
            request.remote_addr or "?",
        )
        return response


def enforce_body_limit(app: Flask) -> None:
    """Reject bodies above ``MAX_CONTENT_LENGTH`` before any handler reads them."""

    @app.before_request
    def check_content_length() -> None:
        limit = app.config.get("MAX_CONTENT_LENGTH")
        length = request.content_length
        if limit is not None and length is not None and length > int(limit):
            LOGGER.warning("Rejected %s %s: body of %d bytes exceeds %s", request.method, request.path, length, limit)
            raise RequestEntityTooLarge()
        if limit is not None and length is None:
            # chunked bodies carry no length; reading them enforces the limit here
            request.get_data(cache=True)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(_exc: RequestEntityTooLarge):
        return jsonify({"error": "Request body too large"}), HTTPStatus.REQUEST_ENTITY_TOO_LARGE

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        status = exc.code or HTTPStatus.INTERNAL_SERVER_ERROR.value
        return jsonify({"error": exc.name, "message": exc.description}), status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        LOGGER.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error", "message": str(exc)}), HTTPStatus.INTERNAL_SERVER_ERROR


def register_blueprints(app: Flask) -> None:
    from ..routes import API_BLUEPRINTS

    for blueprint in API_BLUEPRINTS:
        app.register_blueprint(blueprint)


__all__ = [
    "configure_cors",
    "enforce_body_limit",
    "init_transcode_service",
    "register_blueprints",
    "register_error_handlers",
    "register_request_logging",
    "resolve_cors_origins",
]
