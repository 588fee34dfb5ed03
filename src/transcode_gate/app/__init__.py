"""Transcode gate application factory."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask

from .bootstrap import init_logging, load_configuration
from .extensions import (
    configure_cors,
    enforce_body_limit,
    init_transcode_service,
    register_blueprints,
    register_error_handlers,
    register_request_logging,
    resolve_cors_origins,
)


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the transcode gate Flask application."""

    init_logging()
    app = Flask(__name__)
    load_configuration(app, config)

    init_transcode_service(app)

    register_request_logging(app)
    enforce_body_limit(app)
    register_blueprints(app)
    register_error_handlers(app)

    configure_cors(app, resolve_cors_origins(app.config.get("TRANSCODE_GATE_CORS_ORIGINS")))

    return app


__all__ = ["create_app"]
