"""Bootstrap helpers for the transcode gate Flask application."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from flask import Flask

from ..config import build_default_config
from ..logging_config import configure_logging


def init_logging() -> None:
    """Configure file and console logging for the service."""

    configure_logging("transcode-gate")


def load_configuration(app: Flask, overrides: Optional[Mapping[str, Any]] = None) -> None:
    """Populate the default configuration values on the Flask app."""

    app.config.from_mapping(build_default_config())
    if overrides:
        app.config.from_mapping(dict(overrides))


__all__ = ["init_logging", "load_configuration"]
