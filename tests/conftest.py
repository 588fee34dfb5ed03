from __future__ import annotations

import os
import tempfile

os.environ.setdefault("TRANSCODE_GATE_LOG_DIR", tempfile.mkdtemp(prefix="transcode-gate-logs-"))

import pytest  # noqa: E402

from transcode_gate.app import create_app  # noqa: E402

ALLOWED_ORIGIN = "http://localhost:5173"


@pytest.fixture()
def app():
    app = create_app(
        {
            "TESTING": True,
            "TRANSCODE_SIMULATED_DELAY_SECONDS": 0.0,
            "TRANSCODE_GATE_CORS_ORIGINS": [ALLOWED_ORIGIN, "http://localhost:5174"],
        }
    )
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()
