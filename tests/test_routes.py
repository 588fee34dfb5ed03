from __future__ import annotations

import io
import json
from datetime import datetime, timezone

from transcode_gate.app import create_app
from transcode_gate.service import INTERNAL_ERROR_MESSAGE, TranscodeService

ALLOWED_ORIGIN = "http://localhost:5173"
JS_ADD = "function add(a,b) { return a+b; }"


def test_health_reports_ok(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["message"] == "Server is running"


def test_transcode_javascript_function_to_python(client) -> None:
    before = datetime.now(timezone.utc)
    response = client.post("/api/transcode", json={"code": JS_ADD})
    after = datetime.now(timezone.utc)

    assert response.status_code == 200
    payload = response.get_json()
    assert "def add(" in payload["output"]
    metadata = payload["metadata"]
    assert metadata["sourceLanguage"] == "javascript"
    assert metadata["targetLanguage"] == "python"
    timestamp = datetime.fromisoformat(metadata["timestamp"])
    assert before <= timestamp <= after


def test_transcode_is_deterministic(client) -> None:
    body = {"code": "def greet(name):\n    return name", "sourceLanguage": "python"}

    first = client.post("/api/transcode", json=body).get_json()
    second = client.post("/api/transcode", json=body).get_json()

    assert first["output"] == second["output"]
    assert first["output"].startswith("function greet(name) {")


def test_transcode_rejects_missing_code(client) -> None:
    for body in ({}, {"code": ""}, {"code": "   \n\t"}, {"code": 42}):
        response = client.post("/api/transcode", json=body)
        assert response.status_code == 400
        assert response.get_json() == {"error": "Code is required"}


def test_transcode_rejects_non_json_body(client) -> None:
    response = client.post("/api/transcode", data="code=1", content_type="text/plain")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Code is required"


def test_transcode_rejects_unknown_language(client) -> None:
    response = client.post("/api/transcode", json={"code": "x = 1", "targetLanguage": "cobol"})

    assert response.status_code == 400
    assert response.get_json()["error"] == "Unsupported language: cobol"


def test_transcode_defaults_languages_to_auto(client) -> None:
    response = client.post("/api/transcode", json={"code": "let x = 1"})

    payload = response.get_json()
    assert response.status_code == 200
    assert payload["output"] == "// Transcoded code\nlet x = 1"
    assert payload["metadata"]["sourceLanguage"] == "auto"
    assert payload["metadata"]["targetLanguage"] == "auto"


def test_transcode_internal_failure_returns_structured_500(app, client) -> None:
    def _explode(code, source, target):
        raise RuntimeError("rules crashed")

    app.extensions["transcode_service"] = TranscodeService(transform=_explode)

    response = client.post("/api/transcode", json={"code": JS_ADD})

    assert response.status_code == 500
    assert response.get_json() == {"error": INTERNAL_ERROR_MESSAGE, "details": "rules crashed"}
    assert client.get("/health").status_code == 200


def test_oversized_body_is_rejected_before_processing() -> None:
    calls = []

    def _record(code, source, target):
        calls.append(code)
        return code, source, target

    app = create_app({"TESTING": True, "MAX_CONTENT_LENGTH": 64})
    app.extensions["transcode_service"] = TranscodeService(transform=_record)

    response = app.test_client().post("/api/transcode", json={"code": "x" * 500})

    assert response.status_code == 413
    assert response.get_json() == {"error": "Request body too large"}
    assert calls == []


def test_chunked_body_over_limit_is_rejected() -> None:
    calls = []

    def _record(code, source, target):
        calls.append(code)
        return code, source, target

    app = create_app({"TESTING": True, "MAX_CONTENT_LENGTH": 1024})
    app.extensions["transcode_service"] = TranscodeService(transform=_record)
    body = json.dumps({"code": "x" * 5000}).encode("utf-8")

    response = app.test_client().post(
        "/api/transcode",
        input_stream=io.BytesIO(body),
        content_type="application/json",
        headers={"Transfer-Encoding": "chunked"},
    )

    assert response.status_code == 413
    assert response.get_json() == {"error": "Request body too large"}
    assert calls == []


def test_cors_headers_for_allowed_origin(client) -> None:
    response = client.get("/health", headers={"Origin": ALLOWED_ORIGIN})

    assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
    assert response.headers["Access-Control-Allow-Credentials"] == "true"
    assert "Origin" in response.headers.get("Vary", "")


def test_cors_headers_absent_for_unknown_origin(client) -> None:
    response = client.get("/health", headers={"Origin": "http://evil.example"})

    assert "Access-Control-Allow-Origin" not in response.headers
    assert response.status_code == 200


def test_cors_preflight(client) -> None:
    response = client.options(
        "/api/transcode",
        headers={"Origin": ALLOWED_ORIGIN, "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert "POST" in response.headers["Access-Control-Allow-Methods"]
    assert "Content-Type" in response.headers["Access-Control-Allow-Headers"]


def test_wildcard_cors_mirrors_origin() -> None:
    app = create_app({"TESTING": True, "TRANSCODE_GATE_CORS_ORIGINS": "*"})

    response = app.test_client().get("/health", headers={"Origin": "http://192.168.1.104:5174"})

    assert response.headers["Access-Control-Allow-Origin"] == "http://192.168.1.104:5174"


def test_unknown_route_returns_json_error(client) -> None:
    response = client.get("/api/missing")

    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"


def test_wrong_method_returns_json_error(client) -> None:
    response = client.get("/api/transcode")

    assert response.status_code == 405
