"""Configuration helpers for the transcode gate."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List

from dotenv import find_dotenv, load_dotenv


def _ensure_dotenv_loaded() -> None:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)


_ensure_dotenv_loaded()

PROJECT_ROOT = Path(__file__).resolve().parents[2]

LOGGER = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:5174")
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024
DEFAULT_API_URL = "http://localhost:3000"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRY_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BACKOFF = "exponential"
DEFAULT_RETRY_BASE_DELAY = 1.0
DEFAULT_RETRY_MAX_DELAY = 10.0


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Invalid %s=%r; falling back to %s", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        LOGGER.warning("Invalid %s=%r; falling back to %s", name, raw, default)
        return default


def _env_csv(name: str, default: Iterable[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    values = [value.strip() for value in raw.split(",") if value.strip()]
    return values if values else list(default)


def default_log_dir() -> Path:
    env_dir = os.getenv("TRANSCODE_GATE_LOG_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    if (PROJECT_ROOT / "src" / "transcode_gate").is_dir():
        return PROJECT_ROOT / "logs"
    # installed from a wheel: PROJECT_ROOT is site-packages, not a checkout
    return Path.cwd() / "logs"


def build_default_config() -> Dict[str, Any]:
    """Return the configuration mapping applied to the Flask app and the client."""

    return {
        "TRANSCODE_GATE_HOST": _env_str("TRANSCODE_GATE_HOST", DEFAULT_HOST),
        "TRANSCODE_GATE_PORT": _env_int("TRANSCODE_GATE_PORT", _env_int("PORT", DEFAULT_PORT)),
        "TRANSCODE_GATE_CORS_ORIGINS": _env_csv("TRANSCODE_GATE_CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        "MAX_CONTENT_LENGTH": _env_int("TRANSCODE_GATE_MAX_BODY_BYTES", DEFAULT_MAX_BODY_BYTES),
        "TRANSCODE_SIMULATED_DELAY_SECONDS": max(0.0, _env_float("TRANSCODE_SIMULATED_DELAY_SECONDS", 0.0)),
        "TRANSCODE_GATE_API_URL": _env_str("TRANSCODE_GATE_API_URL", DEFAULT_API_URL),
        "TRANSCODE_GATE_TIMEOUT_SECONDS": _env_float("TRANSCODE_GATE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        "TRANSCODE_RETRY_MAX_ATTEMPTS": _env_int("TRANSCODE_RETRY_MAX_ATTEMPTS", DEFAULT_RETRY_MAX_ATTEMPTS),
        "TRANSCODE_RETRY_BACKOFF": _env_str("TRANSCODE_RETRY_BACKOFF", DEFAULT_RETRY_BACKOFF).lower(),
        "TRANSCODE_RETRY_BASE_DELAY": _env_float("TRANSCODE_RETRY_BASE_DELAY", DEFAULT_RETRY_BASE_DELAY),
        "TRANSCODE_RETRY_MAX_DELAY": _env_float("TRANSCODE_RETRY_MAX_DELAY", DEFAULT_RETRY_MAX_DELAY),
        "TRANSCODE_GATE_LOG_DIR": str(default_log_dir()),
    }


__all__ = [
    "DEFAULT_CORS_ORIGINS",
    "DEFAULT_MAX_BODY_BYTES",
    "PROJECT_ROOT",
    "build_default_config",
    "default_log_dir",
]
