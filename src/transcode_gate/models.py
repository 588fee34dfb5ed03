"""Data structures exchanged between the transcode service, client and presenter."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Union

from .errors import ValidationError

CODE_REQUIRED_MESSAGE = "Code is required"


class Language(str, Enum):
    AUTO = "auto"
    JAVASCRIPT = "javascript"
    PYTHON = "python"

    @classmethod
    def parse(cls, value: Any) -> "Language":
        """Resolve user supplied language names, accepting common aliases."""

        if value is None:
            return cls.AUTO
        if isinstance(value, Language):
            return value
        if not isinstance(value, str):
            raise ValidationError(f"Unsupported language: {value!r}")
        lowered = value.strip().lower()
        if not lowered:
            return cls.AUTO
        resolved = _LANGUAGE_ALIASES.get(lowered)
        if resolved is None:
            raise ValidationError(f"Unsupported language: {value}")
        return resolved


_LANGUAGE_ALIASES = {
    "auto": Language.AUTO,
    "javascript": Language.JAVASCRIPT,
    "js": Language.JAVASCRIPT,
    "node": Language.JAVASCRIPT,
    "python": Language.PYTHON,
    "py": Language.PYTHON,
    "python3": Language.PYTHON,
}


class FailureKind(str, Enum):
    VALIDATION = "validation"
    REJECTED = "rejected"
    INTERNAL = "internal"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TranscodeRequest:
    """A single piece of source code to convert between two languages."""

    source_code: str
    source_language: Language = Language.AUTO
    target_language: Language = Language.AUTO

    def __post_init__(self) -> None:
        if not isinstance(self.source_code, str) or not self.source_code.strip():
            raise ValidationError(CODE_REQUIRED_MESSAGE)
        object.__setattr__(self, "source_language", Language.parse(self.source_language))
        object.__setattr__(self, "target_language", Language.parse(self.target_language))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TranscodeRequest":
        """Build a request from the JSON body accepted by ``POST /api/transcode``."""

        code = payload.get("code")
        if not isinstance(code, str) or not code.strip():
            raise ValidationError(CODE_REQUIRED_MESSAGE)
        return cls(
            source_code=code,
            source_language=Language.parse(payload.get("sourceLanguage")),
            target_language=Language.parse(payload.get("targetLanguage")),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "code": self.source_code,
            "sourceLanguage": self.source_language.value,
            "targetLanguage": self.target_language.value,
        }


@dataclass(frozen=True)
class TranscodeMetadata:
    timestamp: datetime
    source_language: str = Language.AUTO.value
    target_language: str = Language.AUTO.value

    def to_payload(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "TranscodeMetadata":
        section = payload if isinstance(payload, Mapping) else {}
        return cls(
            timestamp=_parse_timestamp(section.get("timestamp")),
            source_language=str(section.get("sourceLanguage") or Language.AUTO.value),
            target_language=str(section.get("targetLanguage") or Language.AUTO.value),
        )


@dataclass(frozen=True)
class TranscodeResult:
    output: str
    metadata: TranscodeMetadata

    def to_payload(self) -> dict[str, Any]:
        return {"output": self.output, "metadata": self.metadata.to_payload()}

    @classmethod
    def from_payload(cls, payload: Any) -> "TranscodeResult":
        """Parse a success body; raises ``ValueError`` when ``output`` is absent."""

        if not isinstance(payload, Mapping):
            raise ValueError("response body is not an object")
        output = payload.get("output")
        if not isinstance(output, str):
            raise ValueError("response body has no output")
        return cls(output=output, metadata=TranscodeMetadata.from_payload(payload.get("metadata")))


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Success:
    result: TranscodeResult


@dataclass(frozen=True)
class TransientFailure:
    reason: str
    status: Optional[int] = None


@dataclass(frozen=True)
class TerminalFailure:
    reason: str
    kind: FailureKind = FailureKind.VALIDATION
    status: Optional[int] = None
    details: Optional[str] = None


TranscodeOutcome = Union[Success, TransientFailure, TerminalFailure]


@dataclass(frozen=True)
class RetryState:
    """Progress of one transcode job, owned by the orchestrator."""

    attempt: int
    max_attempts: int
    last_message: str = field(default="")

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 1 <= self.attempt <= self.max_attempts:
            raise ValueError(f"attempt {self.attempt} outside 1..{self.max_attempts}")

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt >= self.max_attempts

    def next_attempt(self, message: str) -> "RetryState":
        return replace(self, attempt=self.attempt + 1, last_message=message)


__all__ = [
    "CODE_REQUIRED_MESSAGE",
    "FailureKind",
    "Language",
    "RetryState",
    "Success",
    "TerminalFailure",
    "TranscodeMetadata",
    "TranscodeOutcome",
    "TranscodeRequest",
    "TranscodeResult",
    "TransientFailure",
]
