"""Retry policy: how many attempts a job gets and how long to pause between them."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from ..utils import coerce_float, coerce_int


class BackoffStrategy(str, Enum):
    NONE = "none"
    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"

    @classmethod
    def parse(cls, value: Any) -> "BackoffStrategy":
        if isinstance(value, BackoffStrategy):
            return value
        text = str(value or "").strip().lower()
        try:
            return cls(text)
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown backoff strategy {value!r} (expected one of: {choices})") from exc


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    base_delay: float = 1.0
    factor: float = 2.0
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")
        object.__setattr__(self, "backoff", BackoffStrategy.parse(self.backoff))

    @classmethod
    def from_config(cls, config: Mapping[str, Any], **overrides: Any) -> "RetryPolicy":
        values = {
            "max_attempts": coerce_int(config.get("TRANSCODE_RETRY_MAX_ATTEMPTS"), 3),
            "backoff": config.get("TRANSCODE_RETRY_BACKOFF") or BackoffStrategy.EXPONENTIAL,
            "base_delay": coerce_float(config.get("TRANSCODE_RETRY_BASE_DELAY"), 1.0),
            "max_delay": coerce_float(config.get("TRANSCODE_RETRY_MAX_DELAY"), 10.0),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` before issuing the next one."""

        step = max(1, attempt)
        if self.backoff is BackoffStrategy.NONE:
            delay = 0.0
        elif self.backoff is BackoffStrategy.FIXED:
            delay = self.base_delay
        elif self.backoff is BackoffStrategy.LINEAR:
            delay = self.base_delay * step
        else:
            delay = self.base_delay * (self.factor ** (step - 1))
        return min(delay, self.max_delay)


__all__ = ["BackoffStrategy", "RetryPolicy"]
