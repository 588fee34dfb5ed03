"""In-memory log of finished transcode jobs, newest first."""
from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, List, Optional


@dataclass(frozen=True)
class TranscodeLogEntry:
    id: str
    timestamp: datetime
    source_code: str
    output: str
    source_language: str
    target_language: str
    success: bool
    error: Optional[str] = None


class TranscodeLog:
    def __init__(self, max_entries: int = 100) -> None:
        self._entries: Deque[TranscodeLogEntry] = deque(maxlen=max(1, max_entries))
        self._lock = threading.Lock()

    def add(self, entry: TranscodeLogEntry) -> None:
        with self._lock:
            self._entries.appendleft(entry)

    def entries(self) -> List[TranscodeLogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["TranscodeLog", "TranscodeLogEntry"]
