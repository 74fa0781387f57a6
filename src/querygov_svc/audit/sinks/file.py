"""File-based audit sink."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path

from ..events import AuditEvent
from .base import AuditSink


@dataclass
class FileSink(AuditSink):
    """
    Sink that appends events to a file (JSONL format).

    Each event is written as a single JSON line for easy parsing.
    """
    path: str
    encoding: str = "utf-8"

    # Internal state
    _file: object = field(default=None, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def _open(self) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "a", encoding=self.encoding)

    def send(self, event: AuditEvent) -> None:
        with self._lock:
            if not self._file:
                self._open()
            self._file.write(json.dumps(event.to_dict(), default=str) + "\n")
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None
