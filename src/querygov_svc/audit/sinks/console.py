"""Console sink for development/debugging."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass

from ..events import AuditEvent
from .base import AuditSink


@dataclass
class ConsoleSink(AuditSink):
    """Sink that writes events to stdout/stderr."""
    # Output destination
    stream: str = "stdout"  # stdout | stderr

    # Output format
    format: str = "json"  # json | compact

    # Prefix for each line
    prefix: str = "[AUDIT] "

    def send(self, event: AuditEvent) -> None:
        out = sys.stdout if self.stream == "stdout" else sys.stderr
        print(f"{self.prefix}{self._format_event(event)}", file=out)

    def _format_event(self, event: AuditEvent) -> str:
        if self.format == "compact":
            return (
                f"{event.timestamp.isoformat()} "
                f"{event.correlation_id} "
                f"{event.event_type.value} "
                f"{event.outcome.value} "
                f"{event.actor or '-'}"
            )
        return json.dumps(event.to_dict(), default=str)
