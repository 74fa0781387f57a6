"""Logging sink - routes audit events to a dedicated logger."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from ..events import AuditEvent, AuditOutcome
from .base import AuditSink

AUDIT_LOGGER_NAME = "querygov_svc.audit"


@dataclass
class LogSink(AuditSink):
    """Sink that writes one log record per event on the audit logger."""
    logger_name: str = AUDIT_LOGGER_NAME

    def send(self, event: AuditEvent) -> None:
        level = logging.INFO if event.outcome == AuditOutcome.SUCCESS else logging.WARNING
        logging.getLogger(self.logger_name).log(
            level,
            f"{event.event_type.value} {event.outcome.value} "
            f"correlation={event.correlation_id} actor={event.actor or '-'} "
            f"payload={json.dumps(event.payload, default=str, sort_keys=True)}",
        )
