"""Audit event types."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AuditEventType(str, Enum):
    """Operation an audit event records."""
    QUERY_CREATE = "query_create"
    QUERY_UPDATE = "query_update"
    QUERY_DELETE = "query_delete"
    MAPPING_SUGGEST = "mapping_suggest"
    MAPPING_RESCORE = "mapping_rescore"


class AuditOutcome(str, Enum):
    """Outcome of the audited operation."""
    SUCCESS = "success"
    VALIDATION_FAILED = "validation_failed"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    IN_USE = "in_use"
    ERROR = "error"


def new_correlation_id() -> str:
    """Fresh correlation ID for one logical operation."""
    return f"corr_{uuid.uuid4()}"


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """
    A single audit record.

    Ties one operation attempt, successful or not, to its correlation ID.
    """
    correlation_id: str
    event_type: AuditEventType
    outcome: AuditOutcome
    timestamp: datetime
    actor: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        correlation_id: str,
        event_type: AuditEventType,
        payload: dict[str, Any] | None = None,
        outcome: AuditOutcome = AuditOutcome.SUCCESS,
        actor: str | None = None,
    ) -> AuditEvent:
        """Factory method stamping the current UTC time."""
        return cls(
            correlation_id=correlation_id,
            event_type=event_type,
            outcome=outcome,
            timestamp=datetime.now(timezone.utc),
            actor=actor,
            payload=dict(payload or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "correlation_id": self.correlation_id,
            "event_type": self.event_type.value,
            "outcome": self.outcome.value,
            "timestamp": self.timestamp.isoformat(),
            "actor": self.actor,
            "payload": self.payload,
        }
