"""Audit - correlation-tagged events for every governed operation."""

from .events import AuditEvent, AuditEventType, AuditOutcome, new_correlation_id
from .bridge import CorrelationAuditBridge, create_bridge, create_sink

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditOutcome",
    "new_correlation_id",
    "CorrelationAuditBridge",
    "create_bridge",
    "create_sink",
]
