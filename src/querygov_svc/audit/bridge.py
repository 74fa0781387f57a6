"""Correlation audit bridge - fire-and-forget delivery of audit events."""

from __future__ import annotations

import logging
import threading
from typing import Any

from ..config import AuditConfig
from .events import AuditEvent, AuditEventType, AuditOutcome
from .sinks import AuditSink, ConsoleSink, FileSink, LogSink

logger = logging.getLogger(__name__)


class CorrelationAuditBridge:
    """
    Delivers audit events to the configured sinks.

    Emission never raises: a failing sink is logged and counted, and the
    primary operation carries on with its own result.
    """

    def __init__(self, sinks: list[AuditSink] | None = None, enabled: bool = True) -> None:
        self._sinks: list[AuditSink] = list(sinks or [])
        self.enabled = enabled
        self._lock = threading.Lock()
        self._stats = {"emitted": 0, "errors": 0}

    def add_sink(self, sink: AuditSink) -> None:
        self._sinks.append(sink)

    def emit(
        self,
        correlation_id: str,
        event_type: AuditEventType,
        payload: dict[str, Any] | None = None,
        outcome: AuditOutcome = AuditOutcome.SUCCESS,
        actor: str | None = None,
    ) -> bool:
        """Emit an event. Returns True when every sink accepted it."""
        if not self.enabled:
            return False

        try:
            event = AuditEvent.create(correlation_id, event_type, payload, outcome=outcome, actor=actor)
        except Exception as e:
            logger.error(f"Could not build audit event for {correlation_id}: {e}")
            self._count("errors")
            return False

        delivered = True
        for sink in self._sinks:
            try:
                sink.send(event)
            except Exception as e:
                logger.error(f"Audit sink {type(sink).__name__} failed for {correlation_id}: {e}")
                self._count("errors")
                delivered = False

        self._count("emitted")
        return delivered

    def close(self) -> None:
        for sink in self._sinks:
            try:
                sink.close()
            except Exception as e:
                logger.error(f"Error closing audit sink {type(sink).__name__}: {e}")
        logger.info(f"Audit bridge closed. Stats: {self.stats}")

    def _count(self, key: str) -> None:
        with self._lock:
            self._stats[key] += 1

    @property
    def stats(self) -> dict:
        with self._lock:
            return {**self._stats, "sinks": len(self._sinks)}


def create_sink(config: AuditConfig) -> AuditSink:
    """Build the sink named by ``config.sink_type``."""
    sink_type = config.sink_type.lower()
    if sink_type == "log":
        return LogSink(**config.sink_config)
    if sink_type == "console":
        return ConsoleSink(**config.sink_config)
    if sink_type == "file":
        return FileSink(**config.sink_config)
    raise ValueError(f"Unknown audit sink type: {config.sink_type}")


def create_bridge(config: AuditConfig) -> CorrelationAuditBridge:
    """Build a bridge from configuration."""
    if not config.enabled:
        return CorrelationAuditBridge(enabled=False)
    return CorrelationAuditBridge([create_sink(config)])
