"""Base sink interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..events import AuditEvent


class AuditSink(ABC):
    """
    Abstract base class for audit sinks.

    Sinks receive single events and deliver them to a destination
    (log, console, file, message queue, etc.).
    """

    @abstractmethod
    def send(self, event: AuditEvent) -> None:
        """Deliver one event. May raise; the bridge contains the failure."""
        ...

    def close(self) -> None:
        """Release resources (called on shutdown)."""
        pass
