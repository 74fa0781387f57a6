"""Query governance errors.

Every error carries the correlation ID of the operation that raised it so a
rejected attempt stays traceable in the audit trail.
"""

from __future__ import annotations

from typing import Iterable

from ..governance.types import Violation


class QueryGovernanceError(Exception):
    """Base class for lifecycle failures."""

    def __init__(self, message: str, correlation_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.correlation_id = correlation_id

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "correlation_id": self.correlation_id,
        }


class ValidationError(QueryGovernanceError):
    """Request rejected before persistence, with itemised violations."""

    def __init__(
        self,
        violations: Iterable[Violation],
        correlation_id: str | None = None,
        message: str | None = None,
    ):
        self.violations = list(violations)
        codes = ", ".join(v.code for v in self.violations)
        super().__init__(message or f"Validation failed: {codes}", correlation_id)

    @property
    def violation_codes(self) -> list[str]:
        return [v.code for v in self.violations]

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["violations"] = [v.to_dict() for v in self.violations]
        return data


class ConflictError(QueryGovernanceError):
    """Optimistic version check failed; the caller must re-read and retry."""

    def __init__(
        self,
        query_id: int,
        expected_version: int,
        actual_version: int | None,
        correlation_id: str | None = None,
    ):
        self.query_id = query_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Version conflict on query {query_id}: expected {expected_version}, found {actual_version}",
            correlation_id,
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["expected_version"] = self.expected_version
        data["actual_version"] = self.actual_version
        return data


class NotFoundError(QueryGovernanceError):
    """Unknown query id or name."""


class InUseError(QueryGovernanceError):
    """Delete blocked by an active consumer reference."""

    def __init__(self, query_id: int, correlation_id: str | None = None):
        self.query_id = query_id
        super().__init__(f"Query {query_id} is referenced by an active consumer", correlation_id)


class InfrastructureError(QueryGovernanceError):
    """Persistence failure, raised from the underlying store error."""
