"""Query definition types."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any

from ..governance.types import ComplexityReport, GovernanceResult, Violation


class QueryStatus(str, Enum):
    """Lifecycle state of a query definition."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DEPRECATED = "DEPRECATED"  # terminal

    @property
    def is_terminal(self) -> bool:
        return self is QueryStatus.DEPRECATED


class QueryType(str, Enum):
    """Read-only statement forms a definition may hold."""
    SELECT = "SELECT"
    WITH = "WITH"


class DataClassification(str, Enum):
    PUBLIC = "PUBLIC"
    INTERNAL = "INTERNAL"
    SENSITIVE = "SENSITIVE"
    CONFIDENTIAL = "CONFIDENTIAL"


class SecurityClassification(str, Enum):
    PUBLIC = "PUBLIC"
    INTERNAL = "INTERNAL"
    CONFIDENTIAL = "CONFIDENTIAL"
    RESTRICTED = "RESTRICTED"


@dataclass(slots=True)
class QueryDefinition:
    """
    A named, versioned SQL artifact shared across consumers.

    ``name`` is unique within ``source_system`` among Active and Inactive
    records. ``version`` starts at 1 and increases by one on every write.
    """
    id: int | None
    source_system: str
    name: str
    sql: str
    query_type: QueryType = QueryType.SELECT
    description: str = ""
    data_classification: DataClassification = DataClassification.INTERNAL
    security_classification: SecurityClassification = SecurityClassification.INTERNAL
    max_execution_time_seconds: int = 30
    max_result_rows: int = 100
    parameter_names: tuple[str, ...] = ()
    status: QueryStatus = QueryStatus.ACTIVE
    version: int = 1
    created_by: str = "system"
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None
    last_correlation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source_system": self.source_system,
            "name": self.name,
            "sql": self.sql,
            "query_type": self.query_type.value,
            "description": self.description,
            "data_classification": self.data_classification.value,
            "security_classification": self.security_classification.value,
            "max_execution_time_seconds": self.max_execution_time_seconds,
            "max_result_rows": self.max_result_rows,
            "parameter_names": list(self.parameter_names),
            "status": self.status.value,
            "version": self.version,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_by": self.updated_by,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "last_correlation_id": self.last_correlation_id,
        }


@dataclass(slots=True)
class CreateQueryRequest:
    """Input to QueryLifecycleManager.create."""
    source_system: str
    name: str
    sql: str
    justification: str
    query_type: str = QueryType.SELECT.value
    description: str = ""
    data_classification: str | None = None
    security_classification: str | None = None
    max_execution_time_seconds: int = 30
    max_result_rows: int = 100
    # None adopts the placeholders found in the SQL
    parameter_names: list[str] | None = None
    created_by: str = "system"


@dataclass(slots=True)
class QueryUpdate:
    """Partial update; ``None`` leaves a field unchanged."""
    source_system: str | None = None
    name: str | None = None
    sql: str | None = None
    query_type: str | None = None
    description: str | None = None
    data_classification: str | None = None
    security_classification: str | None = None
    max_execution_time_seconds: int | None = None
    max_result_rows: int | None = None
    parameter_names: list[str] | None = None
    status: str | None = None

    def changed_fields(self) -> list[str]:
        return [
            f.name for f in fields(self)
            if getattr(self, f.name) is not None
        ]


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Outcome of a soft delete."""
    deleted: bool
    query_id: int
    name: str
    source_system: str
    deleted_by: str
    deleted_at: datetime
    correlation_id: str
    audit_reference: str
    version: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted": self.deleted,
            "query_id": self.query_id,
            "name": self.name,
            "source_system": self.source_system,
            "deleted_by": self.deleted_by,
            "deleted_at": self.deleted_at.isoformat(),
            "correlation_id": self.correlation_id,
            "audit_reference": self.audit_reference,
            "version": self.version,
        }


@dataclass(frozen=True, slots=True)
class QueryTemplate:
    """A starter query offered to authors."""
    name: str
    sql: str
    parameters: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True, slots=True)
class TemplateCategory:
    name: str
    description: str
    templates: tuple[QueryTemplate, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class QueryValidationReport:
    """Dry-run result: governance scan plus complexity analysis."""
    governance: GovernanceResult
    complexity: ComplexityReport
    violations: tuple[Violation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [v.to_dict() for v in self.violations],
            "governance": self.governance.to_dict(),
            "complexity": self.complexity.to_dict(),
        }
