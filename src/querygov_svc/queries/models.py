"""Pydantic models for the query definition API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .types import CreateQueryRequest, QueryDefinition, QueryUpdate


class CreateQueryBody(BaseModel):
    """Body for POST /queries."""
    source_system: str
    name: str
    sql: str
    justification: str
    query_type: str = "SELECT"
    description: str = ""
    data_classification: str | None = None
    security_classification: str | None = None
    max_execution_time_seconds: int = 30
    max_result_rows: int = 100
    parameter_names: list[str] | None = None
    created_by: str = "system"

    def to_request(self) -> CreateQueryRequest:
        return CreateQueryRequest(**self.model_dump())


class UpdateQueryBody(BaseModel):
    """Body for PATCH /queries/{id}; omitted fields are left unchanged."""
    expected_version: int = Field(ge=1)
    updated_by: str = "system"
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

    def to_update(self) -> QueryUpdate:
        return QueryUpdate(**self.model_dump(exclude={"expected_version", "updated_by"}))


class DeleteQueryBody(BaseModel):
    """Body for DELETE /queries/{id}."""
    justification: str
    deleted_by: str = "system"


class ValidateQueryBody(BaseModel):
    """Body for POST /queries/validate."""
    sql: str
    parameter_names: list[str] | None = None


class QueryDefinitionModel(BaseModel):
    """A stored query definition."""
    id: int
    source_system: str
    name: str
    sql: str
    query_type: str
    description: str = ""
    data_classification: str
    security_classification: str
    max_execution_time_seconds: int
    max_result_rows: int
    parameter_names: list[str] = Field(default_factory=list)
    status: str
    version: int
    created_by: str
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None
    last_correlation_id: str | None = None

    @classmethod
    def from_definition(cls, d: QueryDefinition) -> QueryDefinitionModel:
        return cls(
            id=d.id,
            source_system=d.source_system,
            name=d.name,
            sql=d.sql,
            query_type=d.query_type.value,
            description=d.description,
            data_classification=d.data_classification.value,
            security_classification=d.security_classification.value,
            max_execution_time_seconds=d.max_execution_time_seconds,
            max_result_rows=d.max_result_rows,
            parameter_names=list(d.parameter_names),
            status=d.status.value,
            version=d.version,
            created_by=d.created_by,
            created_at=d.created_at,
            updated_by=d.updated_by,
            updated_at=d.updated_at,
            last_correlation_id=d.last_correlation_id,
        )


class QueryListResponse(BaseModel):
    """Response for GET /queries."""
    queries: list[QueryDefinitionModel]
    total: int


class DeletionResponse(BaseModel):
    """Response for DELETE /queries/{id}."""
    deleted: bool
    query_id: int
    name: str
    source_system: str
    deleted_by: str
    deleted_at: datetime
    correlation_id: str
    audit_reference: str
    version: int


class ValidationResponse(BaseModel):
    """Response for POST /queries/validate."""
    valid: bool
    violations: list[dict[str, str]]
    governance: dict[str, Any]
    complexity: dict[str, Any]
