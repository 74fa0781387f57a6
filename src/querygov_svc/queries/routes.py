"""FastAPI routes for query definitions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query

from .errors import (
    ConflictError,
    InfrastructureError,
    InUseError,
    NotFoundError,
    QueryGovernanceError,
    ValidationError,
)
from .lifecycle import QueryLifecycleManager
from .models import (
    CreateQueryBody,
    DeleteQueryBody,
    DeletionResponse,
    QueryDefinitionModel,
    QueryListResponse,
    UpdateQueryBody,
    ValidateQueryBody,
    ValidationResponse,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/queries", tags=["Queries"])

# Configuration - set during app startup
_manager: QueryLifecycleManager | None = None

_STATUS_CODES: dict[type, int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    InUseError: 409,
    InfrastructureError: 503,
}


def configure(manager: QueryLifecycleManager) -> None:
    """Configure the query routes with a lifecycle manager."""
    global _manager
    _manager = manager


def _get_manager() -> QueryLifecycleManager:
    """Get the manager, raising if not configured."""
    if _manager is None:
        raise HTTPException(status_code=503, detail="Query module not initialized")
    return _manager


def to_http_error(error: QueryGovernanceError) -> HTTPException:
    """Map a lifecycle error onto an HTTP error carrying its details."""
    return HTTPException(
        status_code=_STATUS_CODES.get(type(error), 500),
        detail=error.to_dict(),
    )


@router.get("/templates")
async def get_templates():
    """Starter templates grouped by business area."""
    return _get_manager().templates()


@router.post("/validate", response_model=ValidationResponse)
async def validate_query(body: ValidateQueryBody):
    """Dry-run governance and complexity checks."""
    report = _get_manager().validate_query(body.sql, body.parameter_names)
    return ValidationResponse(**report.to_dict())


@router.get("", response_model=QueryListResponse)
async def list_queries(
    source_system: str | None = Query(None, description="Filter by source system"),
    include_deprecated: bool = Query(False),
):
    """List query definitions."""
    try:
        definitions = _get_manager().list(source_system, include_deprecated)
    except QueryGovernanceError as e:
        raise to_http_error(e)
    return QueryListResponse(
        queries=[QueryDefinitionModel.from_definition(d) for d in definitions],
        total=len(definitions),
    )


@router.post("", response_model=QueryDefinitionModel, status_code=201)
async def create_query(body: CreateQueryBody):
    """Create a query definition."""
    try:
        definition = _get_manager().create(body.to_request())
    except QueryGovernanceError as e:
        raise to_http_error(e)
    return QueryDefinitionModel.from_definition(definition)


@router.get("/{query_id}", response_model=QueryDefinitionModel)
async def get_query(query_id: int):
    """Get a query definition."""
    try:
        definition = _get_manager().get(query_id)
    except QueryGovernanceError as e:
        raise to_http_error(e)
    return QueryDefinitionModel.from_definition(definition)


@router.patch("/{query_id}", response_model=QueryDefinitionModel)
async def update_query(query_id: int, body: UpdateQueryBody):
    """Update a query definition under an optimistic version check."""
    try:
        definition = _get_manager().update(
            query_id, body.expected_version, body.to_update(), updated_by=body.updated_by,
        )
    except QueryGovernanceError as e:
        raise to_http_error(e)
    return QueryDefinitionModel.from_definition(definition)


@router.delete("/{query_id}", response_model=DeletionResponse)
async def delete_query(query_id: int, body: DeleteQueryBody):
    """Deprecate a query definition. Irreversible."""
    try:
        result = _get_manager().soft_delete(query_id, body.justification, deleted_by=body.deleted_by)
    except QueryGovernanceError as e:
        raise to_http_error(e)
    return DeletionResponse(**result.to_dict())
