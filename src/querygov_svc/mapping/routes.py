"""FastAPI routes for field mapping suggestions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query

from ..audit import AuditEventType, CorrelationAuditBridge, new_correlation_id
from ..queries.errors import QueryGovernanceError
from ..queries.routes import to_http_error
from .models import RescoreRequest, SuggestionListResponse, SuggestionModel, SuggestRequest
from .service import FieldMappingService

if TYPE_CHECKING:
    from ..queries.lifecycle import QueryLifecycleManager

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Mappings"])

# Configuration - set during app startup
_service: FieldMappingService | None = None
_manager: "QueryLifecycleManager | None" = None
_audit: CorrelationAuditBridge | None = None


def configure(
    service: FieldMappingService,
    manager: "QueryLifecycleManager | None" = None,
    audit: CorrelationAuditBridge | None = None,
) -> None:
    """Configure the mapping routes."""
    global _service, _manager, _audit
    _service = service
    _manager = manager
    _audit = audit


def _get_service() -> FieldMappingService:
    """Get the service, raising if not configured."""
    if _service is None:
        raise HTTPException(status_code=503, detail="Mapping module not initialized")
    return _service


def _respond(
    suggestions,
    event_type: AuditEventType,
    payload: dict,
    correlation_id: str | None = None,
) -> SuggestionListResponse:
    correlation_id = correlation_id or new_correlation_id()
    if _audit is not None:
        _audit.emit(correlation_id, event_type, {**payload, "suggestions": len(suggestions)})
    return SuggestionListResponse(
        suggestions=[SuggestionModel.from_suggestion(s) for s in suggestions],
        total=len(suggestions),
        correlation_id=correlation_id,
    )


@router.post("/mappings/suggest", response_model=SuggestionListResponse)
async def suggest_mappings(body: SuggestRequest):
    """Rank archetype suggestions for the given columns."""
    service = _get_service()
    suggestions = service.suggest([c.to_column() for c in body.columns], body.target_context)
    return _respond(
        suggestions,
        AuditEventType.MAPPING_SUGGEST,
        {"columns": len(body.columns), "target_context": body.target_context},
    )


@router.post("/mappings/rescore", response_model=SuggestionListResponse)
async def rescore_mappings(body: RescoreRequest):
    """Re-score previously produced suggestions."""
    service = _get_service()
    suggestions = service.rescore([s.to_suggestion() for s in body.suggestions])
    return _respond(suggestions, AuditEventType.MAPPING_RESCORE, {"input": len(body.suggestions)})


@router.get("/queries/{query_id}/mappings", response_model=SuggestionListResponse)
async def suggest_for_query(
    query_id: int,
    target_context: str | None = Query(None, description="Target schema or table context"),
):
    """Suggest mappings for the columns a stored query returns."""
    service = _get_service()
    if service.column_provider is None:
        raise HTTPException(status_code=503, detail="No column metadata provider configured")

    correlation_id = new_correlation_id()
    if _manager is not None:
        try:
            _manager.get(query_id)
        except QueryGovernanceError as e:
            e.correlation_id = e.correlation_id or correlation_id
            logger.warning(f"Mapping lookup for query {query_id} failed: {e.message} [{e.correlation_id}]")
            raise to_http_error(e)

    suggestions = service.suggest_for_query(str(query_id), target_context)
    return _respond(
        suggestions,
        AuditEventType.MAPPING_SUGGEST,
        {"query_id": query_id, "target_context": target_context},
        correlation_id,
    )
