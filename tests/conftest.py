"""Shared test fixtures for the query governance service."""

from __future__ import annotations

import pytest

from querygov_svc.audit import CorrelationAuditBridge
from querygov_svc.audit.sinks import AuditSink
from querygov_svc.config import Config
from querygov_svc.mapping import ColumnMetadata, FieldMappingService, StaticColumnProvider
from querygov_svc.queries import (
    CreateQueryRequest,
    InMemoryQueryStore,
    QueryLifecycleManager,
    ReferenceUsageOracle,
)


class RecordingSink(AuditSink):
    """Keeps every event it receives."""

    def __init__(self) -> None:
        self.events = []
        self.closed = False

    def send(self, event) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True


class FailingSink(AuditSink):
    """Always fails, like an unreachable audit backend."""

    def send(self, event) -> None:
        raise ConnectionError("audit backend unavailable")


# =============================================================================
# Configuration & Audit
# =============================================================================

@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


@pytest.fixture
def audit_bridge(recording_sink) -> CorrelationAuditBridge:
    return CorrelationAuditBridge([recording_sink])


# =============================================================================
# Query Lifecycle
# =============================================================================

@pytest.fixture
def store() -> InMemoryQueryStore:
    return InMemoryQueryStore()


@pytest.fixture
def usage_oracle() -> ReferenceUsageOracle:
    return ReferenceUsageOracle()


@pytest.fixture
def manager(store, usage_oracle, audit_bridge, config) -> QueryLifecycleManager:
    return QueryLifecycleManager(
        store=store,
        usage_oracle=usage_oracle,
        audit=audit_bridge,
        config=config,
    )


@pytest.fixture
def make_request():
    """Factory for valid create requests; keyword arguments override fields."""
    def _make(**overrides) -> CreateQueryRequest:
        fields = {
            "source_system": "ENCORE",
            "name": "acct_summary",
            "description": "desc",
            "query_type": "SELECT",
            "sql": "SELECT account_id, balance FROM accounts WHERE customer_id = :customerId",
            "justification": "Daily reconciliation of ENCORE account balances",
        }
        fields.update(overrides)
        return CreateQueryRequest(**fields)
    return _make


# =============================================================================
# Field Mapping
# =============================================================================

@pytest.fixture
def account_columns() -> list[ColumnMetadata]:
    return [
        ColumnMetadata(name="account_number", declared_type="VARCHAR2(20)", nullable=False,
                       ordinal=1, classification="SENSITIVE"),
        ColumnMetadata(name="customer_id", declared_type="VARCHAR2(12)", nullable=True, ordinal=2),
        ColumnMetadata(name="balance", declared_type="NUMBER(18,2)", nullable=True, ordinal=3),
        ColumnMetadata(name="branch_name", declared_type="VARCHAR2(40)", ordinal=4),
    ]


@pytest.fixture
def column_provider(account_columns) -> StaticColumnProvider:
    return StaticColumnProvider({"1": account_columns})


@pytest.fixture
def mapping_service(column_provider, config) -> FieldMappingService:
    return FieldMappingService(config=config.mapping, column_provider=column_provider)
