"""Query lifecycle manager - create, update and soft-delete query definitions.

Each mutating call runs under a fresh correlation ID. The ID is logged,
stamped on the stored record, attached to any error raised, and emitted to
the audit bridge whether the call succeeds or fails.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, TypeVar

from ..audit import AuditEventType, AuditOutcome, CorrelationAuditBridge, new_correlation_id
from ..config import Config
from ..governance import ComplexityAndParameterAnalyzer, SqlGovernanceValidator, Violation
from .errors import (
    ConflictError,
    InfrastructureError,
    InUseError,
    NotFoundError,
    QueryGovernanceError,
    ValidationError,
)
from .policy import FieldPolicyValidator, infer_data_classification, infer_security_classification
from .store import QueryStore, RecordNotFound, VersionConflict
from .templates import template_library
from .types import (
    CreateQueryRequest,
    DataClassification,
    DeletionResult,
    QueryDefinition,
    QueryStatus,
    QueryType,
    QueryUpdate,
    QueryValidationReport,
    SecurityClassification,
)
from .usage import NoUsageOracle, UsageOracle

logger = logging.getLogger(__name__)

T = TypeVar("T")

_OUTCOMES: dict[type, AuditOutcome] = {
    ValidationError: AuditOutcome.VALIDATION_FAILED,
    ConflictError: AuditOutcome.CONFLICT,
    NotFoundError: AuditOutcome.NOT_FOUND,
    InUseError: AuditOutcome.IN_USE,
    InfrastructureError: AuditOutcome.ERROR,
}


class QueryLifecycleManager:
    """
    Owns every state change of a QueryDefinition.

    States are ACTIVE, INACTIVE and DEPRECATED. ACTIVE and INACTIVE toggle
    through ``update``; DEPRECATED is reached only through ``soft_delete``
    and is terminal. Writes are compare-and-swap on ``version``: no lock is
    held between read and write, and a stale ``expected_version`` is
    rejected with ConflictError.
    """

    def __init__(
        self,
        store: QueryStore,
        usage_oracle: UsageOracle | None = None,
        audit: CorrelationAuditBridge | None = None,
        config: Config | None = None,
    ):
        self.config = config or Config()
        self.store = store
        self.usage_oracle = usage_oracle or NoUsageOracle()
        self.audit = audit or CorrelationAuditBridge(enabled=False)
        self.sql_validator = SqlGovernanceValidator(self.config.governance)
        self.analyzer = ComplexityAndParameterAnalyzer(self.config.complexity)
        self.policy = FieldPolicyValidator(self.config.policy)

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, request: CreateQueryRequest) -> QueryDefinition:
        """Validate and persist a new definition as ACTIVE, version 1.

        Raises:
            ValidationError: Unsafe SQL, policy violation or duplicate name.
            InfrastructureError: The store failed.
        """
        correlation_id = new_correlation_id()
        payload = {"source_system": request.source_system, "name": request.name}
        logger.info(f"Creating query {request.source_system}/{request.name} [{correlation_id}]")

        try:
            violations = self._check_create_fields(request)
            sql_violations, parameter_names = self._check_sql(request.sql, request.parameter_names)
            violations.extend(sql_violations)
            if violations:
                raise ValidationError(violations)

            self._check_unique(request.source_system, request.name, correlation_id)

            data_classification = (
                DataClassification(request.data_classification)
                if request.data_classification
                else infer_data_classification(request.sql)
            )
            security_classification = (
                SecurityClassification(request.security_classification)
                if request.security_classification
                else infer_security_classification(data_classification)
            )

            now = datetime.now()
            definition = QueryDefinition(
                id=None,
                source_system=request.source_system,
                name=request.name,
                sql=request.sql,
                query_type=QueryType(request.query_type),
                description=request.description or "",
                data_classification=data_classification,
                security_classification=security_classification,
                max_execution_time_seconds=request.max_execution_time_seconds,
                max_result_rows=request.max_result_rows,
                parameter_names=parameter_names,
                status=QueryStatus.ACTIVE,
                version=1,
                created_by=request.created_by,
                created_at=now,
                updated_by=request.created_by,
                updated_at=now,
                last_correlation_id=correlation_id,
            )
            stored = self._persist(lambda: self.store.insert(definition))
        except QueryGovernanceError as e:
            self._fail(correlation_id, AuditEventType.QUERY_CREATE, e, payload, request.created_by)
            raise

        payload["query_id"] = stored.id
        self.audit.emit(correlation_id, AuditEventType.QUERY_CREATE, payload, actor=request.created_by)
        logger.info(f"Created query {stored.id} ({stored.source_system}/{stored.name}) [{correlation_id}]")
        return stored

    def update(
        self,
        query_id: int,
        expected_version: int,
        changes: QueryUpdate,
        updated_by: str = "system",
    ) -> QueryDefinition:
        """Apply a partial update if ``expected_version`` is still current.

        Raises:
            NotFoundError: Unknown ``query_id``.
            ConflictError: ``expected_version`` differs from the stored version.
            ValidationError: Invalid fields, SQL, status transition or name clash.
        """
        correlation_id = new_correlation_id()
        payload: dict[str, Any] = {
            "query_id": query_id,
            "expected_version": expected_version,
            "fields": changes.changed_fields(),
        }
        logger.info(f"Updating query {query_id} at version {expected_version} [{correlation_id}]")

        try:
            current = self._persist(lambda: self.store.get(query_id))
            if current is None:
                raise NotFoundError(f"Query definition not found: {query_id}")
            if current.version != expected_version:
                raise ConflictError(query_id, expected_version, current.version)

            violations = self._check_update_fields(current, changes)

            sql = changes.sql if changes.sql is not None else current.sql
            parameter_names = current.parameter_names
            if changes.sql is not None or changes.parameter_names is not None:
                declared = changes.parameter_names
                if declared is None and changes.sql is None:
                    declared = list(current.parameter_names)
                sql_violations, parameter_names = self._check_sql(sql, declared)
                violations.extend(sql_violations)

            if violations:
                raise ValidationError(violations)

            source_system = changes.source_system or current.source_system
            name = changes.name or current.name
            if (source_system, name) != (current.source_system, current.name):
                self._check_unique(source_system, name, correlation_id, exclude_id=query_id)

            updated = dataclasses.replace(
                current,
                source_system=source_system,
                name=name,
                sql=sql,
                query_type=QueryType(changes.query_type) if changes.query_type else current.query_type,
                description=changes.description if changes.description is not None else current.description,
                data_classification=(
                    DataClassification(changes.data_classification)
                    if changes.data_classification else current.data_classification
                ),
                security_classification=(
                    SecurityClassification(changes.security_classification)
                    if changes.security_classification else current.security_classification
                ),
                max_execution_time_seconds=(
                    changes.max_execution_time_seconds
                    if changes.max_execution_time_seconds is not None else current.max_execution_time_seconds
                ),
                max_result_rows=changes.max_result_rows if changes.max_result_rows is not None else current.max_result_rows,
                parameter_names=parameter_names,
                status=QueryStatus(changes.status) if changes.status else current.status,
                version=current.version + 1,
                updated_by=updated_by,
                updated_at=datetime.now(),
                last_correlation_id=correlation_id,
            )
            stored = self._persist(lambda: self.store.update(updated, expected_version))
        except QueryGovernanceError as e:
            self._fail(correlation_id, AuditEventType.QUERY_UPDATE, e, payload, updated_by)
            raise

        payload["version"] = stored.version
        self.audit.emit(correlation_id, AuditEventType.QUERY_UPDATE, payload, actor=updated_by)
        logger.info(f"Updated query {query_id} to version {stored.version} [{correlation_id}]")
        return stored

    def soft_delete(self, query_id: int, justification: str, deleted_by: str = "system") -> DeletionResult:
        """Deprecate a definition. Irreversible.

        Raises:
            ValidationError: Justification too short, or already deprecated.
            NotFoundError: Unknown ``query_id``.
            InUseError: An active consumer references the definition.
        """
        correlation_id = new_correlation_id()
        payload = {"query_id": query_id, "justification": justification}
        logger.info(f"Deleting query {query_id} [{correlation_id}]")

        try:
            violations = self.policy.check_justification(justification)
            if violations:
                raise ValidationError(violations)

            current = self._persist(lambda: self.store.get(query_id))
            if current is None:
                raise NotFoundError(f"Query definition not found: {query_id}")
            if current.status.is_terminal:
                raise ValidationError([Violation("QUERY_DEPRECATED", f"Query {query_id} is already deprecated")])
            if self._persist(lambda: self.usage_oracle.is_in_use(query_id)):
                raise InUseError(query_id)

            stored = self._persist(lambda: self.store.set_status(
                query_id, QueryStatus.DEPRECATED, current.version, deleted_by, correlation_id,
            ))
        except QueryGovernanceError as e:
            self._fail(correlation_id, AuditEventType.QUERY_DELETE, e, payload, deleted_by)
            raise

        result = DeletionResult(
            deleted=True,
            query_id=query_id,
            name=stored.name,
            source_system=stored.source_system,
            deleted_by=deleted_by,
            deleted_at=stored.updated_at or datetime.now(),
            correlation_id=correlation_id,
            audit_reference=f"audit_{correlation_id[len('corr_'):]}",
            version=stored.version,
        )
        payload["audit_reference"] = result.audit_reference
        self.audit.emit(correlation_id, AuditEventType.QUERY_DELETE, payload, actor=deleted_by)
        logger.info(f"Deprecated query {query_id} ({stored.source_system}/{stored.name}) [{correlation_id}]")
        return result

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, query_id: int) -> QueryDefinition:
        definition = self._persist(lambda: self.store.get(query_id))
        if definition is None:
            raise NotFoundError(f"Query definition not found: {query_id}")
        return definition

    def list(self, source_system: str | None = None, include_deprecated: bool = False) -> list[QueryDefinition]:
        return self._persist(lambda: self.store.list(source_system, include_deprecated))

    def validate_query(self, sql: str | None, parameter_names: list[str] | None = None) -> QueryValidationReport:
        """Run governance and complexity checks without persisting anything."""
        governance = self.sql_validator.validate(sql)
        declared = parameter_names if parameter_names is not None else sorted(self._extracted(sql))
        report = self.analyzer.analyze(sql, declared)
        violations = list(governance.violations) + self.analyzer.violations(report)
        return QueryValidationReport(governance=governance, complexity=report, violations=tuple(violations))

    def templates(self) -> dict[str, Any]:
        return template_library()

    # =========================================================================
    # Internals
    # =========================================================================

    def _check_create_fields(self, request: CreateQueryRequest) -> list[Violation]:
        p = self.policy
        return [
            *p.check_source_system(request.source_system),
            *p.check_name(request.name),
            *p.check_description(request.description),
            *p.check_query_type(request.query_type),
            *p.check_classifications(request.data_classification, request.security_classification),
            *p.check_caps(request.max_execution_time_seconds, request.max_result_rows),
            *p.check_justification(request.justification),
        ]

    def _check_update_fields(self, current: QueryDefinition, changes: QueryUpdate) -> list[Violation]:
        if current.status.is_terminal:
            return [Violation("QUERY_DEPRECATED", f"Query {current.id} is deprecated and cannot be modified")]

        p = self.policy
        violations: list[Violation] = []
        if changes.source_system is not None:
            violations.extend(p.check_source_system(changes.source_system))
        if changes.name is not None:
            violations.extend(p.check_name(changes.name))
        if changes.query_type is not None:
            violations.extend(p.check_query_type(changes.query_type))
        violations.extend(p.check_description(changes.description))
        violations.extend(p.check_classifications(changes.data_classification, changes.security_classification))
        violations.extend(p.check_caps(changes.max_execution_time_seconds, changes.max_result_rows))

        if changes.status is not None:
            if changes.status == QueryStatus.DEPRECATED.value:
                violations.append(Violation(
                    "INVALID_STATUS_TRANSITION",
                    "Queries can only be deprecated through delete",
                ))
            elif changes.status not in (QueryStatus.ACTIVE.value, QueryStatus.INACTIVE.value):
                violations.append(Violation("INVALID_STATUS", f"Unknown status: {changes.status}"))
        return violations

    def _check_sql(self, sql: str | None, declared: list[str] | None) -> tuple[list[Violation], tuple[str, ...]]:
        """Governance plus complexity checks.

        Returns the violations and the parameter names to store. Without an
        explicit declaration the placeholders found in the SQL are adopted.
        """
        governance = self.sql_validator.validate(sql)
        if declared is None:
            declared = sorted(self._extracted(sql))
        report = self.analyzer.analyze(sql, declared)
        violations = list(governance.violations) + self.analyzer.violations(report)
        if governance.warnings:
            logger.debug(f"Governance warnings: {[w.code for w in governance.warnings]}")
        return violations, tuple(sorted(name.lstrip(":") for name in declared))

    def _extracted(self, sql: str | None) -> set[str]:
        return set(self.analyzer.analyze(sql).extracted_parameter_names)

    def _check_unique(
        self,
        source_system: str,
        name: str,
        correlation_id: str,
        exclude_id: int | None = None,
    ) -> None:
        existing = self._persist(lambda: self.store.find_by_name(source_system, name))
        if existing is not None and existing.id != exclude_id:
            raise ValidationError([Violation(
                "DUPLICATE_NAME",
                f"Query name '{name}' already exists for source system '{source_system}'",
            )], correlation_id)

    def _persist(self, operation: Callable[[], T]) -> T:
        """Run a store or usage-oracle call, mapping failures onto lifecycle errors."""
        try:
            return operation()
        except RecordNotFound as e:
            raise NotFoundError(str(e)) from e
        except VersionConflict as e:
            raise ConflictError(e.query_id, e.expected_version, e.actual_version) from e
        except Exception as e:
            raise InfrastructureError(f"Backend call failed: {e}") from e

    def _fail(
        self,
        correlation_id: str,
        event_type: AuditEventType,
        error: QueryGovernanceError,
        payload: dict[str, Any],
        actor: str,
    ) -> None:
        error.correlation_id = correlation_id
        outcome = _OUTCOMES.get(type(error), AuditOutcome.ERROR)
        details = {**payload, **error.to_dict()}

        if isinstance(error, InfrastructureError):
            logger.error(f"{event_type.value} failed: {error.message} [{correlation_id}]")
        else:
            logger.warning(f"{event_type.value} rejected: {error.message} [{correlation_id}]")

        self.audit.emit(correlation_id, event_type, details, outcome=outcome, actor=actor)
