"""Field policy for query definition requests."""

from __future__ import annotations

import re

from ..config import PolicyConfig
from ..governance.types import Violation
from .types import DataClassification, QueryType, SecurityClassification

NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_\-\.]+$")

_CONFIDENTIAL_MARKERS = ("ACCOUNT", "CUSTOMER", "SSN")
_SENSITIVE_MARKERS = ("TRANSACTION", "PAYMENT", "AMOUNT")


class FieldPolicyValidator:
    """Checks request fields against the configured policy bounds.

    Each ``check_*`` method returns a list of violations; an empty list
    means the value is acceptable.
    """

    def __init__(self, config: PolicyConfig | None = None):
        self.config = config or PolicyConfig()

    def check_name(self, name: str | None) -> list[Violation]:
        cfg = self.config
        if not name or not name.strip():
            return [Violation("INVALID_NAME", "Query name is required")]
        if not cfg.min_name_length <= len(name) <= cfg.max_name_length:
            return [Violation(
                "INVALID_NAME",
                f"Query name must be between {cfg.min_name_length} and {cfg.max_name_length} characters",
            )]
        if not NAME_PATTERN.match(name):
            return [Violation(
                "INVALID_NAME",
                "Query name can only contain letters, numbers, underscores, hyphens, and periods",
            )]
        return []

    def check_source_system(self, source_system: str | None) -> list[Violation]:
        if not source_system or not source_system.strip():
            return [Violation("INVALID_SOURCE_SYSTEM", "Source system is required")]
        return []

    def check_description(self, description: str | None) -> list[Violation]:
        if description and len(description) > self.config.max_description_length:
            return [Violation(
                "DESCRIPTION_TOO_LONG",
                f"Description cannot exceed {self.config.max_description_length} characters",
            )]
        return []

    def check_query_type(self, query_type: str | None) -> list[Violation]:
        if query_type not in {t.value for t in QueryType}:
            return [Violation("INVALID_QUERY_TYPE", "Query type must be SELECT or WITH")]
        return []

    def check_classifications(
        self,
        data_classification: str | None,
        security_classification: str | None,
    ) -> list[Violation]:
        violations = []
        if data_classification is not None and data_classification not in {c.value for c in DataClassification}:
            violations.append(Violation(
                "INVALID_CLASSIFICATION",
                "Data classification must be PUBLIC, INTERNAL, SENSITIVE, or CONFIDENTIAL",
            ))
        if security_classification is not None and security_classification not in {c.value for c in SecurityClassification}:
            violations.append(Violation(
                "INVALID_CLASSIFICATION",
                "Security classification must be PUBLIC, INTERNAL, CONFIDENTIAL, or RESTRICTED",
            ))
        return violations

    def check_caps(self, max_execution_time_seconds: int | None, max_result_rows: int | None) -> list[Violation]:
        cfg = self.config
        violations = []
        if max_execution_time_seconds is not None and not 1 <= max_execution_time_seconds <= cfg.max_execution_time_seconds:
            violations.append(Violation(
                "EXECUTION_TIME_OUT_OF_RANGE",
                f"Execution time must be between 1 and {cfg.max_execution_time_seconds} seconds",
            ))
        if max_result_rows is not None and not 1 <= max_result_rows <= cfg.max_result_rows:
            violations.append(Violation(
                "RESULT_ROWS_OUT_OF_RANGE",
                f"Result rows must be between 1 and {cfg.max_result_rows}",
            ))
        return violations

    def check_justification(self, justification: str | None) -> list[Violation]:
        cfg = self.config
        text = (justification or "").strip()
        if len(text) < cfg.min_justification_length:
            return [Violation(
                "JUSTIFICATION_TOO_SHORT",
                f"Business justification must be at least {cfg.min_justification_length} characters",
            )]
        if len(text) > cfg.max_justification_length:
            return [Violation(
                "JUSTIFICATION_TOO_LONG",
                f"Business justification cannot exceed {cfg.max_justification_length} characters",
            )]
        return []


def infer_data_classification(sql: str) -> DataClassification:
    """Guess a data classification from the tables and columns a query touches."""
    upper = sql.upper()
    if any(marker in upper for marker in _CONFIDENTIAL_MARKERS):
        return DataClassification.CONFIDENTIAL
    if any(marker in upper for marker in _SENSITIVE_MARKERS):
        return DataClassification.SENSITIVE
    return DataClassification.INTERNAL


def infer_security_classification(data_classification: DataClassification) -> SecurityClassification:
    if data_classification == DataClassification.CONFIDENTIAL:
        return SecurityClassification.CONFIDENTIAL
    return SecurityClassification.INTERNAL
