"""Confidence scoring for mapping candidates and produced suggestions."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterable

from .archetypes import DEFAULT_REGISTRY, ArchetypeRegistry
from .types import ColumnMetadata, MappingCandidate, MappingSuggestion, TypeFamily

TYPE_ADJUSTMENT = 0.05
SENSITIVE_MASKING_ADJUSTMENT = 0.03
CONCEPT_ADJUSTMENT = 0.02
NULLABLE_IDENTIFIER_PENALTY = 0.05
CONTEXT_ADJUSTMENT = 0.03
LEADING_IDENTIFIER_ADJUSTMENT = 0.02

RESCORE_INVALID_NAME_FACTOR = 0.8
RESCORE_COMPLIANCE_ADJUSTMENT = 0.05
RESCORE_CONCEPT_ADJUSTMENT = 0.03

_TYPE_NAMES: dict[TypeFamily, frozenset[str]] = {
    TypeFamily.STRING: frozenset({
        "VARCHAR", "VARCHAR2", "NVARCHAR", "NVARCHAR2", "CHAR", "NCHAR", "CHARACTER",
        "TEXT", "STRING", "CLOB", "NCLOB",
    }),
    TypeFamily.NUMERIC: frozenset({
        "NUMBER", "DECIMAL", "NUMERIC", "DOUBLE", "FLOAT", "FLOAT4", "FLOAT8", "REAL", "MONEY",
        "INT", "INT2", "INT4", "INT8", "INTEGER", "BIGINT", "SMALLINT", "TINYINT",
    }),
    TypeFamily.TEMPORAL: frozenset({"DATE", "DATETIME", "DATETIME2", "TIMESTAMP", "TIMESTAMPTZ", "TIME"}),
}

# Type name tokens, e.g. "VARCHAR2" in "VARCHAR2(20)"
_TYPE_TOKEN = re.compile(r"[A-Z][A-Z0-9]*")

# Keyword present in both the target context and the archetype name
_CONTEXT_DOMAINS = ("ACCOUNT", "TRANSACTION", "CUSTOMER")

_TARGET_FIELD = re.compile(r"^[a-z]+(-[a-z]+)*$")

_KNOWN_CLASSIFICATIONS = ("SENSITIVE", "INTERNAL", "PUBLIC")


def clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def type_matches(declared_type: str | None, family: TypeFamily) -> bool:
    """True when a declared column type belongs to ``family``."""
    tokens = _TYPE_TOKEN.findall((declared_type or "").upper())
    return any(token in _TYPE_NAMES[family] for token in tokens)


def infer_business_concept(description: str | None, registry: ArchetypeRegistry = DEFAULT_REGISTRY) -> str | None:
    """First registry concept whose space-free label appears in a description."""
    if not description:
        return None
    lower = description.lower()
    for concept in registry.business_concepts():
        if concept.lower().replace(" ", "") in lower:
            return concept
    return None


def is_valid_target_field(target_field: str | None) -> bool:
    """Lowercase hyphen-separated tokens, 3 to 50 characters."""
    return (
        target_field is not None
        and 3 <= len(target_field) <= 50
        and _TARGET_FIELD.match(target_field) is not None
    )


class ConfidenceScorer:
    """
    Turns matcher candidates into bounded confidence scores.

    Adjustments are independent and additive; the sum is clamped to [0, 1]
    once at the end.
    """

    def __init__(self, registry: ArchetypeRegistry = DEFAULT_REGISTRY):
        self.registry = registry

    def score(self, column: ColumnMetadata, candidate: MappingCandidate, target_context: str | None = None) -> float:
        archetype = candidate.archetype
        confidence = candidate.base_confidence

        if type_matches(column.declared_type, archetype.type_family):
            confidence += TYPE_ADJUSTMENT

        if archetype.masking_required and (column.classification or "").lower() == "sensitive":
            confidence += SENSITIVE_MASKING_ADJUSTMENT

        concept = column.business_concept or infer_business_concept(column.description, self.registry)
        if concept and concept.lower() == archetype.business_concept.lower():
            confidence += CONCEPT_ADJUSTMENT

        if column.nullable and archetype.identifier:
            confidence -= NULLABLE_IDENTIFIER_PENALTY

        if target_context and self._context_relates(target_context, archetype.name):
            confidence += CONTEXT_ADJUSTMENT

        if column.ordinal == 1 and archetype.identifier:
            confidence += LEADING_IDENTIFIER_ADJUSTMENT

        return clamp(confidence)

    def rescore(self, suggestions: Iterable[MappingSuggestion]) -> list[MappingSuggestion]:
        """Re-score produced suggestions, keeping their order."""
        return [self._rescore_one(s) for s in suggestions]

    def _rescore_one(self, suggestion: MappingSuggestion) -> MappingSuggestion:
        confidence = suggestion.confidence

        if not is_valid_target_field(suggestion.target_field):
            confidence *= RESCORE_INVALID_NAME_FACTOR

        if suggestion.compliance_tags:
            confidence += RESCORE_COMPLIANCE_ADJUSTMENT

        if suggestion.business_concept and self._concept_overlaps(suggestion.business_concept, suggestion.target_field):
            confidence += RESCORE_CONCEPT_ADJUSTMENT

        return replace(suggestion, confidence=clamp(confidence))

    @staticmethod
    def classify(column: ColumnMetadata, candidate: MappingCandidate) -> str:
        """Data classification for a suggestion."""
        own = (column.classification or "").upper()
        if own in _KNOWN_CLASSIFICATIONS:
            return own

        archetype = candidate.archetype
        if archetype.masking_required or archetype.identifier or "AMOUNT" in archetype.name:
            return "SENSITIVE"
        return "INTERNAL"

    @staticmethod
    def _context_relates(target_context: str, archetype_name: str) -> bool:
        context = target_context.upper()
        for keyword in _CONTEXT_DOMAINS:
            if keyword in context and keyword in archetype_name:
                return True
        return False

    @staticmethod
    def _concept_overlaps(concept: str, target_field: str | None) -> bool:
        if not target_field:
            return False
        lower = concept.lower()
        return target_field.replace("-", " ") in lower or lower.replace(" ", "-") in target_field
