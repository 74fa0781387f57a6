"""Field mapping types - column metadata, archetypes and suggestions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TypeFamily(str, Enum):
    """Declared-type family an archetype expects."""
    STRING = "string"
    NUMERIC = "numeric"
    TEMPORAL = "temporal"


class MatchKind(str, Enum):
    """How a candidate was found."""
    EXACT = "exact"
    FUZZY = "fuzzy"


class Transformation(str, Enum):
    """Suggested transformation for a mapped column."""
    MASK = "mask"
    DIRECT = "direct"


@dataclass(frozen=True, slots=True)
class ColumnMetadata:
    """
    A source column as described by an external metadata provider.

    Read-only input; never mutated here.
    """
    name: str
    declared_type: str = ""
    nullable: bool = True
    ordinal: int = 0
    classification: str | None = None
    description: str | None = None

    # Optional explicit business concept label; inferred from description otherwise
    business_concept: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ColumnMetadata:
        return cls(
            name=data["name"],
            declared_type=data.get("declared_type", data.get("type", "")) or "",
            nullable=bool(data.get("nullable", True)),
            ordinal=int(data.get("ordinal", data.get("order", 0)) or 0),
            classification=data.get("classification"),
            description=data.get("description"),
            business_concept=data.get("business_concept"),
        )


@dataclass(frozen=True, slots=True)
class FieldArchetype:
    """A canonical banking field definition."""
    name: str
    pattern: re.Pattern
    base_confidence: float
    type_family: TypeFamily
    masking_required: bool
    business_concept: str
    compliance_tags: tuple[str, ...] = ()
    description: str = ""

    # Identifier-like fields (penalised when nullable, favoured in first position)
    identifier: bool = False

    # Extra spellings compared during fuzzy matching, alongside the name itself
    aliases: tuple[str, ...] = ()

    @property
    def target_field(self) -> str:
        """Canonical target field name, e.g. ``account-number``."""
        return self.name.lower().replace("_", "-")

    @property
    def fuzzy_keys(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True)
class MappingCandidate:
    """An archetype that matched a column name, before scoring."""
    archetype: FieldArchetype
    base_confidence: float
    kind: MatchKind = MatchKind.EXACT
    fuzzy_score: float | None = None


@dataclass(frozen=True, slots=True)
class MappingSuggestion:
    """
    A scored suggestion mapping one source column to an archetype.

    Transient: created per request. Persisting an accepted suggestion is the
    caller's job.
    """
    source_column: str
    target_field: str
    archetype: str
    confidence: float
    transformation: Transformation
    classification: str
    compliance_tags: tuple[str, ...] = ()
    business_concept: str | None = None
    match_kind: MatchKind = MatchKind.EXACT
    ordinal: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_column": self.source_column,
            "target_field": self.target_field,
            "archetype": self.archetype,
            "confidence": self.confidence,
            "transformation": self.transformation.value,
            "classification": self.classification,
            "compliance_tags": list(self.compliance_tags),
            "business_concept": self.business_concept,
            "match_kind": self.match_kind.value,
            "ordinal": self.ordinal,
        }
