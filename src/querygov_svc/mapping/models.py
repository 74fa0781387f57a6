"""Pydantic models for the field mapping API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .types import ColumnMetadata, MappingSuggestion, MatchKind, Transformation


class ColumnModel(BaseModel):
    """Column metadata supplied by the caller."""
    name: str
    declared_type: str = ""
    nullable: bool = True
    ordinal: int = 0
    classification: str | None = None
    description: str | None = None
    business_concept: str | None = None

    def to_column(self) -> ColumnMetadata:
        return ColumnMetadata(
            name=self.name,
            declared_type=self.declared_type,
            nullable=self.nullable,
            ordinal=self.ordinal,
            classification=self.classification,
            description=self.description,
            business_concept=self.business_concept,
        )


class SuggestRequest(BaseModel):
    """Body for POST /mappings/suggest."""
    columns: list[ColumnModel]
    target_context: str | None = None


class SuggestionModel(BaseModel):
    """A mapping suggestion."""
    source_column: str
    target_field: str
    archetype: str
    confidence: float = Field(ge=0.0, le=1.0)
    transformation: str
    classification: str
    compliance_tags: list[str] = Field(default_factory=list)
    business_concept: str | None = None
    match_kind: str = MatchKind.EXACT.value
    ordinal: int = 0

    @classmethod
    def from_suggestion(cls, s: MappingSuggestion) -> SuggestionModel:
        return cls(**s.to_dict())

    def to_suggestion(self) -> MappingSuggestion:
        return MappingSuggestion(
            source_column=self.source_column,
            target_field=self.target_field,
            archetype=self.archetype,
            confidence=self.confidence,
            transformation=Transformation(self.transformation),
            classification=self.classification,
            compliance_tags=tuple(self.compliance_tags),
            business_concept=self.business_concept,
            match_kind=MatchKind(self.match_kind),
            ordinal=self.ordinal,
        )


class RescoreRequest(BaseModel):
    """Body for POST /mappings/rescore."""
    suggestions: list[SuggestionModel]


class SuggestionListResponse(BaseModel):
    """Response for suggestion endpoints."""
    suggestions: list[SuggestionModel]
    total: int
    correlation_id: str | None = None
