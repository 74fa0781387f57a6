"""Field mapping service - ranks archetype suggestions for source columns."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from ..config import MappingConfig
from .archetypes import DEFAULT_REGISTRY, ArchetypeRegistry
from .matcher import FieldPatternMatcher
from .provider import ColumnMetadataProvider
from .scorer import ConfidenceScorer
from .types import ColumnMetadata, MappingSuggestion, MatchKind, Transformation

logger = logging.getLogger(__name__)


class FieldMappingService:
    """
    Produces ranked mapping suggestions for a list of columns.

    Each column is scored independently, so the per-column pass may run on
    a thread pool when ``max_workers > 1``; results are identical either way.
    """

    def __init__(
        self,
        registry: ArchetypeRegistry = DEFAULT_REGISTRY,
        config: MappingConfig | None = None,
        column_provider: ColumnMetadataProvider | None = None,
    ):
        self.config = config or MappingConfig()
        self.registry = registry
        self.matcher = FieldPatternMatcher(registry, self.config)
        self.scorer = ConfidenceScorer(registry)
        self.column_provider = column_provider

    def suggest(self, columns: Sequence[ColumnMetadata], target_context: str | None = None) -> list[MappingSuggestion]:
        """Suggest at most one archetype per column.

        Returns suggestions sorted by confidence descending, ties broken by
        column ordinal ascending.
        """
        if self.config.max_workers > 1 and len(columns) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                results = list(pool.map(lambda c: self._suggest_for_column(c, target_context), columns))
        else:
            results = [self._suggest_for_column(c, target_context) for c in columns]

        suggestions = [s for s in results if s is not None]
        suggestions.sort(key=lambda s: (-s.confidence, s.ordinal))

        logger.debug(f"Generated {len(suggestions)} suggestions for {len(columns)} columns")
        return suggestions

    def suggest_for_query(self, source_id: str, target_context: str | None = None) -> list[MappingSuggestion]:
        """Suggest mappings for the columns the provider knows for ``source_id``."""
        if self.column_provider is None:
            raise RuntimeError("No column metadata provider configured")

        columns = self.column_provider.get_columns(source_id)
        if not columns:
            logger.warning(f"No column metadata found for {source_id}")
            return []
        return self.suggest(columns, target_context)

    def rescore(self, suggestions: Iterable[MappingSuggestion]) -> list[MappingSuggestion]:
        return self.scorer.rescore(suggestions)

    def _suggest_for_column(self, column: ColumnMetadata, target_context: str | None) -> MappingSuggestion | None:
        candidates = self.matcher.match(column.name)
        if not candidates:
            return None

        # Matcher only falls back to fuzzy when nothing matched exactly
        preferred = [c for c in candidates if c.kind == MatchKind.EXACT] or candidates

        best = None
        best_score = -1.0
        for candidate in preferred:
            score = self.scorer.score(column, candidate, target_context)
            if score > best_score:
                best, best_score = candidate, score

        if best is None or best_score <= self.config.min_confidence:
            return None

        archetype = best.archetype
        return MappingSuggestion(
            source_column=column.name,
            target_field=archetype.target_field,
            archetype=archetype.name,
            confidence=best_score,
            transformation=Transformation.MASK if archetype.masking_required else Transformation.DIRECT,
            classification=self.scorer.classify(column, best),
            compliance_tags=archetype.compliance_tags,
            business_concept=archetype.business_concept,
            match_kind=best.kind,
            ordinal=column.ordinal,
        )
