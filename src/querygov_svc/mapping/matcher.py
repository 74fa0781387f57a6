"""Field pattern matcher - exact rule matching with a fuzzy fallback."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein

from ..config import MappingConfig
from .archetypes import DEFAULT_REGISTRY, ArchetypeRegistry
from .types import FieldArchetype, MappingCandidate, MatchKind


def normalize_name(name: str) -> str:
    """Lower-case a column or archetype name and drop ``_`` / ``-``."""
    return name.strip().lower().replace("_", "").replace("-", "")


def fuzzy_score(a: str, b: str) -> float:
    """Similarity in [0, 1] from the edit distance of two normalized names."""
    na, nb = normalize_name(a), normalize_name(b)
    longest = max(len(na), len(nb))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(na, nb) / longest


class FieldPatternMatcher:
    """
    Finds archetype candidates for a column name.

    Every archetype rule is tried against the raw name first. Only when no
    rule matches does the matcher fall back to edit-distance similarity,
    and fuzzy candidates are always discounted below exact ones.
    """

    def __init__(
        self,
        registry: ArchetypeRegistry = DEFAULT_REGISTRY,
        config: MappingConfig | None = None,
    ):
        self.registry = registry
        self.config = config or MappingConfig()

    def match(self, column_name: str) -> list[MappingCandidate]:
        """Return candidates for ``column_name``, best first."""
        raw = column_name.strip()

        exact = [
            MappingCandidate(archetype=a, base_confidence=a.base_confidence, kind=MatchKind.EXACT)
            for a in self.registry
            if a.pattern.search(raw)
        ]
        if exact:
            return sorted(exact, key=lambda c: -c.base_confidence)

        fuzzy: list[MappingCandidate] = []
        for archetype in self.registry:
            score = self._best_fuzzy_score(raw, archetype)
            if score > self.config.fuzzy_threshold:
                fuzzy.append(MappingCandidate(
                    archetype=archetype,
                    base_confidence=score * self.config.fuzzy_discount,
                    kind=MatchKind.FUZZY,
                    fuzzy_score=score,
                ))
        return sorted(fuzzy, key=lambda c: -c.base_confidence)

    @staticmethod
    def _best_fuzzy_score(column_name: str, archetype: FieldArchetype) -> float:
        return max(fuzzy_score(column_name, key) for key in archetype.fuzzy_keys)
