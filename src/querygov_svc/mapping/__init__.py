"""
Field mapping - confidence-scored suggestions from source columns to
canonical banking field archetypes.
"""

from .types import (
    ColumnMetadata,
    FieldArchetype,
    MappingCandidate,
    MappingSuggestion,
    MatchKind,
    Transformation,
    TypeFamily,
)
from .archetypes import DEFAULT_REGISTRY, ArchetypeRegistry, build_default_registry
from .matcher import FieldPatternMatcher, fuzzy_score, normalize_name
from .scorer import ConfidenceScorer, infer_business_concept, is_valid_target_field
from .provider import ColumnMetadataProvider, StaticColumnProvider, load_columns_from_yaml
from .service import FieldMappingService

__all__ = [
    # Types
    "ColumnMetadata",
    "FieldArchetype",
    "MappingCandidate",
    "MappingSuggestion",
    "MatchKind",
    "Transformation",
    "TypeFamily",
    # Registry
    "DEFAULT_REGISTRY",
    "ArchetypeRegistry",
    "build_default_registry",
    # Matching and scoring
    "FieldPatternMatcher",
    "fuzzy_score",
    "normalize_name",
    "ConfidenceScorer",
    "infer_business_concept",
    "is_valid_target_field",
    # Providers
    "ColumnMetadataProvider",
    "StaticColumnProvider",
    "load_columns_from_yaml",
    # Service
    "FieldMappingService",
]
