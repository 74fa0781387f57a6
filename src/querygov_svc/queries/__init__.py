"""Query definitions - governed lifecycle of shared SQL artifacts."""

from .errors import (
    ConflictError,
    InfrastructureError,
    InUseError,
    NotFoundError,
    QueryGovernanceError,
    ValidationError,
)
from .types import (
    CreateQueryRequest,
    DataClassification,
    DeletionResult,
    QueryDefinition,
    QueryStatus,
    QueryTemplate,
    QueryType,
    QueryUpdate,
    QueryValidationReport,
    SecurityClassification,
    TemplateCategory,
)
from .store import (
    InMemoryQueryStore,
    QueryStore,
    RecordNotFound,
    SqliteQueryStore,
    StoreError,
    VersionConflict,
)
from .usage import NoUsageOracle, ReferenceUsageOracle, UsageOracle
from .policy import FieldPolicyValidator, infer_data_classification, infer_security_classification
from .templates import TEMPLATE_CATEGORIES, template_library
from .lifecycle import QueryLifecycleManager

__all__ = [
    # Errors
    "ConflictError",
    "InfrastructureError",
    "InUseError",
    "NotFoundError",
    "QueryGovernanceError",
    "ValidationError",
    # Types
    "CreateQueryRequest",
    "DataClassification",
    "DeletionResult",
    "QueryDefinition",
    "QueryStatus",
    "QueryTemplate",
    "QueryType",
    "QueryUpdate",
    "QueryValidationReport",
    "SecurityClassification",
    "TemplateCategory",
    # Stores
    "InMemoryQueryStore",
    "QueryStore",
    "RecordNotFound",
    "SqliteQueryStore",
    "StoreError",
    "VersionConflict",
    # Usage
    "NoUsageOracle",
    "ReferenceUsageOracle",
    "UsageOracle",
    # Policy
    "FieldPolicyValidator",
    "infer_data_classification",
    "infer_security_classification",
    # Templates
    "TEMPLATE_CATEGORIES",
    "template_library",
    # Lifecycle
    "QueryLifecycleManager",
]
