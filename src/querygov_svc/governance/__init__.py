"""Governance module - SQL safety checks and complexity analysis."""

from .types import ComplexityReport, GovernanceResult, RiskLevel, Violation
from .sql_validator import FORBIDDEN_KEYWORDS, SqlGovernanceValidator
from .complexity import ComplexityAndParameterAnalyzer, extract_parameter_names

__all__ = [
    "ComplexityReport",
    "GovernanceResult",
    "RiskLevel",
    "Violation",
    "FORBIDDEN_KEYWORDS",
    "SqlGovernanceValidator",
    "ComplexityAndParameterAnalyzer",
    "extract_parameter_names",
]
