"""Governance result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RiskLevel(str, Enum):
    """Overall security risk of a SQL statement."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    MINIMAL = "MINIMAL"


@dataclass(frozen=True, slots=True)
class Violation:
    """A single governance finding."""
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass(slots=True)
class GovernanceResult:
    """
    Outcome of a governance scan.

    ``violations`` block acceptance; ``warnings`` are advisory only.
    """
    valid: bool = True
    violations: list[Violation] = field(default_factory=list)
    warnings: list[Violation] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.MINIMAL

    def add_violation(self, code: str, message: str) -> None:
        self.violations.append(Violation(code, message))
        self.valid = False

    def add_warning(self, code: str, message: str) -> None:
        self.warnings.append(Violation(code, message))

    @property
    def violation_codes(self) -> list[str]:
        return [v.code for v in self.violations]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [v.to_dict() for v in self.violations],
            "warnings": [w.to_dict() for w in self.warnings],
            "risk_level": self.risk_level.value,
        }


@dataclass(frozen=True, slots=True)
class ComplexityReport:
    """Structural metrics and parameter consistency for a SQL statement."""
    parameter_consistency: bool
    extracted_parameter_names: tuple[str, ...]
    acceptable_complexity: bool
    missing_parameters: tuple[str, ...] = ()
    unused_parameters: tuple[str, ...] = ()
    join_count: int = 0
    subquery_count: int = 0
    nesting_depth: int = 0
    sql_length: int = 0
    complexity_score: int = 0
    limit_violations: tuple[Violation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "parameter_consistency": self.parameter_consistency,
            "extracted_parameter_names": list(self.extracted_parameter_names),
            "acceptable_complexity": self.acceptable_complexity,
            "missing_parameters": list(self.missing_parameters),
            "unused_parameters": list(self.unused_parameters),
            "join_count": self.join_count,
            "subquery_count": self.subquery_count,
            "nesting_depth": self.nesting_depth,
            "sql_length": self.sql_length,
            "complexity_score": self.complexity_score,
            "limit_violations": [v.to_dict() for v in self.limit_violations],
        }
