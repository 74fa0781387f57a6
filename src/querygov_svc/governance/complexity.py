"""Complexity and parameter analysis for stored SQL statements."""

from __future__ import annotations

import re
from typing import Iterable

from ..config import ComplexityConfig
from .types import ComplexityReport, Violation

# ":name" at the start of a whitespace token. The name ends at the first
# non-identifier character, so ":acct.id" yields "acct".
_PLACEHOLDER = re.compile(r"^:(\w+)")


def extract_parameter_names(sql: str | None) -> set[str]:
    """Extract the set of named placeholders from SQL text.

    The text is split on whitespace and every token starting with ``:`` is
    a placeholder. The name runs up to the first non-identifier character,
    so trailing ``)`` or ``,`` are dropped. Tokens such as ``::int`` casts
    carry no name and are ignored.
    """
    if not sql:
        return set()

    names: set[str] = set()
    for token in sql.split():
        match = _PLACEHOLDER.match(token)
        if match:
            names.add(match.group(1))
    return names


class ComplexityAndParameterAnalyzer:
    """Checks placeholder consistency and structural complexity of SQL."""

    def __init__(self, config: ComplexityConfig | None = None):
        self.config = config or ComplexityConfig()

    def analyze(self, sql: str | None, declared_parameter_names: Iterable[str] | None = None) -> ComplexityReport:
        """Analyze a statement against its declared parameters.

        Args:
            sql: The SQL code to analyze.
            declared_parameter_names: Parameter names the caller declares
                (without the leading colon).

        Returns:
            A ComplexityReport. ``parameter_consistency`` holds only when the
            extracted placeholder set equals the declared set exactly.
        """
        declared = {name.lstrip(":") for name in (declared_parameter_names or ())}
        extracted = extract_parameter_names(sql)

        missing = tuple(sorted(extracted - declared))
        unused = tuple(sorted(declared - extracted))

        sql_clean = self._remove_comments(sql or "")
        sql_upper = sql_clean.upper()

        join_count = len(re.findall(r"\bJOIN\b", sql_upper))
        subquery_count = len(re.findall(r"\bSELECT\b", sql_upper))
        nesting_depth = self._calculate_nesting_depth(sql_clean)

        limits: list[Violation] = []
        if join_count > self.config.max_joins:
            limits.append(Violation(
                "TOO_MANY_JOINS",
                f"Query contains {join_count} JOINs, maximum allowed is {self.config.max_joins}",
            ))
        if subquery_count > self.config.max_subqueries:
            limits.append(Violation(
                "TOO_MANY_SUBQUERIES",
                f"Query contains {subquery_count} SELECTs, maximum allowed is {self.config.max_subqueries}",
            ))
        if nesting_depth > self.config.max_nesting_depth:
            limits.append(Violation(
                "SUBQUERY_TOO_DEEP",
                f"Nesting depth {nesting_depth} exceeds maximum of {self.config.max_nesting_depth}",
            ))
        if len(extracted) > self.config.max_parameters:
            limits.append(Violation(
                "TOO_MANY_PARAMETERS",
                f"Query contains {len(extracted)} parameters, maximum allowed is {self.config.max_parameters}",
            ))

        return ComplexityReport(
            parameter_consistency=extracted == declared,
            extracted_parameter_names=tuple(sorted(extracted)),
            acceptable_complexity=not limits,
            missing_parameters=missing,
            unused_parameters=unused,
            join_count=join_count,
            subquery_count=subquery_count,
            nesting_depth=nesting_depth,
            sql_length=len(sql or ""),
            complexity_score=self._score(sql_upper, join_count, subquery_count, nesting_depth),
            limit_violations=tuple(limits),
        )

    @staticmethod
    def violations(report: ComplexityReport) -> list[Violation]:
        """Flatten a report into blocking violations."""
        found = list(report.limit_violations)
        if report.missing_parameters:
            found.append(Violation(
                "UNDECLARED_PARAMETER",
                f"Placeholders used but not declared: {', '.join(report.missing_parameters)}",
            ))
        if report.unused_parameters:
            found.append(Violation(
                "UNUSED_PARAMETER",
                f"Parameters declared but not used: {', '.join(report.unused_parameters)}",
            ))
        return found

    @staticmethod
    def _score(sql_upper: str, join_count: int, subquery_count: int, nesting_depth: int) -> int:
        case_count = len(re.findall(r"\bCASE\b", sql_upper))
        union_count = len(re.findall(r"\bUNION\b", sql_upper))
        cte_count = len(re.findall(r"\bWITH\s+\w+\s+AS\s*\(", sql_upper))
        window_count = len(re.findall(r"\bOVER\s*\(", sql_upper))
        group_by = 1 if "GROUP BY" in sql_upper else 0
        having = 1 if "HAVING" in sql_upper else 0
        order_by = 1 if "ORDER BY" in sql_upper else 0

        # Outer SELECT is not a subquery
        nested_selects = max(0, subquery_count - 1)

        return (
            join_count * 3 +
            nested_selects * 5 +
            case_count * 2 +
            union_count * 3 +
            cte_count * 4 +
            window_count * 3 +
            group_by * 2 +
            having * 2 +
            order_by * 1 +
            nesting_depth * 2
        )

    @staticmethod
    def _remove_comments(sql_code: str) -> str:
        sql_code = re.sub(r"--[^\n]*", "", sql_code)
        sql_code = re.sub(r"/\*.*?\*/", "", sql_code, flags=re.DOTALL)
        return sql_code

    @staticmethod
    def _calculate_nesting_depth(sql_code: str) -> int:
        """Maximum parenthesis depth, ignoring parentheses inside string literals."""
        max_depth = 0
        current_depth = 0
        in_string = False
        string_char = None

        for char in sql_code:
            if char in ("'", '"') and not in_string:
                in_string = True
                string_char = char
            elif char == string_char and in_string:
                in_string = False
                string_char = None
            elif not in_string:
                if char == "(":
                    current_depth += 1
                    max_depth = max(max_depth, current_depth)
                elif char == ")":
                    current_depth = max(0, current_depth - 1)

        return max_depth
