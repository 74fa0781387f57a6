"""SQL governance validator - read-only and forbidden-keyword checks."""

from __future__ import annotations

import logging
import re

from ..config import GovernanceConfig
from .types import GovernanceResult, RiskLevel

logger = logging.getLogger(__name__)


# Statements must open with one of these verbs
ALLOWED_LEADING_VERBS = ("SELECT", "WITH")

# Matched as plain substrings of the upper-cased statement. Identifiers that
# embed a keyword (e.g. LAST_UPDATED, CREATED_AT) are flagged too; callers rely
# on this exact accept/reject behaviour, so do not tighten it to word matches.
FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "TRUNCATE",
    "ALTER",
    "CREATE",
    "EXEC",
    "EXECUTE",
    "MERGE",
)

INJECTION_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r";\s*(DROP|DELETE|INSERT|UPDATE|CREATE|ALTER|TRUNCATE|EXEC|EXECUTE)\b", re.IGNORECASE),
    re.compile(r"UNION\s+(?:ALL\s+)?SELECT.*--", re.IGNORECASE | re.DOTALL),
    re.compile(r"'\s*OR\s+'?1'?\s*=\s*'?1", re.IGNORECASE),
    re.compile(r"'\s*;\s*--"),
    re.compile(r"\bxp_\w+", re.IGNORECASE),
    re.compile(r"\bsp_\w+", re.IGNORECASE),
    re.compile(r"\b(OPENROWSET|OPENDATASOURCE)\b", re.IGNORECASE),
    re.compile(r"\b(SLEEP|BENCHMARK)\s*\(", re.IGNORECASE),
    re.compile(r"\bWAITFOR\s+DELAY\b", re.IGNORECASE),
)

SENSITIVE_MARKERS = ("SSN", "SOCIAL_SECURITY", "TAX_ID", "ACCOUNT_NUMBER", "ROUTING_NUMBER", "CREDIT_CARD")
REGULATED_MARKERS = ("ACCOUNT", "TRANSACTION", "CUSTOMER")

# Warning codes counted towards the risk level
_SECURITY_WARNING_CODES = frozenset({"COMMENTS_DETECTED", "SENSITIVE_DATA_DETECTED"})


class SqlGovernanceValidator:
    """
    Checks raw SQL text against the read-only policy.

    Rules run in a fixed order and every finding is collected; nothing is
    raised. The caller decides whether a non-empty violation list rejects
    the surrounding operation. The stored SQL text is never modified.
    """

    def __init__(self, config: GovernanceConfig | None = None):
        self.config = config or GovernanceConfig()

    def validate(self, sql: str | None) -> GovernanceResult:
        """Validate a SQL statement.

        Args:
            sql: Raw SQL text as it will be stored.

        Returns:
            A GovernanceResult with itemised violations and warnings.
        """
        result = GovernanceResult()

        if sql is None or not sql.strip():
            result.add_violation("EMPTY_SQL", "SQL query cannot be empty")
            result.risk_level = RiskLevel.HIGH
            return result

        length = len(sql)
        if length < self.config.min_sql_length or length > self.config.max_sql_length:
            result.add_violation(
                "SQL_LENGTH_OUT_OF_RANGE",
                f"SQL length {length} is outside "
                f"[{self.config.min_sql_length}, {self.config.max_sql_length}]",
            )

        # Upper-cased copy for scanning only
        scan_text = sql.strip().upper()

        if not scan_text.startswith(ALLOWED_LEADING_VERBS):
            result.add_violation("NOT_READ_ONLY", "Only SELECT and WITH queries are allowed")

        for keyword in FORBIDDEN_KEYWORDS:
            if keyword in scan_text:
                result.add_violation("FORBIDDEN_KEYWORD", f"Prohibited keyword detected: {keyword}")

        stripped = sql.strip()
        if ";" in stripped.rstrip(";"):
            result.add_violation("MULTIPLE_STATEMENTS", "Multiple SQL statements are not allowed")

        if self.config.detect_injection:
            self._check_injection(sql, result)

        self._collect_warnings(sql, scan_text, result)
        result.risk_level = self._assess_risk(result)

        if not result.valid:
            logger.debug(f"SQL governance rejected statement: {result.violation_codes}")
        return result

    def _check_injection(self, sql: str, result: GovernanceResult) -> None:
        for pattern in INJECTION_PATTERNS:
            if pattern.search(sql):
                result.add_violation(
                    "SQL_INJECTION_PATTERN",
                    f"Potential SQL injection pattern detected: {pattern.pattern}",
                )

    def _collect_warnings(self, sql: str, scan_text: str, result: GovernanceResult) -> None:
        if self.config.strictness == "HIGH" and ("--" in sql or "/*" in sql or "*/" in sql):
            result.add_warning("COMMENTS_DETECTED", "SQL comments detected - review for security implications")

        if any(marker in scan_text for marker in SENSITIVE_MARKERS):
            result.add_warning("SENSITIVE_DATA_DETECTED", "Query may access sensitive personal or financial data")

        if any(marker in scan_text for marker in REGULATED_MARKERS):
            result.add_warning("REGULATORY_DATA", "Query accesses data subject to banking regulations")

        if re.search(r"SELECT\s+\*", scan_text):
            result.add_warning("SELECT_ALL_COLUMNS", "SELECT * may impact performance and expose unnecessary data")

    @staticmethod
    def _assess_risk(result: GovernanceResult) -> RiskLevel:
        if result.violations:
            return RiskLevel.HIGH

        security_warnings = sum(1 for w in result.warnings if w.code in _SECURITY_WARNING_CODES)
        if security_warnings > 2:
            return RiskLevel.MEDIUM
        if security_warnings > 0:
            return RiskLevel.LOW
        return RiskLevel.MINIMAL
