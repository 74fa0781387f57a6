"""Tests for SQL governance validation."""

import pytest

from querygov_svc.config import GovernanceConfig
from querygov_svc.governance import FORBIDDEN_KEYWORDS, RiskLevel, SqlGovernanceValidator


@pytest.fixture
def validator():
    return SqlGovernanceValidator()


class TestEmptyAndLength:
    @pytest.mark.parametrize("sql", [None, "", "   ", "\n\t"])
    def test_blank_is_empty_sql(self, validator, sql):
        result = validator.validate(sql)
        assert not result.valid
        assert result.violation_codes == ["EMPTY_SQL"]

    def test_too_short(self, validator):
        result = validator.validate("SELECT 1")
        assert "SQL_LENGTH_OUT_OF_RANGE" in result.violation_codes

    def test_too_long(self):
        validator = SqlGovernanceValidator(GovernanceConfig(max_sql_length=50))
        result = validator.validate("SELECT " + ", ".join(f"col_{i}" for i in range(20)) + " FROM t1")
        assert "SQL_LENGTH_OUT_OF_RANGE" in result.violation_codes

    def test_boundary_length_accepted(self, validator):
        sql = "SELECT abc"
        assert len(sql) == 10
        assert "SQL_LENGTH_OUT_OF_RANGE" not in validator.validate(sql).violation_codes


class TestReadOnly:
    @pytest.mark.parametrize("sql", [
        "SELECT id FROM accounts",
        "select id from accounts",
        "  SeLeCt id FROM accounts",
        "WITH t AS (SELECT 1 AS x) SELECT x FROM t",
        "with t as (select 1 as x) select x from t",
    ])
    def test_select_and_with_accepted(self, validator, sql):
        result = validator.validate(sql)
        assert result.valid, result.violation_codes

    @pytest.mark.parametrize("sql", [
        "SHOW TABLES IN accounts",
        "DESCRIBE accounts_table",
        "(SELECT id FROM accounts)",
        "VALUES (1), (2), (3)",
    ])
    def test_other_verbs_not_read_only(self, validator, sql):
        assert "NOT_READ_ONLY" in validator.validate(sql).violation_codes

    def test_delete_statement(self, validator):
        result = validator.validate("DELETE FROM accounts WHERE id = 1")
        assert "NOT_READ_ONLY" in result.violation_codes
        assert "FORBIDDEN_KEYWORD" in result.violation_codes

    def test_stored_text_untouched(self, validator):
        sql = "select id from accounts"
        validator.validate(sql)
        assert sql == "select id from accounts"


class TestForbiddenKeywords:
    @pytest.mark.parametrize("keyword", FORBIDDEN_KEYWORDS)
    def test_each_keyword_flagged(self, validator, keyword):
        result = validator.validate(f"SELECT id FROM t1 WHERE note = '{keyword.lower()}'")
        assert "FORBIDDEN_KEYWORD" in result.violation_codes

    def test_embedded_identifier_false_positive(self, validator):
        # Substring semantics: LAST_UPDATED contains UPDATE
        result = validator.validate("SELECT last_updated FROM accounts")
        assert result.violation_codes == ["FORBIDDEN_KEYWORD"]

    def test_created_at_false_positive(self, validator):
        result = validator.validate("SELECT created_at FROM accounts")
        assert result.violation_codes == ["FORBIDDEN_KEYWORD"]

    def test_one_violation_per_keyword(self, validator):
        # EXECUTE also contains EXEC
        result = validator.validate("SELECT id FROM t1 WHERE x = 'execute'")
        messages = [v.message for v in result.violations]
        assert result.violation_codes == ["FORBIDDEN_KEYWORD", "FORBIDDEN_KEYWORD"]
        assert any(m.endswith("EXEC") for m in messages)
        assert any(m.endswith("EXECUTE") for m in messages)


class TestExtendedChecks:
    def test_trailing_semicolon_allowed(self, validator):
        assert validator.validate("SELECT id FROM t1;").valid

    def test_multiple_statements(self, validator):
        result = validator.validate("SELECT id FROM t1; SELECT id FROM t2")
        assert result.violation_codes == ["MULTIPLE_STATEMENTS"]

    def test_stacked_drop(self, validator):
        codes = validator.validate("SELECT id FROM t1; DROP TABLE t1").violation_codes
        assert "FORBIDDEN_KEYWORD" in codes
        assert "MULTIPLE_STATEMENTS" in codes
        assert "SQL_INJECTION_PATTERN" in codes

    @pytest.mark.parametrize("sql", [
        "SELECT name FROM users WHERE name = '' OR '1'='1'",
        "SELECT SLEEP(5) FROM dual",
        "SELECT id FROM t1 UNION SELECT password FROM users --",
        "SELECT * FROM OPENROWSET('SQLNCLI', 'x', 'y')",
    ])
    def test_injection_patterns(self, validator, sql):
        assert "SQL_INJECTION_PATTERN" in validator.validate(sql).violation_codes

    def test_injection_detection_can_be_disabled(self):
        validator = SqlGovernanceValidator(GovernanceConfig(detect_injection=False))
        result = validator.validate("SELECT SLEEP(5) FROM dual")
        assert "SQL_INJECTION_PATTERN" not in result.violation_codes


class TestWarningsAndRisk:
    def test_comment_warning_only_in_high_strictness(self):
        sql = "SELECT id FROM t1 -- nightly"
        high = SqlGovernanceValidator(GovernanceConfig(strictness="HIGH")).validate(sql)
        standard = SqlGovernanceValidator(GovernanceConfig(strictness="STANDARD")).validate(sql)
        assert "COMMENTS_DETECTED" in [w.code for w in high.warnings]
        assert "COMMENTS_DETECTED" not in [w.code for w in standard.warnings]

    def test_warnings_do_not_invalidate(self, validator):
        result = validator.validate("SELECT * FROM accounts")
        codes = [w.code for w in result.warnings]
        assert result.valid
        assert "SELECT_ALL_COLUMNS" in codes
        assert "REGULATORY_DATA" in codes

    def test_risk_minimal(self, validator):
        assert validator.validate("SELECT id FROM t1").risk_level == RiskLevel.MINIMAL

    def test_risk_low_for_sensitive_data(self, validator):
        result = validator.validate("SELECT ssn FROM people")
        assert result.valid
        assert result.risk_level == RiskLevel.LOW

    def test_risk_high_on_violation(self, validator):
        assert validator.validate("DROP TABLE people").risk_level == RiskLevel.HIGH

    def test_to_dict(self, validator):
        d = validator.validate("SELECT last_updated FROM accounts").to_dict()
        assert d["valid"] is False
        assert d["risk_level"] == "HIGH"
        assert d["violations"][0]["code"] == "FORBIDDEN_KEYWORD"
