"""Tests for parameter extraction and complexity analysis."""

import pytest

from querygov_svc.config import ComplexityConfig
from querygov_svc.governance import ComplexityAndParameterAnalyzer, extract_parameter_names


@pytest.fixture
def analyzer():
    return ComplexityAndParameterAnalyzer()


class TestExtractParameterNames:
    def test_basic(self):
        sql = "SELECT a FROM t WHERE x = :batchDate AND y = :accountId"
        assert extract_parameter_names(sql) == {"batchDate", "accountId"}

    def test_trailing_punctuation_stripped(self):
        sql = "SELECT a FROM t WHERE x IN ( :first, :second ) AND z = :third)"
        assert extract_parameter_names(sql) == {"first", "second", "third"}

    def test_name_ends_at_first_non_identifier_character(self):
        sql = "SELECT a FROM t WHERE x = :acct.id AND y = :run-date"
        assert extract_parameter_names(sql) == {"acct", "run"}

    def test_duplicates_collapse(self):
        sql = "SELECT a FROM t WHERE x = :id OR y = :id"
        assert extract_parameter_names(sql) == {"id"}

    def test_only_tokens_starting_with_colon(self):
        # Casts and inline colons are not placeholders
        sql = "SELECT a::int, b FROM t WHERE c = d:e AND f = ::text"
        assert extract_parameter_names(sql) == set()

    @pytest.mark.parametrize("sql", [None, "", "SELECT a FROM t"])
    def test_no_placeholders(self, sql):
        assert extract_parameter_names(sql) == set()


class TestParameterConsistency:
    SQL = "SELECT a FROM t WHERE x = :batchDate AND y = :accountId"

    def test_exact_match_is_consistent(self, analyzer):
        report = analyzer.analyze(self.SQL, ["accountId", "batchDate"])
        assert report.parameter_consistency
        assert report.extracted_parameter_names == ("accountId", "batchDate")
        assert analyzer.violations(report) == []

    def test_leading_colon_in_declaration(self, analyzer):
        assert analyzer.analyze(self.SQL, [":accountId", ":batchDate"]).parameter_consistency

    def test_declared_but_unused(self, analyzer):
        report = analyzer.analyze(self.SQL, ["accountId", "batchDate", "region"])
        assert not report.parameter_consistency
        assert report.unused_parameters == ("region",)
        assert [v.code for v in analyzer.violations(report)] == ["UNUSED_PARAMETER"]

    def test_used_but_undeclared(self, analyzer):
        report = analyzer.analyze(self.SQL, ["accountId"])
        assert not report.parameter_consistency
        assert report.missing_parameters == ("batchDate",)
        assert [v.code for v in analyzer.violations(report)] == ["UNDECLARED_PARAMETER"]

    def test_no_declaration_no_placeholders(self, analyzer):
        assert analyzer.analyze("SELECT a FROM t", None).parameter_consistency

    def test_no_declaration_with_placeholders(self, analyzer):
        assert not analyzer.analyze(self.SQL, None).parameter_consistency


class TestComplexity:
    def test_simple_query_acceptable(self, analyzer):
        report = analyzer.analyze("SELECT a FROM t")
        assert report.acceptable_complexity
        assert report.join_count == 0
        assert report.subquery_count == 1
        assert report.nesting_depth == 0

    def test_join_limit(self):
        analyzer = ComplexityAndParameterAnalyzer(ComplexityConfig(max_joins=1))
        sql = "SELECT a FROM t1 JOIN t2 ON t1.id = t2.id JOIN t3 ON t2.id = t3.id"
        report = analyzer.analyze(sql)
        assert report.join_count == 2
        assert not report.acceptable_complexity
        assert [v.code for v in report.limit_violations] == ["TOO_MANY_JOINS"]

    def test_subquery_limits(self):
        analyzer = ComplexityAndParameterAnalyzer(ComplexityConfig(max_subqueries=2, max_nesting_depth=1))
        sql = "SELECT a FROM (SELECT b FROM (SELECT c FROM t) x) y"
        report = analyzer.analyze(sql)
        assert report.subquery_count == 3
        assert report.nesting_depth == 2
        codes = [v.code for v in report.limit_violations]
        assert "TOO_MANY_SUBQUERIES" in codes
        assert "SUBQUERY_TOO_DEEP" in codes

    def test_parentheses_in_strings_ignored(self, analyzer):
        report = analyzer.analyze("SELECT '((((' AS s, \"((\" FROM t")
        assert report.nesting_depth == 0

    def test_comments_ignored(self, analyzer):
        report = analyzer.analyze("SELECT a FROM t -- JOIN x JOIN y\n/* JOIN z */")
        assert report.join_count == 0

    def test_parameter_limit(self):
        analyzer = ComplexityAndParameterAnalyzer(ComplexityConfig(max_parameters=2))
        sql = "SELECT a FROM t WHERE a = :p1 AND b = :p2 AND c = :p3"
        report = analyzer.analyze(sql, ["p1", "p2", "p3"])
        assert report.parameter_consistency
        assert "TOO_MANY_PARAMETERS" in [v.code for v in analyzer.violations(report)]

    def test_score_grows_with_structure(self, analyzer):
        simple = analyzer.analyze("SELECT a FROM t")
        complex_ = analyzer.analyze(
            "SELECT a, CASE WHEN b > 1 THEN 1 ELSE 0 END FROM t1 JOIN t2 ON t1.id = t2.id "
            "WHERE a IN (SELECT a FROM t3) GROUP BY a ORDER BY a"
        )
        assert complex_.complexity_score > simple.complexity_score

    def test_to_dict(self, analyzer):
        d = analyzer.analyze("SELECT a FROM t WHERE x = :id", ["id"]).to_dict()
        assert d["parameter_consistency"] is True
        assert d["extracted_parameter_names"] == ["id"]
        assert d["limit_violations"] == []
