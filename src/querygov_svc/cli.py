#!/usr/bin/env python3
"""
Offline CLI for SQL governance checks and field mapping suggestions.

Usage:
    python -m querygov_svc.cli validate "SELECT * FROM accounts WHERE id = :id"
    python -m querygov_svc.cli analyze --file query.sql --param id
    python -m querygov_svc.cli suggest columns.yaml --context account_summary
    python -m querygov_svc.cli templates
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml

from .config import Config
from .governance import ComplexityAndParameterAnalyzer, SqlGovernanceValidator
from .mapping import ColumnMetadata, FieldMappingService
from .queries import template_library


def print_json(data: Any, indent: int = 2) -> None:
    """Pretty print JSON data."""
    print(json.dumps(data, indent=indent, default=str))


def _read_sql(args) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.sql:
        return args.sql
    raise SystemExit("Provide SQL text or --file")


def _load_config(args) -> Config:
    if args.config:
        return Config.from_yaml(args.config)
    return Config()


def cmd_validate(args) -> int:
    config = _load_config(args)
    sql = _read_sql(args)
    result = SqlGovernanceValidator(config.governance).validate(sql)
    print_json(result.to_dict())
    return 0 if result.valid else 1


def cmd_analyze(args) -> int:
    config = _load_config(args)
    sql = _read_sql(args)
    analyzer = ComplexityAndParameterAnalyzer(config.complexity)
    report = analyzer.analyze(sql, args.param)
    print_json(report.to_dict())
    return 0 if report.parameter_consistency and report.acceptable_complexity else 1


def cmd_suggest(args) -> int:
    config = _load_config(args)
    path = Path(args.columns)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    # Accept either a bare list or {"columns": [...]}
    rows = data.get("columns", []) if isinstance(data, dict) else data
    columns = [ColumnMetadata.from_dict(row) for row in rows]

    service = FieldMappingService(config=config.mapping)
    suggestions = service.suggest(columns, args.context)
    if args.rescore:
        suggestions = service.rescore(suggestions)

    print_json({
        "suggestions": [s.to_dict() for s in suggestions],
        "total": len(suggestions),
    })
    return 0


def cmd_templates(args) -> int:
    print_json(template_library())
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Query governance and field mapping CLI",
    )
    parser.add_argument("--config", help="YAML configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Run SQL governance checks")
    validate_parser.add_argument("sql", nargs="?", help="SQL text")
    validate_parser.add_argument("--file", help="Read SQL from a file")

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyze complexity and parameters")
    analyze_parser.add_argument("sql", nargs="?", help="SQL text")
    analyze_parser.add_argument("--file", help="Read SQL from a file")
    analyze_parser.add_argument(
        "--param", action="append", default=[], help="Declared parameter name (repeatable)",
    )

    # suggest command
    suggest_parser = subparsers.add_parser("suggest", help="Suggest field mappings for columns")
    suggest_parser.add_argument("columns", help="YAML or JSON file listing column metadata")
    suggest_parser.add_argument("--context", help="Target schema or table context")
    suggest_parser.add_argument("--rescore", action="store_true", help="Apply the re-scoring pass")

    # templates command
    subparsers.add_parser("templates", help="List starter query templates")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "analyze":
        return cmd_analyze(args)
    elif args.command == "suggest":
        return cmd_suggest(args)
    elif args.command == "templates":
        return cmd_templates(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
