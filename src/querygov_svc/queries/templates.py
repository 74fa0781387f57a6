"""Starter query templates grouped by business area."""

from __future__ import annotations

from typing import Any

from .types import QueryTemplate, TemplateCategory

TEMPLATE_LIBRARY_VERSION = "1.0"

TEMPLATE_CATEGORIES: tuple[TemplateCategory, ...] = (
    TemplateCategory(
        name="Account Management",
        description="Templates for account-related queries",
        templates=(
            QueryTemplate(
                name="Account Summary",
                sql="SELECT account_id, account_type, balance, status FROM accounts WHERE batch_date = :batchDate",
                parameters=("batchDate",),
                description="Basic account information summary",
            ),
            QueryTemplate(
                name="Account Transaction History",
                sql=(
                    "SELECT account_id, transaction_date, amount, transaction_type FROM transactions "
                    "WHERE account_id = :accountId AND transaction_date >= :startDate"
                ),
                parameters=("accountId", "startDate"),
                description="Transaction history for specific account",
            ),
        ),
    ),
    TemplateCategory(
        name="Transaction Processing",
        description="Templates for transaction analysis",
        templates=(
            QueryTemplate(
                name="Daily Transaction Summary",
                sql=(
                    "SELECT transaction_date, COUNT(*) as transaction_count, SUM(amount) as total_amount "
                    "FROM transactions WHERE transaction_date = :batchDate GROUP BY transaction_date"
                ),
                parameters=("batchDate",),
                description="Daily transaction volume and amount summary",
            ),
            QueryTemplate(
                name="High Value Transactions",
                sql=(
                    "SELECT transaction_id, account_id, amount, transaction_date FROM transactions "
                    "WHERE amount > :minAmount AND transaction_date = :batchDate ORDER BY amount DESC"
                ),
                parameters=("minAmount", "batchDate"),
                description="Transactions above specified amount threshold",
            ),
        ),
    ),
)


def template_library() -> dict[str, Any]:
    """Template library as a plain dictionary."""
    categories = [
        {
            "name": category.name,
            "description": category.description,
            "templates": [
                {
                    "name": t.name,
                    "sql": t.sql,
                    "parameters": list(t.parameters),
                    "description": t.description,
                }
                for t in category.templates
            ],
        }
        for category in TEMPLATE_CATEGORIES
    ]
    return {
        "categories": categories,
        "total_templates": sum(len(c.templates) for c in TEMPLATE_CATEGORIES),
        "version": TEMPLATE_LIBRARY_VERSION,
    }
