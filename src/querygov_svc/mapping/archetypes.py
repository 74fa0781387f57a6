"""Archetype registry - the fixed table of canonical banking fields."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Iterator, Mapping

from .types import FieldArchetype, TypeFamily


def _rule(expr: str) -> re.Pattern:
    return re.compile(expr, re.IGNORECASE)


class ArchetypeRegistry:
    """
    Immutable, ordered collection of field archetypes.

    Built once and shared by reference; there is no way to add or remove
    entries after construction, so concurrent readers need no locking.
    Iteration order is the construction order and decides ties.
    """

    __slots__ = ("_archetypes", "_by_name")

    def __init__(self, archetypes: tuple[FieldArchetype, ...] | list[FieldArchetype]):
        archetypes = tuple(archetypes)
        by_name = {a.name: a for a in archetypes}
        if len(by_name) != len(archetypes):
            raise ValueError("Duplicate archetype names in registry")
        self._archetypes = archetypes
        self._by_name: Mapping[str, FieldArchetype] = MappingProxyType(by_name)

    def __iter__(self) -> Iterator[FieldArchetype]:
        return iter(self._archetypes)

    def __len__(self) -> int:
        return len(self._archetypes)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> FieldArchetype | None:
        return self._by_name.get(name.upper())

    def names(self) -> list[str]:
        return [a.name for a in self._archetypes]

    def business_concepts(self) -> list[str]:
        return [a.business_concept for a in self._archetypes]


def build_default_registry() -> ArchetypeRegistry:
    """Build the standard banking archetype table."""
    return ArchetypeRegistry((
        FieldArchetype(
            name="ACCOUNT_NUMBER",
            pattern=_rule(r"^(acct|account)([_\-]?(number|no|id)|[_\-]num)?$"),
            base_confidence=0.95,
            type_family=TypeFamily.STRING,
            masking_required=True,
            business_concept="Account Management",
            compliance_tags=("PCI_DSS", "SOX", "GLBA"),
            description="Bank account number field",
            aliases=("ACCT_NUMBER", "ACCOUNT_NO"),
        ),
        FieldArchetype(
            name="ROUTING_NUMBER",
            pattern=_rule(r"^(routing|rt|aba)[_\-]?(num|number|no)?$"),
            base_confidence=0.90,
            type_family=TypeFamily.STRING,
            masking_required=False,
            business_concept="Payment Processing",
            compliance_tags=("NACHA", "FED_REGULATIONS"),
            description="Bank routing number field",
            aliases=("ROUTING_NO", "ABA_NUMBER"),
        ),
        FieldArchetype(
            name="TRANSACTION_ID",
            pattern=_rule(r"^(txn|trans|transaction)[_\-]?(id|number|num)?$"),
            base_confidence=0.88,
            type_family=TypeFamily.STRING,
            masking_required=False,
            business_concept="Transaction Processing",
            compliance_tags=("SOX", "FFIEC"),
            description="Transaction identifier field",
            identifier=True,
            aliases=("TXN_ID", "TRANS_ID"),
        ),
        FieldArchetype(
            name="AMOUNT",
            pattern=_rule(r"^(amt|amount|balance|total)[_\-]?(usd|cents)?$"),
            base_confidence=0.92,
            type_family=TypeFamily.NUMERIC,
            masking_required=True,
            business_concept="Financial Metrics",
            compliance_tags=("SOX", "BASEL_III"),
            description="Monetary amount field",
            aliases=("AMT", "BALANCE"),
        ),
        FieldArchetype(
            name="DATE",
            pattern=_rule(r"^(date|dt|time)[_\-]?(created|modified|processed)?$"),
            base_confidence=0.85,
            type_family=TypeFamily.TEMPORAL,
            masking_required=False,
            business_concept="Temporal Tracking",
            compliance_tags=(),
            description="Date/timestamp field",
        ),
        FieldArchetype(
            name="CURRENCY",
            pattern=_rule(r"^(curr|currency|ccy)[_\-]?(code|cd)?$"),
            base_confidence=0.87,
            type_family=TypeFamily.STRING,
            masking_required=False,
            business_concept="International Banking",
            compliance_tags=(),
            description="Currency code field",
            aliases=("CURRENCY_CODE",),
        ),
        FieldArchetype(
            name="CUSTOMER_ID",
            pattern=_rule(r"^(cust|customer)[_\-]?(id|number|no)?$"),
            base_confidence=0.93,
            type_family=TypeFamily.STRING,
            masking_required=True,
            business_concept="Customer Information",
            compliance_tags=("PII_PROTECTION", "GDPR", "CCPA"),
            description="Customer identifier field",
            identifier=True,
            aliases=("CUST_ID", "CLIENT_ID"),
        ),
        FieldArchetype(
            name="RISK_SCORE",
            pattern=_rule(r"^risk[_\-]?(score|rating|grade)?$"),
            base_confidence=0.89,
            type_family=TypeFamily.NUMERIC,
            masking_required=True,
            business_concept="Risk Assessment",
            compliance_tags=("BASEL_III", "SOX"),
            description="Risk assessment score field",
            aliases=("RISK_RATING",),
        ),
        FieldArchetype(
            name="INTEREST_RATE",
            pattern=_rule(r"^(interest|rate)[_\-]?(rate|pct|percent)?$"),
            base_confidence=0.86,
            type_family=TypeFamily.NUMERIC,
            masking_required=False,
            business_concept="Pricing and Rates",
            compliance_tags=("REGULATION_Z", "TRUTH_IN_LENDING"),
            description="Interest rate field",
            aliases=("INT_RATE",),
        ),
    ))


# Process-wide default, built at import time and never mutated
DEFAULT_REGISTRY = build_default_registry()
