"""Column metadata providers."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from .types import ColumnMetadata

logger = logging.getLogger(__name__)


class ColumnMetadataProvider(ABC):
    """Supplies the ordered column list for a query or table identifier."""

    @abstractmethod
    def get_columns(self, source_id: str) -> list[ColumnMetadata]:
        """Return columns ordered by ordinal; empty when unknown."""
        ...


class StaticColumnProvider(ColumnMetadataProvider):
    """In-memory provider keyed by query id or table name."""

    def __init__(self, columns: dict[str, list[ColumnMetadata]] | None = None) -> None:
        self._columns: dict[str, list[ColumnMetadata]] = {}
        self._lock = threading.RLock()
        for source_id, cols in (columns or {}).items():
            self.register(source_id, cols)

    def register(self, source_id: str, columns: list[ColumnMetadata]) -> None:
        with self._lock:
            self._columns[str(source_id)] = sorted(columns, key=lambda c: c.ordinal)

    def get_columns(self, source_id: str) -> list[ColumnMetadata]:
        with self._lock:
            return list(self._columns.get(str(source_id), []))


def load_columns_from_yaml(path: str | Path) -> StaticColumnProvider:
    """Load column metadata from a YAML file.

    Expected shape::

        columns:
          "42":
            - name: account_number
              declared_type: VARCHAR2(20)
              nullable: false
              ordinal: 1
              classification: SENSITIVE
    """
    path = Path(path)
    if not path.exists():
        logger.warning(f"Column metadata file not found: {path}")
        return StaticColumnProvider()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    provider = StaticColumnProvider()
    for source_id, rows in (data.get("columns") or {}).items():
        provider.register(str(source_id), [ColumnMetadata.from_dict(row) for row in rows or []])

    logger.info(f"Loaded column metadata for {len(data.get('columns') or {})} sources from {path}")
    return provider
