"""Query definition stores.

Stores are the sole persistence authority. A conditional write reports a
stale version as ``VersionConflict`` and a missing row as ``RecordNotFound``
so callers can tell the two apart.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from .types import (
    DataClassification,
    QueryDefinition,
    QueryStatus,
    QueryType,
    SecurityClassification,
)

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for store failures."""


class RecordNotFound(StoreError):
    """No record with the given id."""

    def __init__(self, query_id: int):
        self.query_id = query_id
        super().__init__(f"Query definition not found: {query_id}")


class VersionConflict(StoreError):
    """Stored version differs from the caller's expected version."""

    def __init__(self, query_id: int, expected_version: int, actual_version: int):
        self.query_id = query_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Query definition {query_id} is at version {actual_version}, expected {expected_version}"
        )


class QueryStore(ABC):
    """Persistence contract for query definitions."""

    @abstractmethod
    def get(self, query_id: int) -> QueryDefinition | None:
        ...

    @abstractmethod
    def find_by_name(self, source_system: str, name: str) -> QueryDefinition | None:
        """Find the non-deprecated record named ``name`` within ``source_system``."""
        ...

    @abstractmethod
    def insert(self, definition: QueryDefinition) -> QueryDefinition:
        """Persist a new record and return it with its assigned id."""
        ...

    @abstractmethod
    def update(self, definition: QueryDefinition, expected_version: int) -> QueryDefinition:
        """Write ``definition`` only if the stored version equals ``expected_version``.

        Raises:
            RecordNotFound: No record with ``definition.id``.
            VersionConflict: The stored version moved on.
        """
        ...

    @abstractmethod
    def list(self, source_system: str | None = None, include_deprecated: bool = False) -> list[QueryDefinition]:
        ...

    def set_status(
        self,
        query_id: int,
        status: QueryStatus,
        expected_version: int,
        actor: str,
        correlation_id: str | None = None,
    ) -> QueryDefinition:
        """Change status with the same version check as ``update``."""
        current = self.get(query_id)
        if current is None:
            raise RecordNotFound(query_id)
        changed = dataclasses.replace(
            current,
            status=status,
            version=expected_version + 1,
            updated_by=actor,
            updated_at=datetime.now(),
            last_correlation_id=correlation_id,
        )
        return self.update(changed, expected_version)

    def close(self) -> None:
        pass


def _sort_key(d: QueryDefinition):
    return (d.source_system, d.name, -d.version)


class InMemoryQueryStore(QueryStore):
    """Thread-safe in-memory store."""

    def __init__(self) -> None:
        self._records: dict[int, QueryDefinition] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def get(self, query_id: int) -> QueryDefinition | None:
        with self._lock:
            record = self._records.get(query_id)
            return dataclasses.replace(record) if record else None

    def find_by_name(self, source_system: str, name: str) -> QueryDefinition | None:
        with self._lock:
            for record in self._records.values():
                if (
                    record.source_system == source_system
                    and record.name == name
                    and record.status != QueryStatus.DEPRECATED
                ):
                    return dataclasses.replace(record)
            return None

    def insert(self, definition: QueryDefinition) -> QueryDefinition:
        with self._lock:
            stored = dataclasses.replace(definition, id=self._next_id)
            self._records[stored.id] = stored
            self._next_id += 1
            return dataclasses.replace(stored)

    def update(self, definition: QueryDefinition, expected_version: int) -> QueryDefinition:
        with self._lock:
            current = self._records.get(definition.id)
            if current is None:
                raise RecordNotFound(definition.id)
            if current.version != expected_version:
                raise VersionConflict(definition.id, expected_version, current.version)
            self._records[definition.id] = dataclasses.replace(definition)
            return dataclasses.replace(definition)

    def list(self, source_system: str | None = None, include_deprecated: bool = False) -> list[QueryDefinition]:
        with self._lock:
            records = [
                dataclasses.replace(r)
                for r in self._records.values()
                if (source_system is None or r.source_system == source_system)
                and (include_deprecated or r.status != QueryStatus.DEPRECATED)
            ]
        return sorted(records, key=_sort_key)

    def count(self) -> int:
        with self._lock:
            return len(self._records)


# =============================================================================
# SQLite
# =============================================================================

DEFAULT_DB_PATH = "query_definitions.db"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS query_definitions (
    id INTEGER PRIMARY KEY,
    source_system TEXT NOT NULL,
    name TEXT NOT NULL,
    sql_text TEXT NOT NULL,
    query_type TEXT NOT NULL,
    description TEXT,
    data_classification TEXT NOT NULL,
    security_classification TEXT NOT NULL,
    max_execution_time_seconds INTEGER NOT NULL,
    max_result_rows INTEGER NOT NULL,
    parameter_names TEXT NOT NULL DEFAULT '[]',
    status TEXT NOT NULL,
    version INTEGER NOT NULL,
    created_by TEXT NOT NULL,
    created_at TEXT,
    updated_by TEXT,
    updated_at TEXT,
    last_correlation_id TEXT
);

CREATE INDEX IF NOT EXISTS idx_query_defs_name ON query_definitions(source_system, name);
CREATE INDEX IF NOT EXISTS idx_query_defs_status ON query_definitions(status);
"""


def init_db(db_path: str | Path = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Open the database and create tables if they don't exist."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()

    return conn


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _row_to_definition(row: sqlite3.Row) -> QueryDefinition:
    return QueryDefinition(
        id=row["id"],
        source_system=row["source_system"],
        name=row["name"],
        sql=row["sql_text"],
        query_type=QueryType(row["query_type"]),
        description=row["description"] or "",
        data_classification=DataClassification(row["data_classification"]),
        security_classification=SecurityClassification(row["security_classification"]),
        max_execution_time_seconds=row["max_execution_time_seconds"],
        max_result_rows=row["max_result_rows"],
        parameter_names=tuple(json.loads(row["parameter_names"] or "[]")),
        status=QueryStatus(row["status"]),
        version=row["version"],
        created_by=row["created_by"],
        created_at=_parse_ts(row["created_at"]),
        updated_by=row["updated_by"],
        updated_at=_parse_ts(row["updated_at"]),
        last_correlation_id=row["last_correlation_id"],
    )


class SqliteQueryStore(QueryStore):
    """SQLite-backed store.

    Updates are a single conditional ``UPDATE ... WHERE id = ? AND version = ?``;
    when no row changes, a follow-up lookup decides between conflict and
    not-found.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        init_db(self.db_path).close()
        # Shared across FastAPI's worker threads, serialized by _lock
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

    def get(self, query_id: int) -> QueryDefinition | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM query_definitions WHERE id = ?", (query_id,)
            ).fetchone()
        return _row_to_definition(row) if row else None

    def find_by_name(self, source_system: str, name: str) -> QueryDefinition | None:
        with self._lock:
            row = self._conn.execute(
                """
                SELECT * FROM query_definitions
                WHERE source_system = ? AND name = ? AND status != ?
                ORDER BY version DESC
                LIMIT 1
                """,
                (source_system, name, QueryStatus.DEPRECATED.value),
            ).fetchone()
        return _row_to_definition(row) if row else None

    def insert(self, definition: QueryDefinition) -> QueryDefinition:
        with self._lock:
            cursor = self._conn.execute(
                """
                INSERT INTO query_definitions (
                    source_system, name, sql_text, query_type, description,
                    data_classification, security_classification,
                    max_execution_time_seconds, max_result_rows, parameter_names,
                    status, version, created_by, created_at,
                    updated_by, updated_at, last_correlation_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    definition.source_system,
                    definition.name,
                    definition.sql,
                    definition.query_type.value,
                    definition.description,
                    definition.data_classification.value,
                    definition.security_classification.value,
                    definition.max_execution_time_seconds,
                    definition.max_result_rows,
                    json.dumps(list(definition.parameter_names)),
                    definition.status.value,
                    definition.version,
                    definition.created_by,
                    _ts(definition.created_at),
                    definition.updated_by,
                    _ts(definition.updated_at),
                    definition.last_correlation_id,
                ),
            )
            self._conn.commit()
            new_id = cursor.lastrowid
        return dataclasses.replace(definition, id=new_id)

    def update(self, definition: QueryDefinition, expected_version: int) -> QueryDefinition:
        with self._lock:
            cursor = self._conn.execute(
                """
                UPDATE query_definitions SET
                    source_system = ?, name = ?, sql_text = ?, query_type = ?,
                    description = ?, data_classification = ?,
                    security_classification = ?, max_execution_time_seconds = ?,
                    max_result_rows = ?, parameter_names = ?, status = ?,
                    version = ?, updated_by = ?, updated_at = ?,
                    last_correlation_id = ?
                WHERE id = ? AND version = ?
                """,
                (
                    definition.source_system,
                    definition.name,
                    definition.sql,
                    definition.query_type.value,
                    definition.description,
                    definition.data_classification.value,
                    definition.security_classification.value,
                    definition.max_execution_time_seconds,
                    definition.max_result_rows,
                    json.dumps(list(definition.parameter_names)),
                    definition.status.value,
                    definition.version,
                    definition.updated_by,
                    _ts(definition.updated_at),
                    definition.last_correlation_id,
                    definition.id,
                    expected_version,
                ),
            )
            self._conn.commit()

            if cursor.rowcount == 0:
                row = self._conn.execute(
                    "SELECT version FROM query_definitions WHERE id = ?", (definition.id,)
                ).fetchone()
                if row is None:
                    raise RecordNotFound(definition.id)
                raise VersionConflict(definition.id, expected_version, row["version"])

        return dataclasses.replace(definition)

    def list(self, source_system: str | None = None, include_deprecated: bool = False) -> list[QueryDefinition]:
        query = "SELECT * FROM query_definitions WHERE 1=1"
        params: list = []
        if source_system is not None:
            query += " AND source_system = ?"
            params.append(source_system)
        if not include_deprecated:
            query += " AND status != ?"
            params.append(QueryStatus.DEPRECATED.value)
        query += " ORDER BY source_system, name, version DESC"

        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [_row_to_definition(r) for r in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
