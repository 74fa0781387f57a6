"""Tests for the query definition stores."""

import dataclasses
from datetime import datetime

import pytest

from querygov_svc.queries import (
    InMemoryQueryStore,
    QueryDefinition,
    QueryLifecycleManager,
    QueryStatus,
    QueryUpdate,
    RecordNotFound,
    SqliteQueryStore,
    VersionConflict,
)


def _definition(**overrides) -> QueryDefinition:
    fields = {
        "id": None,
        "source_system": "ENCORE",
        "name": "acct_summary",
        "sql": "SELECT account_id FROM accounts WHERE batch_date = :batchDate",
        "parameter_names": ("batchDate",),
        "created_at": datetime(2024, 1, 2, 3, 4, 5),
    }
    fields.update(overrides)
    return QueryDefinition(**fields)


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    if request.param == "memory":
        store = InMemoryQueryStore()
    else:
        store = SqliteQueryStore(tmp_path / "queries.db")
    yield store
    store.close()


class TestStoreContract:
    def test_insert_assigns_id(self, any_store):
        stored = any_store.insert(_definition())
        assert stored.id is not None
        fetched = any_store.get(stored.id)
        assert fetched.name == "acct_summary"
        assert fetched.parameter_names == ("batchDate",)
        assert fetched.created_at == datetime(2024, 1, 2, 3, 4, 5)

    def test_get_missing(self, any_store):
        assert any_store.get(12345) is None

    def test_find_by_name_skips_deprecated(self, any_store):
        stored = any_store.insert(_definition())
        assert any_store.find_by_name("ENCORE", "acct_summary").id == stored.id
        assert any_store.find_by_name("SHAW", "acct_summary") is None

        any_store.set_status(stored.id, QueryStatus.DEPRECATED, 1, "alice")
        assert any_store.find_by_name("ENCORE", "acct_summary") is None

    def test_conditional_update(self, any_store):
        stored = any_store.insert(_definition())
        updated = any_store.update(dataclasses.replace(stored, description="v2", version=2), expected_version=1)
        assert updated.version == 2
        assert any_store.get(stored.id).description == "v2"

    def test_conflict_distinct_from_not_found(self, any_store):
        stored = any_store.insert(_definition())
        any_store.update(dataclasses.replace(stored, version=2), expected_version=1)

        with pytest.raises(VersionConflict) as exc_info:
            any_store.update(dataclasses.replace(stored, version=2), expected_version=1)
        assert exc_info.value.actual_version == 2

        with pytest.raises(RecordNotFound):
            any_store.update(dataclasses.replace(stored, id=999, version=2), expected_version=1)

    def test_set_status_bumps_version(self, any_store):
        stored = any_store.insert(_definition())
        changed = any_store.set_status(stored.id, QueryStatus.INACTIVE, 1, "bob", "corr_x")
        assert changed.version == 2
        assert changed.updated_by == "bob"
        assert any_store.get(stored.id).last_correlation_id == "corr_x"

    def test_set_status_missing(self, any_store):
        with pytest.raises(RecordNotFound):
            any_store.set_status(999, QueryStatus.INACTIVE, 1, "bob")

    def test_list_order_and_filters(self, any_store):
        any_store.insert(_definition(name="zeta"))
        any_store.insert(_definition(name="alpha"))
        deprecated = any_store.insert(_definition(name="beta"))
        any_store.insert(_definition(source_system="AAA", name="omega"))
        any_store.set_status(deprecated.id, QueryStatus.DEPRECATED, 1, "alice")

        assert [(d.source_system, d.name) for d in any_store.list()] == [
            ("AAA", "omega"), ("ENCORE", "alpha"), ("ENCORE", "zeta"),
        ]
        assert [d.name for d in any_store.list("ENCORE", include_deprecated=True)] == ["alpha", "beta", "zeta"]


class TestSqlitePersistence:
    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "queries.db"
        first = SqliteQueryStore(path)
        stored = first.insert(_definition())
        first.close()

        second = SqliteQueryStore(path)
        assert second.get(stored.id).sql == _definition().sql
        second.close()

    def test_lifecycle_on_sqlite(self, tmp_path, make_request):
        store = SqliteQueryStore(tmp_path / "queries.db")
        manager = QueryLifecycleManager(store)

        created = manager.create(make_request())
        assert manager.update(created.id, 1, QueryUpdate(description="nightly")).version == 2
        result = manager.soft_delete(created.id, "Replaced by consolidated balance feed")
        assert result.version == 3
        assert store.get(created.id).status == QueryStatus.DEPRECATED
        store.close()
