import pytest
from prometheus_client import REGISTRY
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, OperationalError

from oauth_store.core.database import bind_database
from oauth_store.core.exceptions import (
    IndexBootstrapError,
    RecordNotFoundError,
    StorageClosedError,
    StoreUnavailableError,
)
from oauth_store.models.access import REFRESH_TOKEN_INDEX_NAME
from oauth_store.services.access_store import access_store
from oauth_store.storage import OAuthStorage, storage_scope

from conftest import make_access, make_client, make_engine


def _sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_open_bootstraps_sparse_refresh_index(engine):
    storage = OAuthStorage.open(engine, database_name="", init_mode="create_all")
    try:
        indexes = {index["name"]: index for index in inspect(engine).get_indexes("accesses")}
        assert REFRESH_TOKEN_INDEX_NAME in indexes
        assert not indexes[REFRESH_TOKEN_INDEX_NAME]["unique"]
    finally:
        storage.close()


def test_open_is_repeatable(engine):
    first = OAuthStorage.open(engine, database_name="", init_mode="create_all")
    second = OAuthStorage.open(engine, database_name="", init_mode="create_all")
    first.close()
    second.close()


def test_open_fails_fast_when_index_cannot_be_built():
    engine = make_engine()
    try:
        # no tables, so the index has nothing to attach to
        with pytest.raises(IndexBootstrapError) as exc_info:
            OAuthStorage.open(engine, database_name="", init_mode="off")
        assert exc_info.value.details["index"] == REFRESH_TOKEN_INDEX_NAME
    finally:
        engine.dispose()


def test_open_in_migrate_mode_requires_alembic_history():
    engine = make_engine()
    try:
        with pytest.raises(RuntimeError):
            OAuthStorage.open(engine, database_name="", init_mode="migrate")
    finally:
        engine.dispose()


def test_bind_database_routes_schema(engine):
    assert bind_database(engine, None) is engine
    assert bind_database(engine, "") is engine
    routed = bind_database(engine, "oauth")
    assert routed.get_execution_options()["schema_translate_map"] == {None: "oauth"}


def test_clones_share_data_but_not_sessions(root_storage):
    writer = root_storage.clone()
    reader = root_storage.clone()
    try:
        assert writer.session is not reader.session
        writer.set_client("c1", make_client("c1"))
        assert reader.get_client("c1").id == "c1"
    finally:
        writer.close()
        reader.close()


def test_close_is_a_guarded_no_op(root_storage):
    handle = root_storage.clone()
    handle.close()
    handle.close()

    assert handle.closed
    with pytest.raises(StorageClosedError):
        handle.get_client("c1")


def test_clone_of_closed_handle_is_usable(root_storage):
    handle = root_storage.clone()
    handle.close()

    with handle.clone() as fresh:
        fresh.set_client("c1", make_client("c1"))
        assert fresh.get_client("c1").id == "c1"
    assert fresh.closed


def test_storage_scope_releases_on_error(root_storage):
    with pytest.raises(RecordNotFoundError):
        with storage_scope(root_storage) as handle:
            handle.get_client("missing")
    assert handle.closed


def test_connection_failure_becomes_store_unavailable(storage, monkeypatch):
    def broken(db, access_token):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(access_store, "load_access_by_token", broken)

    with pytest.raises(StoreUnavailableError) as exc_info:
        storage.load_access_by_token("access-1")
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_other_database_errors_pass_through(storage, monkeypatch):
    def conflicting(db, record):
        raise IntegrityError("INSERT", {}, Exception("constraint"))

    monkeypatch.setattr(access_store, "save_access", conflicting)

    with pytest.raises(IntegrityError):
        storage.save_access(make_access())
    # session is still usable after the rollback
    storage.set_client("c1", make_client("c1"))
    assert storage.get_client("c1").id == "c1"


def test_operations_are_counted(storage):
    labels = {"operation": "get_client", "outcome": "not_found"}
    before = _sample("oauthstore_operations_total", labels)

    with pytest.raises(RecordNotFoundError):
        storage.get_client("missing")

    assert _sample("oauthstore_operations_total", labels) == before + 1


def test_open_handles_gauge_tracks_clones(root_storage):
    before = _sample("oauthstore_open_handles", {})
    handle = root_storage.clone()
    assert _sample("oauthstore_open_handles", {}) == before + 1
    handle.close()
    handle.close()
    assert _sample("oauthstore_open_handles", {}) == before
