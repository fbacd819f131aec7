import logging
import threading
import time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import QueuePool

from oauth_store.config import _BASE_DIR, Settings
from oauth_store.core import database
from oauth_store.core.database import build_engine
from oauth_store.core.log_config import configure_logging


def test_database_url_built_from_postgres_parts():
    settings = Settings(
        DATABASE_URL="",
        POSTGRES_USER="oauth admin",
        POSTGRES_PASSWORD="p@ss:word",
        POSTGRES_HOST="db",
        POSTGRES_PORT=6543,
        POSTGRES_DB="tokens",
    )
    assert settings.get_database_url() == "postgresql://oauth+admin:p%40ss%3Aword@db:6543/tokens"


def test_explicit_database_url_wins():
    settings = Settings(DATABASE_URL="sqlite:///./tokens.db", POSTGRES_HOST="ignored")
    assert settings.get_database_url() == "sqlite:///./tokens.db"


def test_database_name_blank_means_default_schema():
    assert Settings(DATABASE_NAME="  ").get_database_name() is None
    assert Settings(DATABASE_NAME="oauth").get_database_name() == "oauth"


def test_create_all_rejected_in_production():
    with pytest.raises(ValueError):
        Settings(ENVIRONMENT="production", DB_INIT_MODE="create_all").validate_database_settings()
    Settings(ENVIRONMENT="production", DB_INIT_MODE="migrate").validate_database_settings()
    Settings(ENVIRONMENT="development", DB_INIT_MODE="create_all").validate_database_settings()


def test_unknown_init_mode_rejected():
    with pytest.raises(ValueError):
        Settings(DB_INIT_MODE="sometimes").validate_database_settings()


def test_build_engine_for_sqlite_skips_pool_sizing():
    engine = build_engine("sqlite://")
    try:
        assert engine.dialect.name == "sqlite"
    finally:
        engine.dispose()


def test_build_engine_accepts_overrides():
    engine = build_engine("sqlite:///:memory:", poolclass=QueuePool)
    try:
        assert isinstance(engine.pool, QueuePool)
    finally:
        engine.dispose()


def test_configure_logging_writes_to_log_file(tmp_path):
    log_file = tmp_path / "logs" / "oauth_store.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        configure_logging(Settings(LOG_FILE=str(log_file), LOG_LEVEL="DEBUG"))
        logging.getLogger("oauth_store.test").info("storage ready")
        for handler in root.handlers:
            handler.flush()
        assert "storage ready" in log_file.read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_relative_log_file_resolves_against_repository_root():
    resolved = Settings(LOG_FILE="var/log/oauth.log").get_log_file()
    assert resolved == str((_BASE_DIR / "var" / "log" / "oauth.log").resolve())


def test_parent_relative_log_file_is_kept():
    resolved = Settings(LOG_FILE="../shared/oauth.log").get_log_file()
    assert resolved == str((_BASE_DIR.parent / "shared" / "oauth.log").resolve())


def test_blank_log_file_means_stream_only():
    assert Settings(LOG_FILE="").get_log_file() == ""


def test_concurrent_get_engine_builds_one_pool(monkeypatch):
    built = []
    barrier = threading.Barrier(8)

    def slow_build_engine():
        time.sleep(0.05)
        engine = create_engine("sqlite://")
        built.append(engine)
        return engine

    monkeypatch.setattr(database, "_engine", None)
    monkeypatch.setattr(database, "build_engine", slow_build_engine)

    results = []

    def worker():
        barrier.wait()
        results.append(database.get_engine())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert len(built) == 1
        assert all(engine is built[0] for engine in results)
    finally:
        for engine in built:
            engine.dispose()
