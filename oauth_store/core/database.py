"""Database configuration and connection pool management"""

from typing import Any, Optional
import logging
import threading

from sqlalchemy import create_engine, text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from oauth_store.config import settings

logger = logging.getLogger(__name__)

# Create base class for models
Base = declarative_base()

# Import models after Base is defined so metadata is populated.
from oauth_store import models  # noqa: E402,F401

# Process-wide engine, created on first use
_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def build_engine(url: Optional[str] = None, **overrides: Any) -> Engine:
    """
    Create an engine (and its connection pool) for the given URL

    Args:
        url: Database URL, defaults to the configured one
        overrides: Extra keyword arguments for create_engine

    Returns:
        Engine: New engine
    """
    url = url or settings.get_database_url()
    options: dict = {"pool_pre_ping": True, "echo": settings.DEBUG}

    # SQLite pools do not accept sizing arguments
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=settings.DATABASE_POOL_TIMEOUT,
            pool_recycle=settings.DATABASE_POOL_RECYCLE,
        )
    options.update(overrides)
    return create_engine(url, **options)


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call"""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = build_engine()
            logger.info(f"Created database engine for {_engine.url.render_as_string(hide_password=True)}")
        return _engine


def dispose_engine() -> None:
    """Tear down the shared engine and its pooled connections"""
    global _engine
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
            _engine = None
            logger.info("Database engine disposed")


def bind_database(engine: Engine, database_name: Optional[str] = None) -> Engine:
    """
    Route the storage tables to the given schema

    Args:
        engine: Shared engine
        database_name: Schema name, None keeps the default schema

    Returns:
        Engine: Engine proxy sharing the same pool
    """
    if not database_name:
        return engine
    return engine.execution_options(schema_translate_map={None: database_name})


def make_session_factory(bind: Engine) -> sessionmaker:
    """Create a session factory bound to the given engine"""
    return sessionmaker(autoflush=False, bind=bind)


def init_db(bind: Optional[Engine] = None, mode: Optional[str] = None) -> None:
    """
    Initialize database according to configured strategy.

    DB_INIT_MODE:
      - migrate: require alembic_version table (migration-first discipline)
      - create_all: create missing tables, for local/dev bootstrap and tests
      - off: skip initialization check
    """
    bind = bind or get_engine()
    mode = (mode or settings.DB_INIT_MODE).lower().strip()
    if mode == "off":
        logger.info("DB initialization check skipped (DB_INIT_MODE=off)")
        return

    if mode == "create_all":
        Base.metadata.create_all(bind=bind)
        logger.warning("Using create_all database initialization (recommended only for local development).")
        return

    if mode == "migrate":
        with bind.connect() as conn:
            if conn.dialect.name == "postgresql":
                version_table_exists = conn.execute(
                    text("SELECT to_regclass('public.alembic_version')")
                ).scalar()
                exists = bool(version_table_exists)
            elif conn.dialect.name == "sqlite":
                version_table_exists = conn.execute(
                    text(
                        "SELECT name FROM sqlite_master WHERE type='table' AND name='alembic_version'"
                    )
                ).fetchone()
                exists = bool(version_table_exists)
            else:
                exists = "alembic_version" in inspect(conn).get_table_names()
            if settings.DB_REQUIRE_HEAD and not exists:
                raise RuntimeError(
                    "Migration table missing. Run Alembic migrations before opening the storage."
                )
        logger.info("Migration metadata detected.")
        return

    raise RuntimeError(f"Unknown DB_INIT_MODE: {mode}")
