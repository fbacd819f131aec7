"""OAuth storage handle - lifecycle and the collaborator contract

One process-wide engine holds the connection pool. Each logical request
clones its own ``OAuthStorage`` handle (its own ``Session`` over that pool)
and closes it on every exit path, usually through ``storage_scope``.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import wraps
from typing import Any, Dict, Iterator, List, Optional
import logging
import time

from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session, sessionmaker

from oauth_store.config import settings
from oauth_store.core.database import bind_database, get_engine, init_db, make_session_factory
from oauth_store.core.exceptions import (
    IndexBootstrapError,
    RecordNotFoundError,
    StorageClosedError,
    StoreUnavailableError,
)
from oauth_store.core.metrics import INDEX_BOOTSTRAP_COUNT, OPEN_HANDLES_GAUGE, record_operation
from oauth_store.models.access import REFRESH_TOKEN_INDEX_NAME, refresh_token_index
from oauth_store.schemas.access import AccessRecord
from oauth_store.schemas.authorization import AuthorizationGrant
from oauth_store.schemas.client import Client
from oauth_store.services.access_store import access_store
from oauth_store.services.client_registry import client_registry
from oauth_store.services.grant_store import grant_store

logger = logging.getLogger(__name__)

# Driver errors that mean the store could not be reached
UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


def _operation(name: str):
    """Time and count a storage operation, rolling back its session on failure."""
    def decorator(func):
        @wraps(func)
        def wrapper(self: "OAuthStorage", *args, **kwargs):
            start = time.perf_counter()
            outcome = "error"
            try:
                result = func(self, *args, **kwargs)
                outcome = "ok"
                return result
            except RecordNotFoundError:
                outcome = "not_found"
                raise
            except UNAVAILABLE_ERRORS as exc:
                self.rollback()
                logger.error(f"Store unavailable during {name}: {exc}")
                raise StoreUnavailableError(f"Backing store unavailable during {name}") from exc
            except SQLAlchemyError:
                self.rollback()
                raise
            finally:
                record_operation(name, outcome, time.perf_counter() - start)
        return wrapper
    return decorator


def ensure_refresh_token_index(bind: Engine) -> None:
    """
    Create the sparse refresh-token index if it is missing

    Raises:
        IndexBootstrapError: If the index cannot be created
    """
    try:
        refresh_token_index.create(bind=bind, checkfirst=True)
    except SQLAlchemyError as exc:
        INDEX_BOOTSTRAP_COUNT.labels("error").inc()
        logger.critical(f"Failed to bootstrap index {REFRESH_TOKEN_INDEX_NAME}: {exc}")
        raise IndexBootstrapError(REFRESH_TOKEN_INDEX_NAME, str(exc)) from exc
    INDEX_BOOTSTRAP_COUNT.labels("ok").inc()
    logger.info(f"Index {REFRESH_TOKEN_INDEX_NAME} ready")


class OAuthStorage:
    """Storage handle for clients, authorization grants and access records."""

    def __init__(
        self,
        bind: Engine,
        database_name: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
    ):
        self.database_name = database_name
        self._bind = bind
        self._session_factory = session_factory or make_session_factory(bind)
        self._session: Optional[Session] = self._session_factory()
        OPEN_HANDLES_GAUGE.inc()

    @classmethod
    def open(
        cls,
        engine: Optional[Engine] = None,
        database_name: Optional[str] = None,
        init_mode: Optional[str] = None,
    ) -> "OAuthStorage":
        """
        Open the storage on a connection pool

        Args:
            engine: Shared engine, defaults to the process-wide one
            database_name: Schema for the storage tables; None uses
                DATABASE_NAME from settings, "" the default schema
            init_mode: Overrides DB_INIT_MODE

        Returns:
            Root storage handle; clone it per request

        Raises:
            IndexBootstrapError: If the refresh-token index cannot be created
        """
        engine = engine or get_engine()
        if database_name is None:
            database_name = settings.get_database_name()

        bind = bind_database(engine, database_name)
        init_db(bind, init_mode)
        ensure_refresh_token_index(bind)

        logger.info(f"Opened OAuth storage (schema={database_name or 'default'})")
        return cls(bind, database_name)

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StorageClosedError()
        return self._session

    @property
    def closed(self) -> bool:
        return self._session is None

    def clone(self) -> "OAuthStorage":
        """New handle sharing this handle's connection pool, with its own session"""
        return OAuthStorage(self._bind, self.database_name, self._session_factory)

    def close(self) -> None:
        """Release the handle's session; safe to call more than once"""
        if self._session is not None:
            self._session.close()
            self._session = None
            OPEN_HANDLES_GAUGE.dec()

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()

    def __enter__(self) -> "OAuthStorage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Clients

    @_operation("get_client")
    def get_client(self, client_id: str) -> Client:
        return client_registry.get_client(self.session, client_id)

    @_operation("set_client")
    def set_client(self, client_id: str, client: Any) -> Client:
        return client_registry.set_client(self.session, client_id, client)

    @_operation("remove_client")
    def remove_client(self, client_id: str) -> None:
        client_registry.remove_client(self.session, client_id)

    @_operation("list_clients")
    def list_clients(
        self,
        filters: Optional[Dict[str, Any]],
        page_size: int,
        page_num: int,
    ) -> List[Client]:
        return client_registry.list_clients(self.session, filters, page_size, page_num)

    # Authorization grants

    @_operation("save_grant")
    def save_grant(self, grant: AuthorizationGrant) -> None:
        grant_store.save_grant(self.session, grant)

    @_operation("load_grant")
    def load_grant(self, code: str) -> AuthorizationGrant:
        return grant_store.load_grant(self.session, code)

    @_operation("remove_grant")
    def remove_grant(self, code: str) -> None:
        grant_store.remove_grant(self.session, code)

    # Access records

    @_operation("save_access")
    def save_access(self, record: AccessRecord) -> AccessRecord:
        return access_store.save_access(self.session, record)

    @_operation("load_access_by_token")
    def load_access_by_token(self, access_token: str) -> AccessRecord:
        return access_store.load_access_by_token(self.session, access_token)

    @_operation("load_access_by_refresh_token")
    def load_access_by_refresh_token(self, refresh_token: str) -> AccessRecord:
        return access_store.load_access_by_refresh_token(self.session, refresh_token)

    @_operation("remove_access")
    def remove_access(self, access_token: str) -> None:
        access_store.remove_access(self.session, access_token)

    @_operation("invalidate_refresh")
    def invalidate_refresh(self, refresh_token: str) -> int:
        return access_store.invalidate_refresh(self.session, refresh_token)


@contextmanager
def storage_scope(storage: OAuthStorage) -> Iterator[OAuthStorage]:
    """
    Request-scoped handle, always released

    Yields:
        OAuthStorage: Clone of storage
    """
    handle = storage.clone()
    try:
        yield handle
    finally:
        handle.close()
