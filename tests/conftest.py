from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from oauth_store.schemas.access import AccessRecord
from oauth_store.schemas.authorization import AuthorizationGrant
from oauth_store.schemas.client import Client
from oauth_store.storage import OAuthStorage

CREATED_AT = datetime(2026, 10, 19, 12, 30, 15, 123456, tzinfo=timezone.utc)


def make_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def make_client(client_id: str = "client-1", **overrides) -> Client:
    data = {
        "id": client_id,
        "secret": "s3cret",
        "redirect_uri": "https://app.example.com/callback",
        "user_data": {"tenant": "acme"},
    }
    data.update(overrides)
    return Client(**data)


def make_grant(code: str = "code-1", client: Client = None, **overrides) -> AuthorizationGrant:
    data = {
        "code": code,
        "client": client or make_client(),
        "expires_in": 600,
        "scope": "read write",
        "state": "xyz",
        "redirect_uri": "https://app.example.com/callback",
        "created_at": CREATED_AT,
    }
    data.update(overrides)
    return AuthorizationGrant(**data)


def make_access(access_token: str = "access-1", refresh_token="refresh-1", **overrides) -> AccessRecord:
    data = {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "client": make_client(),
        "grant": make_grant(),
        "expires_in": 3600,
        "scope": "read",
        "created_at": CREATED_AT,
    }
    data.update(overrides)
    return AccessRecord(**data)


@pytest.fixture
def engine():
    engine = make_engine()
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def root_storage(engine):
    root = OAuthStorage.open(engine, database_name="", init_mode="create_all")
    try:
        yield root
    finally:
        root.close()


@pytest.fixture
def storage(root_storage):
    handle = root_storage.clone()
    try:
        yield handle
    finally:
        handle.close()
