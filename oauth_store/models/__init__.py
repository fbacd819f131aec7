"""Database models"""

from oauth_store.models.client import ClientDocument
from oauth_store.models.authorization import AuthorizationDocument
from oauth_store.models.access import AccessDocument, refresh_token_index, REFRESH_TOKEN_INDEX_NAME

__all__ = [
    "ClientDocument",
    "AuthorizationDocument",
    "AccessDocument",
    "refresh_token_index",
    "REFRESH_TOKEN_INDEX_NAME",
]
