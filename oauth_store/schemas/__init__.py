"""Pydantic schemas for stored records"""

from oauth_store.schemas.client import Client
from oauth_store.schemas.authorization import AuthorizationGrant
from oauth_store.schemas.access import AccessRecord, PreviousAccessRecord, truncate_chain

__all__ = [
    "Client",
    "AuthorizationGrant",
    "AccessRecord",
    "PreviousAccessRecord",
    "truncate_chain",
]
