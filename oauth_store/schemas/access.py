"""Access record schemas

An access record may embed the record it was refreshed from. The chain is
kept to one stored generation by giving the embedded record its own type,
``PreviousAccessRecord``, which has no ``previous`` field. Neither type
subclasses the other, so an ``AccessRecord`` can never sit in a
``previous`` slot unconverted.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from oauth_store.schemas.authorization import AuthorizationGrant
from oauth_store.schemas.client import Client
from oauth_store.schemas.document import DocumentModel, utc_now


class _AccessFields(DocumentModel):
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    client: Client
    grant: Optional[AuthorizationGrant] = None
    expires_in: int = 0  # seconds
    scope: str = ""
    redirect_uri: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    user_data: Optional[Any] = None

    @field_validator("refresh_token")
    @classmethod
    def empty_refresh_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty refresh token means no refresh capability"""
        return v or None


class PreviousAccessRecord(_AccessFields):
    """Access record embedded as history; carries no previous of its own"""


class AccessRecord(_AccessFields):
    """Access record with at most one generation of previous history"""
    previous: Optional[PreviousAccessRecord] = None

    @field_validator("previous", mode="before")
    @classmethod
    def drop_nested_previous(cls, value: Any) -> Any:
        return as_previous(value)


def as_previous(value: Any) -> Any:
    """
    Convert a full access record into its previous-free snapshot

    Mappings and PreviousAccessRecord values are returned unchanged; pydantic
    drops any nested ``previous`` key from a mapping during validation.
    """
    if isinstance(value, BaseModel) and not isinstance(value, PreviousAccessRecord):
        return value.model_dump(exclude={"previous"})
    return value


def truncate_chain(record: AccessRecord) -> AccessRecord:
    """
    Clear ``record.previous.previous`` in place

    Args:
        record: Record about to be persisted

    Returns:
        The same record
    """
    if record.previous is not None and not isinstance(record.previous, PreviousAccessRecord):
        record.previous = PreviousAccessRecord.model_validate(as_previous(record.previous))
    return record
