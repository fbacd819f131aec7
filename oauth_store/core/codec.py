"""Document codec - converts persisted documents to and from record schemas

Decoding validates the stored mapping straight into the concrete record
shape. Every client field binds to ``Client``, an embedded grant binds to
``AuthorizationGrant`` and an embedded previous record binds to the
previous-free ``PreviousAccessRecord``, so decode never goes deeper than one
generation. Keys outside that shape are dropped.
"""

from collections.abc import Mapping
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from oauth_store.core.exceptions import CodecError
from oauth_store.schemas.access import AccessRecord
from oauth_store.schemas.authorization import AuthorizationGrant
from oauth_store.schemas.client import Client

RecordT = TypeVar("RecordT", bound=BaseModel)


def _decode(model: Type[RecordT], kind: str, document: Optional[Mapping]) -> RecordT:
    if not isinstance(document, Mapping):
        raise CodecError(kind, [{"msg": f"expected a mapping, got {type(document).__name__}"}])
    try:
        return model.model_validate(dict(document))
    except ValidationError as exc:
        raise CodecError(kind, exc.errors(include_url=False, include_input=False)) from exc


def _encode(record: BaseModel, kind: str) -> Dict[str, Any]:
    try:
        return record.model_dump(by_alias=True, mode="json")
    except PydanticSerializationError as exc:
        raise CodecError(kind, [{"msg": str(exc)}]) from exc


def decode_client(document: Optional[Mapping]) -> Client:
    """Decode a client document"""
    return _decode(Client, "client", document)


def decode_grant(document: Optional[Mapping]) -> AuthorizationGrant:
    """Decode an authorization grant document"""
    return _decode(AuthorizationGrant, "authorization", document)


def decode_access(document: Optional[Mapping]) -> AccessRecord:
    """
    Decode an access document

    Args:
        document: Stored mapping, possibly written by other writers with a
            deeper previous chain

    Returns:
        AccessRecord with at most one previous generation

    Raises:
        CodecError: If the document does not fit the access record shape
    """
    return _decode(AccessRecord, "access", document)


def encode_client(client: Client) -> Dict[str, Any]:
    """Encode a client to its JSON document form"""
    return _encode(client, "client")


def encode_grant(grant: AuthorizationGrant) -> Dict[str, Any]:
    """Encode an authorization grant to its JSON document form"""
    return _encode(grant, "authorization")


def encode_access(record: AccessRecord) -> Dict[str, Any]:
    """Encode an access record to its JSON document form"""
    return _encode(record, "access")
