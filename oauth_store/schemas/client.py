"""Client schemas"""

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import Field

from oauth_store.schemas.document import DocumentModel

CLIENT_ATTRIBUTES = ("id", "secret", "redirect_uri", "user_data")


class Client(DocumentModel):
    """
    Registered client snapshot

    ``user_data`` is an opaque, JSON-serializable blob owned by the
    protocol engine; it is stored and returned untouched.
    """
    id: str = Field(..., alias="_id", min_length=1)
    secret: str = ""
    redirect_uri: str = ""
    user_data: Optional[Any] = None

    @classmethod
    def from_client(cls, client: Any, **overrides: Any) -> "Client":
        """
        Build a concrete snapshot from any client-shaped value

        Args:
            client: Client instance, mapping, or object exposing
                id/secret/redirect_uri/user_data attributes
            overrides: Field values that replace the source's

        Returns:
            Independent Client copy
        """
        if isinstance(client, cls):
            data = client.model_dump()
        elif isinstance(client, Mapping):
            data = dict(client)
            if "_id" in data:
                data["id"] = data.pop("_id")
        else:
            data = {
                name: getattr(client, name)
                for name in CLIENT_ATTRIBUTES
                if hasattr(client, name)
            }
        data.update(overrides)
        return cls.model_validate(data)
