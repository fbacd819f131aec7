"""Authorization grant schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from oauth_store.schemas.client import Client
from oauth_store.schemas.document import DocumentModel, utc_now


class AuthorizationGrant(DocumentModel):
    """Short-lived authorization code issued after user consent"""
    code: str = Field(..., min_length=1)
    client: Client
    expires_in: int = 0  # seconds
    scope: str = ""
    redirect_uri: str = ""
    state: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    user_data: Optional[Any] = None

    # PKCE values, stored verbatim
    code_challenge: str = ""
    code_challenge_method: str = ""
