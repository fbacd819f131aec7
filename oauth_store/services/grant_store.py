"""Authorization grant store"""

import logging

from sqlalchemy.orm import Session

from oauth_store.core.codec import decode_grant, encode_grant
from oauth_store.core.exceptions import RecordNotFoundError
from oauth_store.models.authorization import AuthorizationDocument
from oauth_store.schemas.authorization import AuthorizationGrant

logger = logging.getLogger(__name__)


class GrantStore:
    """Persist short-lived authorization grants keyed by code."""

    @staticmethod
    def save_grant(db: Session, grant: AuthorizationGrant) -> None:
        """Upsert grant by code, replacing any stored grant wholesale"""
        if not isinstance(grant, AuthorizationGrant):
            grant = AuthorizationGrant.model_validate(grant)
        document = encode_grant(grant)
        db.merge(AuthorizationDocument(
            code=grant.code,
            client=document["client"],
            expires_in=grant.expires_in,
            scope=grant.scope,
            redirect_uri=grant.redirect_uri,
            state=grant.state,
            created_at=grant.created_at,
            user_data=document["userData"],
            code_challenge=grant.code_challenge,
            code_challenge_method=grant.code_challenge_method,
        ))
        db.commit()
        logger.info(f"Saved authorization grant for client {grant.client.id}")

    @staticmethod
    def load_grant(db: Session, code: str) -> AuthorizationGrant:
        document = db.get(AuthorizationDocument, code)
        if document is None:
            logger.debug("Authorization grant not found")
            raise RecordNotFoundError("Authorization", code)
        return decode_grant(document.to_document())

    @staticmethod
    def remove_grant(db: Session, code: str) -> None:
        deleted = db.query(AuthorizationDocument).filter(AuthorizationDocument.code == code).delete()
        db.commit()

        if not deleted:
            raise RecordNotFoundError("Authorization", code)
        logger.info("Removed authorization grant")


grant_store = GrantStore()
