"""Access/refresh chain manager"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from oauth_store.core.codec import decode_access, encode_access
from oauth_store.core.exceptions import RecordNotFoundError
from oauth_store.models.access import AccessDocument
from oauth_store.schemas.access import AccessRecord, truncate_chain

logger = logging.getLogger(__name__)


class AccessStore:
    """Manage access records and their refresh-token lookups."""

    @staticmethod
    def save_access(db: Session, record: AccessRecord) -> AccessRecord:
        """
        Upsert access record by access token

        The record's previous snapshot is truncated in place first, so at
        most one generation of history is ever written.

        Args:
            db: Database session
            record: Record to store

        Returns:
            The (truncated) record
        """
        if not isinstance(record, AccessRecord):
            record = AccessRecord.model_validate(record)
        truncate_chain(record)
        document = encode_access(record)

        db.merge(AccessDocument(
            access_token=record.access_token,
            refresh_token=record.refresh_token or None,
            client=document["client"],
            grant=document["grant"],
            previous=document["previous"],
            expires_in=record.expires_in,
            scope=record.scope,
            redirect_uri=record.redirect_uri,
            created_at=record.created_at,
            user_data=document["userData"],
        ))
        db.commit()

        logger.info(
            f"Saved access record for client {record.client.id} "
            f"(refreshable={record.refresh_token is not None}, chained={record.previous is not None})"
        )
        return record

    @staticmethod
    def load_access_by_token(db: Session, access_token: str) -> AccessRecord:
        document = db.get(AccessDocument, access_token)
        if document is None:
            logger.debug("Access record not found by access token")
            raise RecordNotFoundError("Access", access_token)
        return decode_access(document.to_document())

    @staticmethod
    def load_access_by_refresh_token(db: Session, refresh_token: str) -> AccessRecord:
        """
        Load the access record carrying refresh_token

        Refresh tokens are not unique; when several records match, the first
        row the database returns wins.

        Raises:
            RecordNotFoundError: If no record carries this refresh token
        """
        document = None
        if refresh_token:
            document = (
                db.query(AccessDocument)
                .filter(AccessDocument.refresh_token == refresh_token)
                .first()
            )
        if document is None:
            logger.debug("Access record not found by refresh token")
            raise RecordNotFoundError("Access", refresh_token or "")
        return decode_access(document.to_document())

    @staticmethod
    def remove_access(db: Session, access_token: str) -> None:
        """Delete access record, including its refresh capability"""
        deleted = (
            db.query(AccessDocument)
            .filter(AccessDocument.access_token == access_token)
            .delete()
        )
        db.commit()

        if not deleted:
            raise RecordNotFoundError("Access", access_token)
        logger.info("Removed access record")

    @staticmethod
    def invalidate_refresh(db: Session, refresh_token: str) -> int:
        """
        Unset refresh_token on matching records, keeping the access records

        Returns:
            Number of records updated

        Raises:
            RecordNotFoundError: If no record carries this refresh token
        """
        updated = 0
        if refresh_token:
            updated = (
                db.query(AccessDocument)
                .filter(AccessDocument.refresh_token == refresh_token)
                .update({AccessDocument.refresh_token: None})
            )
            db.commit()

        if not updated:
            raise RecordNotFoundError("Access", refresh_token or "")
        logger.info(f"Invalidated refresh token on {updated} access record(s)")
        return updated


access_store = AccessStore()
