"""Client registry - point CRUD and paginated listing of clients"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from oauth_store.core.codec import decode_client, encode_client
from oauth_store.core.exceptions import InvalidQueryError, RecordNotFoundError
from oauth_store.models.client import ClientDocument
from oauth_store.schemas.client import Client

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Service for client registrations"""

    # Filterable fields, by attribute and by document key
    FILTER_FIELDS = {
        "id": ClientDocument.id,
        "_id": ClientDocument.id,
        "secret": ClientDocument.secret,
        "redirect_uri": ClientDocument.redirect_uri,
        "redirectUri": ClientDocument.redirect_uri,
    }

    @staticmethod
    def get_client(db: Session, client_id: str) -> Client:
        """
        Get client by id

        Args:
            db: Database session
            client_id: Client id

        Returns:
            Stored client

        Raises:
            RecordNotFoundError: If no client has this id
        """
        document = db.get(ClientDocument, client_id)
        if document is None:
            logger.debug(f"Client not found: {client_id}")
            raise RecordNotFoundError("Client", client_id)
        return decode_client(document.to_document())

    @staticmethod
    def set_client(db: Session, client_id: str, client: Any) -> Client:
        """
        Create or overwrite the client stored under client_id

        Args:
            db: Database session
            client_id: Key to store under; wins over client.id
            client: Client, mapping or client-shaped object

        Returns:
            Client as stored
        """
        snapshot = Client.from_client(client, id=client_id)
        document = encode_client(snapshot)

        db.merge(ClientDocument(
            id=client_id,
            secret=document["secret"],
            redirect_uri=document["redirectUri"],
            user_data=document["userData"],
        ))
        db.commit()

        logger.info(f"Saved client: {client_id}")
        return snapshot

    @staticmethod
    def remove_client(db: Session, client_id: str) -> None:
        """
        Delete client by id

        Raises:
            RecordNotFoundError: If no client has this id
        """
        deleted = db.query(ClientDocument).filter(ClientDocument.id == client_id).delete()
        db.commit()

        if not deleted:
            raise RecordNotFoundError("Client", client_id)
        logger.info(f"Deleted client: {client_id}")

    @staticmethod
    def list_clients(
        db: Session,
        filters: Optional[Dict[str, Any]],
        page_size: int,
        page_num: int
    ) -> List[Client]:
        """
        List one page of matching clients ordered by id

        Args:
            db: Database session
            filters: Equality filters keyed by field name, None or {} for all
            page_size: Page size, at least 1
            page_num: 1-based page number

        Returns:
            Clients on the requested page (possibly empty)

        Raises:
            InvalidQueryError: For page_size/page_num below 1 or unknown filter fields
        """
        if page_size < 1:
            raise InvalidQueryError("page_size must be at least 1", details={"page_size": page_size})
        if page_num < 1:
            raise InvalidQueryError("page_num is 1-based", details={"page_num": page_num})

        query = db.query(ClientDocument)
        for field, value in (filters or {}).items():
            column = ClientRegistry.FILTER_FIELDS.get(field)
            if column is None:
                raise InvalidQueryError(f"Unsupported client filter: {field}", details={"field": field})
            query = query.filter(column == value)

        documents = (
            query.order_by(ClientDocument.id)
            .offset(page_size * (page_num - 1))
            .limit(page_size)
            .all()
        )
        return [decode_client(document.to_document()) for document in documents]


# Singleton instance
client_registry = ClientRegistry()
