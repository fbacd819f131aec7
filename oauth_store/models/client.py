"""Client registration document model"""

from sqlalchemy import Column, String, Text, JSON

from oauth_store.core.database import Base


class ClientDocument(Base):
    """Registered client, keyed by client id"""

    __tablename__ = "clients"

    id = Column(String(255), primary_key=True)
    secret = Column(String(255), nullable=False, default="")
    redirect_uri = Column(Text, nullable=False, default="")
    user_data = Column(JSON(none_as_null=True), nullable=True)

    def __repr__(self):
        return f"<ClientDocument(id='{self.id}', redirect_uri='{self.redirect_uri}')>"

    def to_document(self):
        """Convert to the persisted document mapping"""
        return {
            "_id": self.id,
            "secret": self.secret,
            "redirectUri": self.redirect_uri,
            "userData": self.user_data,
        }
