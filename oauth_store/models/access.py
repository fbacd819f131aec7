"""Access record document model"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Index

from oauth_store.core.database import Base

REFRESH_TOKEN_INDEX_NAME = "idx_accesses_refresh_token"


class AccessDocument(Base):
    """Access token record with embedded client, grant and previous snapshots"""

    __tablename__ = "accesses"

    access_token = Column(String(255), primary_key=True)
    refresh_token = Column(String(255), nullable=True)  # NULL when no refresh capability
    client = Column(JSON, nullable=False)
    grant = Column("grant_data", JSON(none_as_null=True), nullable=True)
    previous = Column(JSON(none_as_null=True), nullable=True)
    expires_in = Column(Integer, nullable=False, default=0)
    scope = Column(Text, nullable=False, default="")
    redirect_uri = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False)
    user_data = Column(JSON(none_as_null=True), nullable=True)

    def __repr__(self):
        return f"<AccessDocument(access_token='{self.access_token}', scope='{self.scope}')>"

    def to_document(self):
        """Convert to the persisted document mapping"""
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "client": self.client,
            "grant": self.grant,
            "previous": self.previous,
            "expiresIn": self.expires_in,
            "scope": self.scope,
            "redirectUri": self.redirect_uri,
            "createdAt": self.created_at,
            "userData": self.user_data,
        }


# Sparse, non-unique: only rows that still carry a refresh token are indexed
refresh_token_index = Index(
    REFRESH_TOKEN_INDEX_NAME,
    AccessDocument.__table__.c.refresh_token,
    unique=False,
    postgresql_where=AccessDocument.__table__.c.refresh_token.isnot(None),
    sqlite_where=AccessDocument.__table__.c.refresh_token.isnot(None),
)
