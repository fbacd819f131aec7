"""Authorization grant document model"""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON

from oauth_store.core.database import Base


class AuthorizationDocument(Base):
    """Short-lived authorization grant with an embedded client snapshot"""

    __tablename__ = "authorizations"

    code = Column(String(255), primary_key=True)
    client = Column(JSON, nullable=False)
    expires_in = Column(Integer, nullable=False, default=0)
    scope = Column(Text, nullable=False, default="")
    redirect_uri = Column(Text, nullable=False, default="")
    state = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False)
    user_data = Column(JSON(none_as_null=True), nullable=True)
    code_challenge = Column(String(255), nullable=False, default="")
    code_challenge_method = Column(String(16), nullable=False, default="")

    def __repr__(self):
        return f"<AuthorizationDocument(code='{self.code}', scope='{self.scope}')>"

    def to_document(self):
        """Convert to the persisted document mapping"""
        return {
            "code": self.code,
            "client": self.client,
            "expiresIn": self.expires_in,
            "scope": self.scope,
            "redirectUri": self.redirect_uri,
            "state": self.state,
            "createdAt": self.created_at,
            "userData": self.user_data,
            "codeChallenge": self.code_challenge,
            "codeChallengeMethod": self.code_challenge_method,
        }
