from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from helpdesk.core.database import Base


class UserSession(Base):
    """Server-side session record. Only the token digest is persisted."""

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True)
    token_digest = Column(String(64), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
