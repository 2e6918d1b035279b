"""
Revoked access tokens.
"""
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from skillharbor.core.database.base import Base, TimestampMixin


class RevokedToken(Base, TimestampMixin):
    """
    An access token ended by logout.

    Rows are keyed by the token's `jti` claim and only matter until `expires_at`.
    """
    __tablename__ = "revoked_tokens"

    jti: Mapped[str] = mapped_column(String(26), primary_key=True)
    user_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<RevokedToken(jti={self.jti}, user_id={self.user_id})>"
