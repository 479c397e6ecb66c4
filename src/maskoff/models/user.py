"""Profile directory entries for subjects issued by the identity service."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from maskoff.db.session import Base
from maskoff.db.time import utcnow


class UserProfile(Base):
    """Public profile keyed by the opaque subject id.

    Rows are written by the identity subsystem; the chat core only reads them
    to attach display names to conversations.
    """

    __tablename__ = "user_profile"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def label(self) -> str:
        """Return the name to render for this user."""
        return self.display_name or self.username
