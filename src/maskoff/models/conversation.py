"""Models describing encrypted two-party chat logs."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from maskoff.db.session import Base
from maskoff.db.time import utcnow

OBJECT_ID_LENGTH = 32


def new_object_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


class Conversation(Base):
    """Aggregate root holding the participant pair and its ordered messages."""

    __tablename__ = "conversation"

    conversation_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), primary_key=True, default=new_object_id
    )
    # Fixed at creation, caller first.
    participant_a: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    participant_b: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    messages: Mapped[list[ConversationMessage]] = relationship(
        "ConversationMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationMessage.position",
    )

    @property
    def participants(self) -> tuple[str, str]:
        """Return both participant subject ids in creation order."""
        return (self.participant_a, self.participant_b)

    def has_participant(self, subject_id: str) -> bool:
        """Return True if the subject takes part in this conversation."""
        return subject_id in self.participants

    def other_participants(self, subject_id: str) -> list[str]:
        """Return the participants excluding ``subject_id``."""
        return [participant for participant in self.participants if participant != subject_id]

    def find_message(self, message_id: str) -> ConversationMessage | None:
        """Return the message with ``message_id`` if it belongs to this conversation."""
        for message in self.messages:
            if message.message_id == message_id:
                return message
        return None

    def __repr__(self) -> str:
        return f"Conversation({self.conversation_id!r}, participants={self.participants!r})"


class ConversationMessage(Base):
    """Encrypted message owned by a conversation.

    Only ciphertext is stored. ``iv`` is random per write and ``mac`` is the
    HMAC-SHA256 tag over ``iv || ciphertext``.
    """

    __tablename__ = "conversation_message"
    __table_args__ = (
        UniqueConstraint("conversation_id", "position", name="uq_conversation_message_position"),
    )

    message_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH), primary_key=True, default=new_object_id
    )
    conversation_id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        ForeignKey("conversation.conversation_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    sender_id: Mapped[str] = mapped_column(String(64), nullable=False)
    recipient_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    ciphertext: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    iv: Mapped[bytes] = mapped_column(LargeBinary(16), nullable=False)
    mac: Mapped[bytes] = mapped_column(LargeBinary(32), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    conversation: Mapped[Conversation] = relationship("Conversation", back_populates="messages")
