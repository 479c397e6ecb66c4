"""Persistence and decrypted projection of chat logs.

The store owns every read and write of the ``Conversation`` aggregate. Message
bodies only ever reach the database encrypted; plaintext is produced on each
read and never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from maskoff.db.time import utcnow
from maskoff.models import Conversation, ConversationMessage
from maskoff.services.cipher import DecryptionError, MessageCipher

logger = logging.getLogger(__name__)


class ChatError(RuntimeError):
    """Base exception for chat log failures."""


class NotFoundError(ChatError):
    """Raised when a referenced conversation or message does not exist."""


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation id is unknown."""


class MessageNotFoundError(NotFoundError):
    """Raised when a message id is not part of the conversation."""


class InvalidParticipantsError(ChatError):
    """Raised when a conversation would not have two distinct participants."""


class StorageError(ChatError):
    """Raised when the underlying database call fails."""


@dataclass(frozen=True)
class DecryptedMessage:
    """Read-side view of a single message.

    ``message`` is None and ``decryption_failed`` True when the stored
    ciphertext could not be decrypted.
    """

    message_id: str
    sender_id: str
    recipient_id: str | None
    message: str | None
    timestamp: datetime
    decryption_failed: bool = False


class ConversationStore:
    """Repository for conversations and their encrypted messages."""

    def __init__(self, session: Session, cipher: MessageCipher) -> None:
        self.session = session
        self.cipher = cipher

    def create(self, participant_a: str, participant_b: str) -> Conversation:
        """Create an empty conversation between two subjects."""
        if participant_a == participant_b:
            raise InvalidParticipantsError("A conversation needs two distinct participants")

        conversation = Conversation(participant_a=participant_a, participant_b=participant_b)
        self.session.add(conversation)
        self._commit("create conversation")
        logger.debug("Created conversation %s", conversation.conversation_id)
        return conversation

    def find_by_participants(self, participant_a: str, participant_b: str) -> Conversation | None:
        """Return the oldest conversation between the pair, in either order."""
        try:
            return (
                self.session.query(Conversation)
                .filter(
                    or_(
                        and_(
                            Conversation.participant_a == participant_a,
                            Conversation.participant_b == participant_b,
                        ),
                        and_(
                            Conversation.participant_a == participant_b,
                            Conversation.participant_b == participant_a,
                        ),
                    )
                )
                .order_by(Conversation.created_at)
                .first()
            )
        except SQLAlchemyError as err:
            raise StorageError("Could not look up conversation") from err

    def get(self, conversation_id: str) -> Conversation:
        """Return a conversation by id.

        Raises:
            ConversationNotFoundError: If no conversation has this id
        """
        try:
            conversation = self.session.get(Conversation, conversation_id)
        except SQLAlchemyError as err:
            raise StorageError("Could not load conversation") from err
        if conversation is None:
            raise ConversationNotFoundError(f"Conversation {conversation_id} not found")
        return conversation

    def list_for_participant(self, subject_id: str) -> list[Conversation]:
        """Return every conversation the subject takes part in, newest activity first."""
        try:
            return (
                self.session.query(Conversation)
                .filter(
                    or_(
                        Conversation.participant_a == subject_id,
                        Conversation.participant_b == subject_id,
                    )
                )
                .order_by(Conversation.updated_at.desc(), Conversation.created_at.desc())
                .all()
            )
        except SQLAlchemyError as err:
            raise StorageError("Could not list conversations") from err

    def message_counts(self, conversation_ids: list[str]) -> dict[str, int]:
        """Return the number of messages per conversation without loading them."""
        if not conversation_ids:
            return {}
        try:
            rows = (
                self.session.query(
                    ConversationMessage.conversation_id,
                    func.count(ConversationMessage.message_id),
                )
                .filter(ConversationMessage.conversation_id.in_(conversation_ids))
                .group_by(ConversationMessage.conversation_id)
                .all()
            )
        except SQLAlchemyError as err:
            raise StorageError("Could not count messages") from err
        counts = dict.fromkeys(conversation_ids, 0)
        counts.update({conversation_id: count for conversation_id, count in rows})
        return counts

    def add_message(
        self,
        conversation: Conversation,
        sender_id: str,
        recipient_id: str | None,
        plaintext: str,
    ) -> ConversationMessage:
        """Encrypt ``plaintext`` and append it to the conversation."""
        payload = self.cipher.encrypt(plaintext)
        now = utcnow()
        messages = conversation.messages
        position = messages[-1].position + 1 if messages else 0

        message = ConversationMessage(
            conversation_id=conversation.conversation_id,
            position=position,
            sender_id=sender_id,
            recipient_id=recipient_id,
            ciphertext=payload.ciphertext,
            iv=payload.iv,
            mac=payload.mac,
            timestamp=now,
        )
        messages.append(message)
        conversation.updated_at = now
        self._commit("add message")
        return message

    def edit_message(
        self, conversation: Conversation, message_id: str, new_plaintext: str
    ) -> ConversationMessage:
        """Replace a message body in place under a new IV.

        Raises:
            MessageNotFoundError: If the message is not part of the conversation
        """
        message = self.require_message(conversation, message_id)
        payload = self.cipher.encrypt(new_plaintext)
        now = utcnow()

        message.ciphertext = payload.ciphertext
        message.iv = payload.iv
        message.mac = payload.mac
        message.timestamp = now
        conversation.updated_at = now
        self._commit("edit message")
        return message

    def delete_message(self, conversation: Conversation, message_id: str) -> None:
        """Remove a message from the conversation.

        Raises:
            MessageNotFoundError: If the message is not part of the conversation
        """
        message = self.require_message(conversation, message_id)
        conversation.messages.remove(message)
        conversation.updated_at = utcnow()
        self._commit("delete message")

    def delete_conversation(self, conversation_id: str) -> tuple[str, str]:
        """Delete a conversation and all of its messages.

        Returns:
            The former participants
        """
        conversation = self.get(conversation_id)
        participants = conversation.participants
        self.session.delete(conversation)
        self._commit("delete conversation")
        return participants

    def get_decrypted_messages(self, conversation: Conversation) -> list[DecryptedMessage]:
        """Decrypt every message in send order.

        A message that fails to decrypt is flagged rather than aborting the
        whole read.
        """
        decrypted: list[DecryptedMessage] = []
        for message in conversation.messages:
            try:
                text = self._decrypt(message)
            except DecryptionError as err:
                logger.warning(
                    "Could not decrypt message %s in conversation %s: %s",
                    message.message_id,
                    conversation.conversation_id,
                    err,
                )
                decrypted.append(_project(message, None))
            else:
                decrypted.append(_project(message, text))
        return decrypted

    def get_decrypted_message(self, conversation: Conversation, message_id: str) -> DecryptedMessage:
        """Decrypt a single message.

        Raises:
            MessageNotFoundError: If the message is not part of the conversation
            DecryptionError: If the message cannot be decrypted
        """
        message = self.require_message(conversation, message_id)
        return _project(message, self._decrypt(message))

    def _decrypt(self, message: ConversationMessage) -> str:
        return self.cipher.decrypt(message.ciphertext, message.iv, message.mac)

    @staticmethod
    def require_message(conversation: Conversation, message_id: str) -> ConversationMessage:
        message = conversation.find_message(message_id)
        if message is None:
            raise MessageNotFoundError(
                f"Message {message_id} not found in conversation {conversation.conversation_id}"
            )
        return message

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as err:
            self.session.rollback()
            logger.error("Failed to %s", action, exc_info=True)
            raise StorageError(f"Could not {action}") from err


def _project(message: ConversationMessage, text: str | None) -> DecryptedMessage:
    return DecryptedMessage(
        message_id=message.message_id,
        sender_id=message.sender_id,
        recipient_id=message.recipient_id,
        message=text,
        timestamp=message.timestamp,
        decryption_failed=text is None,
    )
