"""Orchestration of chat log mutations and their update hints.

Every mutating operation commits through the store first and only then fans
out a ``ChatsUpdated`` hint, so a client that re-fetches on the hint always
sees the new state.
"""

from __future__ import annotations

import logging

from maskoff.models import Conversation, ConversationMessage
from maskoff.schemas.events import ChatsUpdated
from maskoff.services.chat_store import ChatError, ConversationStore, DecryptedMessage
from maskoff.services.notifications import NotificationFanout

logger = logging.getLogger(__name__)


class NotAParticipantError(ChatError):
    """Raised when a subject acts on a conversation it is not part of."""


class NotMessageSenderError(ChatError):
    """Raised when a subject edits or deletes someone else's message."""


class ConversationService:
    """Sequences store mutations and notification fan-out."""

    def __init__(self, store: ConversationStore, fanout: NotificationFanout) -> None:
        self.store = store
        self.fanout = fanout

    async def create_conversation(
        self, caller_id: str, recipient_id: str
    ) -> tuple[Conversation, bool]:
        """Return the pair's conversation, creating it if none exists.

        Returns:
            Tuple of (conversation, created)
        """
        existing = self.store.find_by_participants(caller_id, recipient_id)
        if existing is not None:
            return existing, False

        conversation = self.store.create(caller_id, recipient_id)
        await self.fanout.notify([caller_id, recipient_id], ChatsUpdated())
        return conversation, True

    def list_conversations(self, caller_id: str) -> list[Conversation]:
        """Return the caller's conversations."""
        return self.store.list_for_participant(caller_id)

    def message_counts(self, conversations: list[Conversation]) -> dict[str, int]:
        """Return the message count of each conversation keyed by id."""
        return self.store.message_counts([c.conversation_id for c in conversations])

    def get_messages(self, caller_id: str, conversation_id: str) -> list[DecryptedMessage]:
        """Return the decrypted message sequence of a conversation."""
        conversation = self._load_for(caller_id, conversation_id)
        return self.store.get_decrypted_messages(conversation)

    def get_message(
        self, caller_id: str, conversation_id: str, message_id: str
    ) -> DecryptedMessage:
        """Return one decrypted message; decryption failures propagate."""
        conversation = self._load_for(caller_id, conversation_id)
        return self.store.get_decrypted_message(conversation, message_id)

    async def send_message(
        self, sender_id: str, recipient_id: str, text: str
    ) -> tuple[Conversation, ConversationMessage]:
        """Append a message to the pair's conversation, creating it on first send."""
        conversation = self.store.find_by_participants(sender_id, recipient_id)
        if conversation is None:
            conversation = self.store.create(sender_id, recipient_id)
            logger.info("Opened conversation %s on first message", conversation.conversation_id)

        message = self.store.add_message(conversation, sender_id, recipient_id, text)
        await self.fanout.notify([sender_id, recipient_id], ChatsUpdated())
        return conversation, message

    async def edit_message(
        self, actor_id: str, conversation_id: str, message_id: str, text: str
    ) -> ConversationMessage:
        """Re-encrypt the actor's own message with new text."""
        conversation = self._load_for(actor_id, conversation_id)
        self._require_sender(conversation, actor_id, message_id)

        message = self.store.edit_message(conversation, message_id, text)
        await self.fanout.notify(conversation.other_participants(actor_id), ChatsUpdated())
        return message

    async def delete_message(self, actor_id: str, conversation_id: str, message_id: str) -> None:
        """Remove the actor's own message."""
        conversation = self._load_for(actor_id, conversation_id)
        self._require_sender(conversation, actor_id, message_id)

        self.store.delete_message(conversation, message_id)
        await self.fanout.notify(conversation.other_participants(actor_id), ChatsUpdated())

    async def delete_conversation(self, actor_id: str, conversation_id: str) -> None:
        """Delete a whole conversation and notify everyone who was in it."""
        self._load_for(actor_id, conversation_id)
        participants = self.store.delete_conversation(conversation_id)
        await self.fanout.notify(participants, ChatsUpdated())

    def _load_for(self, subject_id: str, conversation_id: str) -> Conversation:
        conversation = self.store.get(conversation_id)
        if not conversation.has_participant(subject_id):
            raise NotAParticipantError("Not a participant in this chat")
        return conversation

    @staticmethod
    def _require_sender(conversation: Conversation, actor_id: str, message_id: str) -> None:
        message = ConversationStore.require_message(conversation, message_id)
        if message.sender_id != actor_id:
            raise NotMessageSenderError("You can only change your own messages")
