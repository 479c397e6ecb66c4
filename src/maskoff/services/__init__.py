"""Business logic services for the MaskOFF chat backend."""

from .chat_service import ConversationService
from .chat_store import ConversationStore
from .cipher import MessageCipher
from .connections import ConnectionRegistry, InMemoryConnectionRegistry
from .notifications import NotificationFanout

__all__ = [
    "ConversationService",
    "ConversationStore",
    "MessageCipher",
    "ConnectionRegistry",
    "InMemoryConnectionRegistry",
    "NotificationFanout",
]
