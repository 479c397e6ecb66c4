"""SQLAlchemy models for the MaskOFF chat backend."""

from .conversation import Conversation, ConversationMessage
from .user import UserProfile

__all__ = [
    "Conversation", "ConversationMessage",
    "UserProfile",
]
