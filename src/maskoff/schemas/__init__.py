"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import (
    ConversationCreate,
    ConversationResponse,
    DecryptedMessageResponse,
    MessageEdit,
    MessageListResponse,
    MessageSend,
    SendMessageResponse,
)
from .events import ChatsUpdated, FriendsUpdated, JobsUpdated, PostsUpdated, PushEvent
from .user import UserResponse

__all__ = [
    "ConversationCreate", "ConversationResponse",
    "DecryptedMessageResponse", "MessageEdit", "MessageListResponse",
    "MessageSend", "SendMessageResponse",
    "ChatsUpdated", "FriendsUpdated", "JobsUpdated", "PostsUpdated", "PushEvent",
    "UserResponse",
]
