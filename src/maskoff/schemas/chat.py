"""Chat-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

MAX_MESSAGE_LENGTH = 4000


class ConversationCreate(BaseModel):
    """Schema for explicitly opening a conversation."""

    recipient_id: str = Field(..., min_length=1, max_length=64, description="Subject id of the other participant")


class MessageSend(BaseModel):
    """Schema for sending a message (opens the conversation if needed)."""

    recipient_id: str = Field(..., min_length=1, max_length=64, description="Subject id of the recipient")
    text: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH, description="Plaintext message body")


class MessageEdit(BaseModel):
    """Schema for replacing the body of an existing message."""

    text: str = Field(..., min_length=1, max_length=MAX_MESSAGE_LENGTH, description="New plaintext message body")


class ParticipantResponse(BaseModel):
    """Participant with the display data from the profile directory."""

    user_id: str
    username: str | None = None
    display_name: str | None = None


class ConversationResponse(BaseModel):
    """Schema for conversation metadata returned by the API."""

    conversation_id: str
    participants: list[ParticipantResponse]
    created_at: datetime
    updated_at: datetime
    message_count: int


class DecryptedMessageResponse(BaseModel):
    """Schema for a decrypted message.

    ``message`` is null and ``decryption_failed`` true when the stored
    ciphertext could not be decrypted.
    """

    message_id: str
    sender_id: str
    recipient_id: str | None
    message: str | None
    timestamp: datetime
    decryption_failed: bool = False

    model_config = ConfigDict(from_attributes=True)


class MessageListResponse(BaseModel):
    """Decrypted message sequence of one conversation."""

    conversation_id: str
    messages: list[DecryptedMessageResponse]


class SendMessageResponse(BaseModel):
    """Result of sending a message."""

    status: str = "message_sent"
    conversation_id: str
    message_id: str
