"""Chat endpoints for the MaskOFF API."""

from __future__ import annotations

from collections.abc import Iterable

from fastapi import APIRouter, HTTPException, Response, status

from maskoff.api.v1.dependencies import ConversationServiceDep, CurrentUserDep, SessionDep
from maskoff.models import Conversation, UserProfile
from maskoff.schemas.chat import (
    ConversationCreate,
    ConversationResponse,
    DecryptedMessageResponse,
    MessageEdit,
    MessageListResponse,
    MessageSend,
    ParticipantResponse,
    SendMessageResponse,
)
from maskoff.services.chat_service import NotAParticipantError, NotMessageSenderError
from maskoff.services.chat_store import (
    ChatError,
    ConversationNotFoundError,
    InvalidParticipantsError,
    MessageNotFoundError,
    StorageError,
)
from maskoff.services.cipher import DecryptionError

router = APIRouter(prefix="/chats", tags=["chats"])


def _http_error(err: ChatError | DecryptionError) -> HTTPException:
    """Translate a chat domain error into an HTTP error response."""
    if isinstance(err, ConversationNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    if isinstance(err, MessageNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if isinstance(err, (NotAParticipantError, NotMessageSenderError)):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(err))
    if isinstance(err, InvalidParticipantsError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err))
    if isinstance(err, DecryptionError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Message could not be decrypted",
        )
    if isinstance(err, StorageError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Chat storage is unavailable",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(err))


def _ensure_recipient(db: SessionDep, recipient_id: str) -> None:
    if db.get(UserProfile, recipient_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recipient not found",
        )


def _load_profiles(db: SessionDep, user_ids: Iterable[str]) -> dict[str, UserProfile]:
    ids = set(user_ids)
    if not ids:
        return {}
    profiles = db.query(UserProfile).filter(UserProfile.user_id.in_(ids)).all()
    return {profile.user_id: profile for profile in profiles}


def _serialize_conversation(
    conversation: Conversation, profiles: dict[str, UserProfile], message_count: int
) -> ConversationResponse:
    participants = []
    for user_id in conversation.participants:
        profile = profiles.get(user_id)
        participants.append(
            ParticipantResponse(
                user_id=user_id,
                username=profile.username if profile else None,
                display_name=profile.label if profile else None,
            )
        )
    return ConversationResponse(
        conversation_id=conversation.conversation_id,
        participants=participants,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        message_count=message_count,
    )


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(
    payload: ConversationCreate,
    response: Response,
    current_user: CurrentUserDep,
    db: SessionDep,
    service: ConversationServiceDep,
) -> ConversationResponse:
    """Open a conversation with another user, reusing an existing one."""
    _ensure_recipient(db, payload.recipient_id)
    try:
        conversation, created = await service.create_conversation(
            current_user.user_id, payload.recipient_id
        )
    except ChatError as err:
        raise _http_error(err) from err

    if not created:
        response.status_code = status.HTTP_200_OK
    profiles = _load_profiles(db, conversation.participants)
    try:
        counts = service.message_counts([conversation])
    except ChatError as err:
        raise _http_error(err) from err
    return _serialize_conversation(conversation, profiles, counts[conversation.conversation_id])


@router.get("", response_model=list[ConversationResponse])
async def list_chats(
    current_user: CurrentUserDep,
    db: SessionDep,
    service: ConversationServiceDep,
) -> list[ConversationResponse]:
    """List the caller's conversations with participant display names."""
    try:
        conversations = service.list_conversations(current_user.user_id)
        counts = service.message_counts(conversations)
    except ChatError as err:
        raise _http_error(err) from err

    profiles = _load_profiles(
        db, (user_id for conversation in conversations for user_id in conversation.participants)
    )
    return [
        _serialize_conversation(conversation, profiles, counts[conversation.conversation_id])
        for conversation in conversations
    ]


@router.post("/send", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageSend,
    current_user: CurrentUserDep,
    db: SessionDep,
    service: ConversationServiceDep,
) -> SendMessageResponse:
    """Send an encrypted message, opening the conversation on first contact."""
    _ensure_recipient(db, payload.recipient_id)
    try:
        conversation, message = await service.send_message(
            current_user.user_id, payload.recipient_id, payload.text
        )
    except ChatError as err:
        raise _http_error(err) from err

    return SendMessageResponse(
        conversation_id=conversation.conversation_id,
        message_id=message.message_id,
    )


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def get_messages(
    conversation_id: str,
    current_user: CurrentUserDep,
    service: ConversationServiceDep,
) -> MessageListResponse:
    """Return the decrypted messages of a conversation in send order."""
    try:
        messages = service.get_messages(current_user.user_id, conversation_id)
    except ChatError as err:
        raise _http_error(err) from err

    return MessageListResponse(
        conversation_id=conversation_id,
        messages=[DecryptedMessageResponse.model_validate(message) for message in messages],
    )


@router.get(
    "/{conversation_id}/messages/{message_id}",
    response_model=DecryptedMessageResponse,
)
async def get_message(
    conversation_id: str,
    message_id: str,
    current_user: CurrentUserDep,
    service: ConversationServiceDep,
) -> DecryptedMessageResponse:
    """Return a single decrypted message."""
    try:
        message = service.get_message(current_user.user_id, conversation_id, message_id)
    except (ChatError, DecryptionError) as err:
        raise _http_error(err) from err

    return DecryptedMessageResponse.model_validate(message)


@router.put("/{conversation_id}/messages/{message_id}")
async def edit_message(
    conversation_id: str,
    message_id: str,
    payload: MessageEdit,
    current_user: CurrentUserDep,
    service: ConversationServiceDep,
) -> dict[str, str]:
    """Replace the text of one of the caller's messages."""
    try:
        await service.edit_message(current_user.user_id, conversation_id, message_id, payload.text)
    except ChatError as err:
        raise _http_error(err) from err

    return {"status": "message_edited", "message_id": message_id}


@router.delete("/{conversation_id}/messages/{message_id}")
async def delete_message(
    conversation_id: str,
    message_id: str,
    current_user: CurrentUserDep,
    service: ConversationServiceDep,
) -> dict[str, str]:
    """Delete one of the caller's messages."""
    try:
        await service.delete_message(current_user.user_id, conversation_id, message_id)
    except ChatError as err:
        raise _http_error(err) from err

    return {"status": "message_deleted", "message_id": message_id}


@router.delete("/{conversation_id}")
async def delete_chat(
    conversation_id: str,
    current_user: CurrentUserDep,
    service: ConversationServiceDep,
) -> dict[str, str]:
    """Delete a conversation and every message in it."""
    try:
        await service.delete_conversation(current_user.user_id, conversation_id)
    except ChatError as err:
        raise _http_error(err) from err

    return {"status": "chat_deleted", "conversation_id": conversation_id}
