"""Shared API dependencies for authentication and chat services."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from starlette.requests import HTTPConnection

from maskoff.core.security import InvalidTokenError, decode_subject
from maskoff.db.session import SessionLocal, get_db
from maskoff.models import UserProfile
from maskoff.services.chat_service import ConversationService
from maskoff.services.chat_store import ConversationStore
from maskoff.services.cipher import MessageCipher, get_message_cipher
from maskoff.services.connections import ConnectionRegistry
from maskoff.services.notifications import NotificationFanout

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_factory() -> Callable[[], Session]:
    """Return the factory for sessions that must not outlive a single lookup.

    Long-lived connections such as the push channel open a session per frame
    instead of holding a pooled connection for their whole lifetime.
    """
    return SessionLocal


SessionFactoryDep = Annotated[Callable[[], Session], Depends(get_session_factory)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> UserProfile:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        Profile of the authenticated subject

    Raises:
        HTTPException: If the token is invalid or the subject is unknown
    """
    try:
        subject_id = decode_subject(credentials.credentials)
    except InvalidTokenError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err

    user = db.get(UserProfile, subject_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_connection_registry_dep(connection: HTTPConnection) -> ConnectionRegistry:
    """Return the registry attached to the running application."""
    registry: ConnectionRegistry = connection.app.state.connection_registry
    return registry


def get_cipher_dep() -> MessageCipher:
    """Return the chat message cipher."""
    return get_message_cipher()


CurrentUserDep = Annotated[UserProfile, Depends(get_current_user)]
RegistryDep = Annotated[ConnectionRegistry, Depends(get_connection_registry_dep)]
CipherDep = Annotated[MessageCipher, Depends(get_cipher_dep)]


def get_conversation_service(
    db: SessionDep,
    cipher: CipherDep,
    registry: RegistryDep,
) -> ConversationService:
    """Assemble the conversation service for one request."""
    return ConversationService(ConversationStore(db, cipher), NotificationFanout(registry))


ConversationServiceDep = Annotated[ConversationService, Depends(get_conversation_service)]
