"""System and transparency endpoints for the MaskOFF API."""

from __future__ import annotations

from fastapi import APIRouter

from maskoff.api.v1.dependencies import RegistryDep, SessionDep
from maskoff.core.settings import settings
from maskoff.models import Conversation, ConversationMessage

router = APIRouter(prefix="/system", tags=["system", "transparency"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for transparency UIs.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
            "debug": settings.debug,
        },
        "chat": {
            "cipher": "AES-256-CBC+HMAC-SHA256",
            "push_channel": "/api/v1/ws",
            "ws_max_message_bytes": settings.ws_max_message_bytes,
        },
    }


@router.get("/connections")
async def get_connection_stats(registry: RegistryDep) -> dict[str, int]:
    """Return how many users currently hold a live push channel."""
    return {"connected_users": len(registry.connected_subjects())}


@router.get("/chat-stats")
async def get_chat_stats(db: SessionDep) -> dict[str, int]:
    """Return aggregate chat volume without revealing participants or content."""
    return {
        "conversations": int(db.query(Conversation).count() or 0),
        "messages": int(db.query(ConversationMessage).count() or 0),
    }
