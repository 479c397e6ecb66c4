"""WebSocket push channel delivering update hints."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from maskoff.api.v1.dependencies import RegistryDep, SessionFactoryDep
from maskoff.core.security import InvalidTokenError, decode_subject
from maskoff.core.settings import settings
from maskoff.models import UserProfile
from maskoff.services.connections import WebSocketChannel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["push"])

AUTH = "AUTH"


def _authenticate(frame: dict[str, Any], session_factory: Callable[[], Session]) -> str | None:
    """Return the subject id proven by an AUTH frame, or None.

    The profile lookup uses its own session, closed before returning, so an
    idle channel holds no database connection.
    """
    token = frame.get("token")
    if not isinstance(token, str) or not token:
        return None
    try:
        subject_id = decode_subject(token)
    except InvalidTokenError:
        return None
    with session_factory() as db:
        profile = db.get(UserProfile, subject_id)
    if profile is None:
        return None
    return subject_id


@router.websocket("/ws")
async def push_channel(
    websocket: WebSocket, registry: RegistryDep, session_factory: SessionFactoryDep
) -> None:
    """Register the connection under its authenticated subject and keep it open.

    The client sends ``{"type": "AUTH", "token": "<jwt>"}``; afterwards the
    server only writes ``UPDATE_DATA`` hints. Other frames are ignored.
    """
    await websocket.accept()
    channel = WebSocketChannel(websocket)
    subject_id: str | None = None
    try:
        while True:
            raw = await websocket.receive_text()
            if len(raw) > settings.ws_max_message_bytes:
                logger.warning("Ignoring oversized push channel frame (%d bytes)", len(raw))
                continue
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError as err:
                logger.warning("Error parsing push channel frame: %s", err)
                continue
            if not isinstance(frame, dict) or frame.get("type") != AUTH:
                continue

            authenticated = _authenticate(frame, session_factory)
            if authenticated is None:
                await websocket.send_json(
                    {"type": "AUTH_ERROR", "detail": "Could not validate credentials"}
                )
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return

            if subject_id is not None and subject_id != authenticated:
                registry.unregister_by_channel(channel)
            subject_id = authenticated
            registry.register(subject_id, channel)
            await websocket.send_json({"type": "AUTH_OK", "userID": subject_id})
    except WebSocketDisconnect:
        logger.debug("Push channel %r closed by client", channel)
    finally:
        registry.unregister_by_channel(channel)
