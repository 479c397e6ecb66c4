"""Registry of live push channels keyed by subject id.

A channel is registered when its client authenticates and removed when the
channel closes. Close events only know the channel, so removal scans the
stored handles instead of looking up a subject id.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Protocol

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

logger = logging.getLogger(__name__)


class ChannelWriteError(RuntimeError):
    """Raised when a push channel rejects a write."""


class PushChannel(Protocol):
    """Addressable push connection to one client process."""

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, payload: dict[str, Any]) -> None: ...


class WebSocketChannel:
    """PushChannel backed by a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, payload: dict[str, Any]) -> None:
        try:
            await self.websocket.send_json(payload)
        except (WebSocketDisconnect, RuntimeError, OSError) as err:
            raise ChannelWriteError(f"Push write failed: {err}") from err

    def __repr__(self) -> str:
        client = self.websocket.client
        peer = f"{client.host}:{client.port}" if client else "unknown"
        return f"WebSocketChannel({peer})"


class ConnectionRegistry(ABC):
    """Maps subject ids to their live push channel.

    Implementations keep at most one channel per subject id; a new
    registration replaces the previous one.
    """

    @abstractmethod
    def register(self, subject_id: str, channel: PushChannel) -> None:
        """Store ``channel`` as the live channel for ``subject_id``."""

    @abstractmethod
    def unregister_by_channel(self, channel: PushChannel) -> str | None:
        """Remove the entry pointing at ``channel`` and return its subject id."""

    @abstractmethod
    def get(self, subject_id: str) -> PushChannel | None:
        """Return the live channel for ``subject_id`` if any."""

    @abstractmethod
    def connected_subjects(self) -> list[str]:
        """Return the subject ids that currently have a channel."""


class InMemoryConnectionRegistry(ConnectionRegistry):
    """Process-local registry.

    Mutated only from the event loop, so no locking is required.
    """

    def __init__(self) -> None:
        self._channels: dict[str, PushChannel] = {}

    def register(self, subject_id: str, channel: PushChannel) -> None:
        previous = self._channels.get(subject_id)
        self._channels[subject_id] = channel
        if previous is not None and previous is not channel:
            logger.info("Replaced push channel for user %s", subject_id)
        else:
            logger.info("User %s authenticated on push channel", subject_id)

    def unregister_by_channel(self, channel: PushChannel) -> str | None:
        for subject_id, stored in self._channels.items():
            if stored is channel:
                del self._channels[subject_id]
                logger.info("Push channel for user %s disconnected", subject_id)
                return subject_id
        return None

    def get(self, subject_id: str) -> PushChannel | None:
        return self._channels.get(subject_id)

    def connected_subjects(self) -> list[str]:
        return list(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

