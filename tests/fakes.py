"""Test doubles shared across the suite."""

from __future__ import annotations

from typing import Any

from maskoff.services.connections import ChannelWriteError


class FakeChannel:
    """In-memory PushChannel recording every payload written to it."""

    def __init__(self, *, is_open: bool = True, fail: bool = False) -> None:
        self.is_open = is_open
        self.fail = fail
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, payload: dict[str, Any]) -> None:
        if self.fail:
            raise ChannelWriteError("socket is gone")
        self.sent.append(payload)
