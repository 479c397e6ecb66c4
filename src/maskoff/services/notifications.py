"""Best-effort fan-out of update hints to connected users."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from maskoff.schemas.events import PushEvent
from maskoff.services.connections import ChannelWriteError, ConnectionRegistry

logger = logging.getLogger(__name__)


class NotificationFanout:
    """Pushes an event to every listed subject that has an open channel.

    Offline subjects are skipped and failed writes are logged, never raised:
    the event only tells the client to re-fetch, so a missed hint is repaired
    by the client's next REST read.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def notify(self, subject_ids: Iterable[str], event: PushEvent) -> int:
        """Send ``event`` to each subject's channel.

        Args:
            subject_ids: Recipients; duplicates are notified once
            event: Update hint to deliver

        Returns:
            Number of channels the event was written to
        """
        payload = event.to_payload()
        delivered = 0
        for subject_id in dict.fromkeys(subject_ids):
            channel = self.registry.get(subject_id)
            if channel is None or not channel.is_open:
                logger.debug("Dropping %s hint for offline user %s", event.update, subject_id)
                continue
            try:
                await channel.send_json(payload)
            except ChannelWriteError as err:
                logger.warning("Push to user %s failed: %s", subject_id, err)
                continue
            delivered += 1
        return delivered
