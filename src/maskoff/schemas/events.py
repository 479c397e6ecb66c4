"""Push events sent to clients over the WebSocket channel.

Each event is an update hint: it names the resource kind that changed and
carries no data. Clients re-fetch the resource over REST when they get one.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

UPDATE_DATA = "UPDATE_DATA"


class _UpdateHint(BaseModel):
    type: Literal["UPDATE_DATA"] = UPDATE_DATA

    model_config = ConfigDict(frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready wire representation."""
        return self.model_dump(mode="json")


class ChatsUpdated(_UpdateHint):
    """Conversations or their messages changed."""

    update: Literal["chats"] = "chats"


class FriendsUpdated(_UpdateHint):
    """Friend list or friend requests changed."""

    update: Literal["friends"] = "friends"


class PostsUpdated(_UpdateHint):
    """Feed posts changed."""

    update: Literal["posts"] = "posts"


class JobsUpdated(_UpdateHint):
    """Job postings or applications changed."""

    update: Literal["jobs"] = "jobs"


PushEvent = Annotated[
    ChatsUpdated | FriendsUpdated | PostsUpdated | JobsUpdated,
    Field(discriminator="update"),
]

push_event_adapter: TypeAdapter[PushEvent] = TypeAdapter(PushEvent)


def parse_push_event(payload: dict[str, Any]) -> PushEvent:
    """Validate a wire payload into its event variant."""
    return push_event_adapter.validate_python(payload)
