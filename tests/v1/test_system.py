"""Tests for system and transparency endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from maskoff.models import UserProfile
from maskoff.services.connections import InMemoryConnectionRegistry
from tests.fakes import FakeChannel


def test_system_config_hides_secrets(client: TestClient) -> None:
    r = client.get("/api/v1/system/config")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert "app" in data and "chat" in data
    assert data["chat"]["push_channel"] == "/api/v1/ws"
    assert "test-chat-secret" not in r.text
    assert "test-jwt-secret" not in r.text


def test_connection_count(client: TestClient, registry: InMemoryConnectionRegistry) -> None:
    r = client.get("/api/v1/system/connections")
    assert r.json() == {"connected_users": 0}

    registry.register("u-alice", FakeChannel())
    registry.register("u-bob", FakeChannel())

    r = client.get("/api/v1/system/connections")
    assert r.json() == {"connected_users": 2}


def test_chat_stats(
    client: TestClient, alice_headers: dict[str, str], bob: UserProfile, carol: UserProfile
) -> None:
    for recipient, text in ((bob, "one"), (bob, "two"), (carol, "three")):
        r = client.post(
            "/api/v1/chats/send",
            json={"recipient_id": recipient.user_id, "text": text},
            headers=alice_headers,
        )
        assert r.status_code == status.HTTP_201_CREATED

    r = client.get("/api/v1/system/chat-stats")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"conversations": 2, "messages": 3}
