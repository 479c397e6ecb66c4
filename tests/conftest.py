# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("CHAT_SECRET_KEY", "test-chat-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from maskoff.api.v1.dependencies import get_session_factory
from maskoff.core.security import create_access_token
from maskoff.db.session import Base
from maskoff.db.session import get_db as app_get_session
from maskoff.main import app as fastapi_app
from maskoff.models import UserProfile
from maskoff.services.chat_service import ConversationService
from maskoff.services.chat_store import ConversationStore
from maskoff.services.cipher import MessageCipher
from maskoff.services.connections import InMemoryConnectionRegistry
from maskoff.services.notifications import NotificationFanout

TEST_DB_URL = "sqlite://"
TEST_CHAT_SECRET = "test-chat-secret"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    @contextmanager
    def _session_scope() -> Iterator[Session]:
        yield db_session

    def _get_session_factory_override() -> Callable[[], object]:
        return _session_scope

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_session_factory] = _get_session_factory_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture(autouse=True)
def registry(app: FastAPI) -> Iterator[InMemoryConnectionRegistry]:
    """Give every test an empty connection registry."""
    previous = app.state.connection_registry
    fresh = InMemoryConnectionRegistry()
    app.state.connection_registry = fresh
    try:
        yield fresh
    finally:
        app.state.connection_registry = previous


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def cipher() -> MessageCipher:
    return MessageCipher(TEST_CHAT_SECRET)


@pytest.fixture()
def store(db_session: Session, cipher: MessageCipher) -> ConversationStore:
    return ConversationStore(db_session, cipher)


@pytest.fixture()
def fanout(registry: InMemoryConnectionRegistry) -> NotificationFanout:
    return NotificationFanout(registry)


@pytest.fixture()
def service(store: ConversationStore, fanout: NotificationFanout) -> ConversationService:
    return ConversationService(store, fanout)


def _make_profile(db_session: Session, user_id: str, username: str, display_name: str | None) -> UserProfile:
    profile = UserProfile(user_id=user_id, username=username, display_name=display_name)
    db_session.add(profile)
    db_session.flush()
    db_session.refresh(profile)
    return profile


@pytest.fixture()
def alice(db_session: Session) -> UserProfile:
    """Primary test user."""
    return _make_profile(db_session, "u-alice", "alice", "Alice Anders")


@pytest.fixture()
def bob(db_session: Session) -> UserProfile:
    """Secondary test user."""
    return _make_profile(db_session, "u-bob", "bob", None)


@pytest.fixture()
def carol(db_session: Session) -> UserProfile:
    """Third user who takes part in none of the fixtures' conversations."""
    return _make_profile(db_session, "u-carol", "carol", "Carol")


def auth_headers(user: UserProfile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.user_id)}"}


@pytest.fixture()
def alice_headers(alice: UserProfile) -> dict[str, str]:
    return auth_headers(alice)


@pytest.fixture()
def bob_headers(bob: UserProfile) -> dict[str, str]:
    return auth_headers(bob)


@pytest.fixture()
def carol_headers(carol: UserProfile) -> dict[str, str]:
    return auth_headers(carol)
