"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Service container wired with a scripted model provider and inline
  notification delivery
- Test client (FastAPI TestClient)
- Authentication helpers
- User and event factories
"""

import json
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from typing import Generator, List, Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers every table)
from app.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from app.core.config import settings
from app.core.security import create_access_token, hash_password
from app.db.base import Base
from app.db.session import get_db
from app.deps import get_container
from app.main import app
from app.models.event import Event, EventParticipant
from app.models.user import ROLE_ADMIN, ROLE_USER, User
from app.services.container import ServiceContainer, build_container
from app.services.notification_service import NotificationMessage, NotificationSink


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# Use SQLite in-memory for fast tests (no PostgreSQL dependency)
# StaticPool keeps the same connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    poolclass=StaticPool,  # Keep connection alive across operations
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# TEST DOUBLES
# ---------------------------------------------------------------------------

class FakeProvider(AIProvider):
    """
    Model backend that answers from a script.

    Queue answers with reply() (a dict is JSON-encoded) or fail(); every
    call pops the next one. An empty script answers "{}".
    """

    provider_type = ProviderType.GEMINI

    def __init__(self):
        self.model = "fake-model"
        self.responses: List[AIResponse] = []
        self.prompts: List[str] = []

    def reply(self, payload) -> "FakeProvider":
        content = payload if isinstance(payload, str) else json.dumps(payload)
        self.responses.append(AIResponse(
            content=content,
            provider=self.provider_type,
            model=self.model,
            usage=TokenUsage(prompt_tokens=40, completion_tokens=20),
            latency_ms=5.0,
        ))
        return self

    def fail(self, error: str = "quota exceeded") -> "FakeProvider":
        self.responses.append(AIResponse(
            content="",
            provider=self.provider_type,
            model=self.model,
            success=False,
            error=error,
        ))
        return self

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ) -> AIResponse:
        self.prompts.append(prompt)
        if self.responses:
            return self.responses.pop(0)
        return AIResponse(content="{}", provider=self.provider_type, model=self.model)


class InlineExecutor(Executor):
    """Runs submitted work immediately so notification effects are visible at once."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class RecordingSink(NotificationSink):
    """Keeps delivered messages in memory; can be told to fail."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.messages: List[NotificationMessage] = []

    def deliver(self, messages: List[NotificationMessage]) -> None:
        if self.error is not None:
            raise self.error
        self.messages.extend(messages)


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# SERVICE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def container(db: Session, fake_provider: FakeProvider) -> Generator[ServiceContainer, None, None]:
    """
    Services wired like production, except:
    - the model is a FakeProvider
    - notifications are written inline through the test session factory
    """
    services = build_container(
        settings,
        session_factory=TestingSessionLocal,
        provider=fake_provider,
        executor=InlineExecutor(),
    )
    yield services
    services.shutdown()


@pytest.fixture(scope="function")
def client(db: Session, container: ServiceContainer) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and test services.

    Overrides get_db and get_container so routes use the fixtures above.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_container] = lambda: container

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------

def create_user(
    db: Session,
    email: str,
    display_name: Optional[str] = None,
    is_active: bool = True,
    role: str = ROLE_USER,
) -> User:
    """Insert a user with password "testpassword"."""
    user = User(
        id=uuid4(),
        email=email,
        hashed_password=hash_password("testpassword"),
        display_name=display_name,
        is_active=is_active,
        role=role,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=str(user.id))}"}


@pytest.fixture
def test_user(db: Session) -> User:
    """
    Create a test user in the database.

    Returns:
        User with email "test@example.com" and password "testpassword"
    """
    return create_user(db, "test@example.com", "Test User")


@pytest.fixture
def ann(db: Session) -> User:
    return create_user(db, "ann@example.com", "Ann Lee")


@pytest.fixture
def bob(db: Session) -> User:
    return create_user(db, "bob@example.com", "Bob Stone")


@pytest.fixture
def admin_user(db: Session) -> User:
    return create_user(db, "admin@example.com", "Site Admin", role=ROLE_ADMIN)


@pytest.fixture
def test_user_token(test_user: User) -> str:
    """
    Create a JWT token for the test user.

    Returns:
        JWT access token string
    """
    return create_access_token(subject=str(test_user.id))


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    """
    Create authorization headers with the test user's token.

    Returns:
        Dict with Authorization header
    """
    return {"Authorization": f"Bearer {test_user_token}"}


# ---------------------------------------------------------------------------
# EVENT FIXTURES
# ---------------------------------------------------------------------------

def create_event(
    db: Session,
    owner: User,
    title: str,
    start_time: datetime,
    end_time: datetime,
    participants: Optional[List[User]] = None,
    description: str = "",
    event_type: str = "work",
) -> Event:
    """Insert an event directly, bypassing EventService (no log, no notifications)."""
    event = Event(
        user_id=owner.id,
        title=title,
        type=event_type,
        start_time=start_time,
        end_time=end_time,
        location="",
        description=description,
    )
    event.participants = [EventParticipant(user_id=u.id) for u in participants or []]
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def utc(*args) -> datetime:
    """datetime(*args) in UTC."""
    return datetime(*args, tzinfo=timezone.utc)
