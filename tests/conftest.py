"""Pytest configuration and fixtures."""

import os

# Cheap hashes for the test run; must be set before app.config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models.user import User  # noqa: F401
from app.schemas.user import RegisterRequest
from app.services.mailer import Mailer, get_mailer
from app.services.user import UserService


class RecordingMailer(Mailer):
    """Keeps sent reset links in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send_reset_link(self, to_address: str, reset_url: str) -> None:
        self.sent.append((to_address, reset_url))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1].rsplit("/", 1)[-1]


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mailer")
def mailer_fixture() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(name="client")
def client_fixture(db_session: Session, mailer: RecordingMailer):
    """Create a test client with overridden DB and mailer dependencies and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a test user and return (user_data, token)."""
    from app.services.jwt import get_jwt_service

    user = UserService().register(
        db_session,
        RegisterRequest(name="Test User", email="test@example.com", password="password123"),
    )
    token = get_jwt_service().create_token(user.id)

    return {
        "user_id": user.id,
        "email": user.email,
        "name": user.name,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }
