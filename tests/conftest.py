import os

# Set testing flags before importing the app (rate limiter, cache, security)
os.environ["TESTING"] = "true"
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ALGORITHM", "HS256")

# TEST DATABASE CONFIGURATION

# In-memory SQLite by default; point TEST_DATABASE_URL at Postgres to test against it
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import db_models
from db_config import Base, get_db
from main import app
from services.users import create_or_promote_admin

connect_args = (
    {"check_same_thread": False} if TEST_DATABASE_URL.startswith("sqlite") else {}
)

test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args=connect_args,
    poolclass=StaticPool,
)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# DATABASE FIXTURES
@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Creates all tables before test, drops them after test.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test (clean slate for next test)
        Base.metadata.drop_all(bind=test_engine)


# CLIENT FIXTURE
@pytest.fixture(scope="function")
def client(db_session):
    """
    Creates a test client with overridden database dependency.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# AUTHENTICATION FIXTURES
@pytest.fixture(scope="function")
def create_user_and_token(client):
    """
    Factory fixture that registers a user and returns their token.
    Can be called multiple times to create multiple users.
    """

    def _create_user(username: str, email: str, password: str):
        client.post(
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )

        login_response = client.post(
            "/auth/login", json={"username": username, "password": password}
        )

        return login_response.json()["access_token"]

    return _create_user


@pytest.fixture(scope="function")
def user_headers(create_user_and_token):
    """Authorization headers of a regular user (ROLE_USER)"""
    token = create_user_and_token("regularuser", "regular@guestbook.fr", "password123")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def admin_headers(client, db_session):
    """Authorization headers of an administrator (ROLE_USER + ROLE_ADMIN)"""
    create_or_promote_admin(
        db_session, "adminuser", email="admin@guestbook.fr", password="adminpass123"
    )

    login_response = client.post(
        "/auth/login", json={"username": "adminuser", "password": "adminpass123"}
    )
    assert login_response.status_code == 200

    return {"Authorization": f"Bearer {login_response.json()['access_token']}"}


# DATA FIXTURES
@pytest.fixture(scope="function")
def conference(db_session):
    conference = db_models.Conference(city="Amsterdam", year="2019", is_international=True)
    db_session.add(conference)
    db_session.commit()
    db_session.refresh(conference)
    return conference


@pytest.fixture(scope="function")
def comment_data(conference):
    """Valid payload for POST /api/commentaires"""
    return {
        "author": "Alice123",
        "text": "What a great conference, see you next year!",
        "email": "alice@guestbook.fr",
        "note": 4,
        "conference": f"/api/conferences/{conference.id}",
    }
