"""Shared fixtures. Environment is configured before the app is imported."""

import os
import tempfile

_TEST_ROOT = tempfile.mkdtemp(prefix="medblog-tests-")

os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["PATH_DATABASE"] = os.path.join(_TEST_ROOT, "db")
os.environ["NAME_DB"] = "medblog_test.db"
os.environ["PATH_UPLOADS"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["PATH_LOG_FILE"] = os.path.join(_TEST_ROOT, "medblog_test.log")
os.environ["SEED_DEMO_USERS"] = "false"

import pytest
from fastapi.testclient import TestClient

from src.database import SessionLocal, engine
from src.main import app
from src.models import Base

LONG_CONTENT = (
    "Regular monitoring of blood pressure at home helps patients and doctors "
    "notice trends early and adjust treatment before complications appear."
)
SUMMARY = "Practical advice for everyday health and wellbeing."


@pytest.fixture
def client():
    """Test client on a freshly created and seeded database."""
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    """Register a user and return (user, token)."""

    def _register(username, role="doctor", full_name=None, email=None, password="s3cret-pass"):
        response = client.post("/api/auth/register", json={
            "full_name": full_name or f"Dr. {username.title()}",
            "username": username,
            "email": email or f"{username}@clinic.org",
            "password": password,
            "role": role,
        })
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], data["token"]

    return _register


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_post(client):
    """Create a post as the given doctor and return its data."""

    def _create_post(token, title="Healthy Habits", summary=SUMMARY, content=LONG_CONTENT,
                     category_id=1, is_draft=False, files=None):
        response = client.post(
            "/api/blog/posts",
            data={
                "title": title,
                "summary": summary,
                "content": content,
                "category_id": str(category_id),
                "is_draft": "true" if is_draft else "false",
            },
            files=files,
            headers=auth_header(token),
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create_post
