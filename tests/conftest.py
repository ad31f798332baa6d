"""Test bootstrap.

The app reads DATABASE_URL at import time, so point it at a shared in-memory
SQLite database (StaticPool, see survey_intel.db.session) before importing
anything from survey_intel. The schema is rebuilt around every test.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AI_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from survey_intel.ai.client import get_ai_client
from survey_intel.db.base import Base
from survey_intel.db.session import SessionLocal, engine
from survey_intel.main import app


class FakeAI:
    """Stands in for OllamaClient: returns a canned reply or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def use_ai():
    """Install a fake AI backend for the request dependency."""
    def install(fake):
        app.dependency_overrides[get_ai_client] = lambda: fake
        return fake
    return install


@pytest.fixture
def login(client):
    """Register (if needed) and log in; returns Authorization headers."""
    def _login(username="alice", password="s3cret"):
        client.post("/api/register", json={"username": username, "password": password})
        r = client.post("/api/login", data={"username": username, "password": password})
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}
    return _login


def _survey_payload(title="Coffee habits", **overrides):
    payload = {
        "title": title,
        "description": "How people take their coffee",
        "isPublic": True,
        "questions": [
            # deliberately out of order; storage sorts by order
            {"text": "Rate our coffee", "type": "rating", "order": 1, "required": True},
            {"text": "Favourite brew", "type": "multiple_choice", "options": ["A", "B", "C"], "order": 0, "required": True},
            {"text": "Which extras", "type": "checkbox", "options": ["Milk", "Sugar"], "order": 2},
            {"text": "Anything else", "type": "text", "order": 3},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_survey(client):
    def _make(headers, **overrides):
        r = client.post("/api/surveys", json=_survey_payload(**overrides), headers=headers)
        assert r.status_code == 201, r.text
        return r.json()
    return _make


@pytest.fixture
def survey_payload():
    return _survey_payload


@pytest.fixture
def fake_ai():
    return FakeAI
