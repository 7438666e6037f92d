"""Pytest configuration and fixtures."""
import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Point the application at throwaway storage before anything imports settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="formdesk-logs-")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("REDIS_URL", None)

from formdesk.main import app
from formdesk.db.base import Base
from formdesk.db.session import get_db
from formdesk.models.form import Form
from formdesk.models.response import FormResponse


@pytest.fixture
def test_engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_engine):
    """Test client with the get_db dependency pointed at the test engine."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_admin(client, email="owner@example.com", password="secret123", business_name="Acme Coffee"):
    response = client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "business_name": business_name,
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_admin(client)


@pytest.fixture
def other_auth_headers(client):
    return register_admin(client, email="rival@example.com", business_name="Rival Tea")


def sample_form_payload(**overrides):
    payload = {
        "title": "Customer feedback",
        "description": "Tell us how we did",
        "questions": [
            {"text": "What did you like?", "type": "text", "required": True},
            {"text": "How was the service?", "type": "single-choice",
             "options": ["Great", "Okay", "Poor"], "required": False},
        ],
        "settings": {"allow_multiple_responses": False, "require_email": False, "theme": "light"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def created_form(client, auth_headers):
    response = client.post("/api/forms", json=sample_form_payload(), headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["form"]


def make_form(questions, is_active=True, allow_multiple_responses=False, require_email=False, form_id=1):
    """Transient Form for exercising the services without a database."""
    return Form(
        id=form_id,
        title="Survey",
        creator_id=1,
        questions=questions,
        is_active=is_active,
        allow_multiple_responses=allow_multiple_responses,
        require_email=require_email,
        theme="light",
    )


def make_response(answers, response_id=1, **fields):
    """Transient FormResponse; answers is a list of (question_id, text, type, value)."""
    return FormResponse(
        id=response_id,
        form_id=1,
        answers=[
            {"question_id": qid, "question_text": text, "question_type": qtype, "answer": value}
            for qid, text, qtype, value in answers
        ],
        **fields,
    )
