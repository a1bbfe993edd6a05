"""Pytest configuration and fixtures."""

import os

# Must be set before app.* is imported: Settings and the engine are module level.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["WHATSAPP_VERIFY_TOKEN"] = "test-verify-token"
os.environ["CLAUDE_API_KEY"] = "test-claude-key"

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db import models_registry  # noqa: F401
from app.db.session import get_db
from app.main import app
from app.schemas.responder import AIResponse
from app.schemas.whatsapp import WhatsAppSendResponse
from app.services.responder_service import get_responder
from app.services.whatsapp_service import get_whatsapp_client

from tests.payloads import AI_REPLY, OUTBOUND_WA_ID


@pytest.fixture
def engine():
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
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def whatsapp():
    """Channel gateway double: every send is accepted."""
    client = MagicMock()
    client.send_text.return_value = WhatsAppSendResponse.model_validate({
        "messaging_product": "whatsapp",
        "contacts": [{"input": "51987654321", "wa_id": "51987654321"}],
        "messages": [{"id": OUTBOUND_WA_ID}],
    })
    return client


@pytest.fixture
def responder():
    """Responder double returning a fixed reply."""
    r = MagicMock()
    r.generate_with_products.return_value = AIResponse(
        content=AI_REPLY,
        model="claude-test",
        tokens_used=42,
        finish_reason="end_turn",
    )
    return r


@pytest.fixture
def client(db, whatsapp, responder):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_whatsapp_client] = lambda: whatsapp
    app.dependency_overrides[get_responder] = lambda: responder

    yield TestClient(app)

    app.dependency_overrides.clear()
