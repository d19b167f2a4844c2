"""Pytest configuration and fixtures."""

import base64
import hashlib
import hmac
import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

CHANNEL_SECRET = "test-channel-secret"


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from pairspace.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def state_store(storage):
    """Create StateStore over in-memory storage."""
    from pairspace.storage import StateStore

    return StateStore(storage)


@pytest.fixture
def tracker(storage):
    """Create Tracker with storage."""
    from pairspace.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def mock_responder():
    """Create mock AI responder."""
    responder = Mock()
    responder.respond = AsyncMock(return_value="Test response")
    return responder


@pytest.fixture
def mock_line_client():
    """Create mock LINE client."""
    client = Mock()
    client.reply_message = AsyncMock(return_value=None)
    return client


@pytest.fixture
def dispatcher(state_store, mock_responder, tracker):
    """Create EventDispatcher for testing."""
    from pairspace.dispatcher import EventDispatcher

    return EventDispatcher(
        state_store=state_store,
        responder=mock_responder,
        tracker=tracker,
    )


def sign(body: bytes, secret: str = CHANNEL_SECRET) -> str:
    """Compute x-line-signature for a body."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def make_body(*events: dict) -> bytes:
    return json.dumps({"destination": "Ubot", "events": list(events)}).encode("utf-8")


def follow_event(user_id: str = "U1", reply_token: str = "rt-follow") -> dict:
    return {
        "type": "follow",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
        "timestamp": 1700000000000,
    }


def postback_event(data: str, user_id: str = "U1", reply_token: str = "rt-postback") -> dict:
    return {
        "type": "postback",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
        "postback": {"data": data},
    }


def text_event(text: str, user_id: str = "U1", reply_token: str = "rt-text") -> dict:
    return {
        "type": "message",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
        "message": {"id": "m1", "type": "text", "text": text},
    }


@pytest_asyncio.fixture
async def application(storage, mock_responder, mock_line_client):
    """Started Application wired to in-memory storage and mocks."""
    from pairspace.app import Application
    from pairspace.config import Settings

    app = Application(
        settings=Settings(line_channel_secret=CHANNEL_SECRET),
        storage=storage,
        responder=mock_responder,
        line_client=mock_line_client,
    )
    await app.start()
    yield app
    await app.stop()
