"""Shared fixtures: a fresh DuckDB file per test and the service stack on top of it."""

import asyncio
import pytest

from supportdesk.db import DatabaseConnection, ConversationRepository, MessageRepository
from supportdesk.services import ConversationLifecycleManager, MessageBroadcaster, MessageRouter


class FakeGateway:
    """Stand-in for TextCompletionGateway that records its calls."""

    def __init__(self):
        self.reply = "Happy to help!"
        self.error = None
        self.delay = 0.0
        self.calls = []

    async def complete(self, system_prompt, history, new_message):
        self.calls.append({
            "system_prompt": system_prompt,
            "history": history,
            "new_message": new_message,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self):
        pass


@pytest.fixture
def db_conn(tmp_path):
    """Provide a fresh database connection."""
    db = DatabaseConnection(str(tmp_path / "test.db"))
    yield db
    db.close()


@pytest.fixture
def conversation_repo(db_conn):
    return ConversationRepository(db_conn.conn)


@pytest.fixture
def message_repo(db_conn):
    return MessageRepository(db_conn.conn)


@pytest.fixture
def broadcaster():
    return MessageBroadcaster()


@pytest.fixture
def lifecycle(conversation_repo, message_repo, broadcaster):
    return ConversationLifecycleManager(conversation_repo, message_repo, broadcaster)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def message_router(lifecycle, gateway):
    return MessageRouter(lifecycle, gateway, history_limit=10, gateway_timeout=1.0)
