"""Support widget API integration tests."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from supportdesk.api.v1 import support
from supportdesk.errors import GatewayRateLimitedError, GatewayUnavailableError, StorageWriteError
from supportdesk.services.prompts import (
    ESCALATION_ACKNOWLEDGEMENT,
    FALLBACK_APOLOGY,
    FORWARD_ACKNOWLEDGEMENT,
    RATE_LIMITED_NOTICE,
    UNAVAILABLE_NOTICE,
    WELCOME_MESSAGE,
)


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestOpenSession:
    """POST /api/v1/support/sessions"""

    async def test_creates_conversation_with_welcome(self, client: AsyncClient):
        response = await client.post("/api/v1/support/sessions", json={"userId": "u1"})
        assert response.status_code == 200
        data = response.json()
        assert data["conversation"]["user_id"] == "u1"
        assert data["conversation"]["status"] == "active"
        assert data["conversation"]["requires_human"] is False
        assert len(data["messages"]) == 1
        assert data["messages"][0]["sender_type"] == "bot"
        assert data["messages"][0]["text"] == WELCOME_MESSAGE

    async def test_reopen_returns_same_conversation(self, client: AsyncClient):
        first = await client.post("/api/v1/support/sessions", json={"userId": "u1"})
        second = await client.post("/api/v1/support/sessions", json={"user_id": "u1"})
        assert first.json()["conversation"]["id"] == second.json()["conversation"]["id"]
        assert len(second.json()["messages"]) == 1

    async def test_missing_user(self, client: AsyncClient):
        response = await client.post("/api/v1/support/sessions", json={})
        assert response.status_code == 422

    async def test_storage_failure(self, client: AsyncClient, message_repo, monkeypatch):
        def failing_add(message):
            raise StorageWriteError("disk full")

        monkeypatch.setattr(message_repo, "add", failing_add)

        response = await client.post("/api/v1/support/sessions", json={"userId": "u1"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to start support chat."}


class TestChat:
    """POST /api/v1/support/chat"""

    async def test_auto_reply(self, client: AsyncClient, gateway, conversation_id):
        gateway.reply = "Send mobile money to +256740327473."
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "How do I deposit funds?"
        })
        assert response.status_code == 200
        data = response.json()
        assert data["response"] == gateway.reply
        assert data["forwardedToAdmin"] is False
        assert data["messageId"]
        assert data["userMessageId"]

    async def test_keyword_escalation(self, client: AsyncClient, conversation_id):
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "I want to talk to a manager"
        })
        data = response.json()
        assert data["forwardedToAdmin"] is True
        assert data["response"] == ESCALATION_ACKNOWLEDGEMENT

        conv = await client.get(f"/api/v1/operator/conversations/{conversation_id}")
        assert conv.json()["requires_human"] is True

    async def test_forward_without_text(self, client: AsyncClient, conversation_id):
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "forwardToAdmin": True
        })
        assert response.status_code == 200
        data = response.json()
        assert data["forwardedToAdmin"] is True
        assert data["response"] == FORWARD_ACKNOWLEDGEMENT
        assert data["userMessageId"] is None

    async def test_gateway_failure_fallback(self, client: AsyncClient, gateway, conversation_id):
        from supportdesk.errors import GatewayError

        gateway.error = GatewayError("boom")
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "hello"
        })
        assert response.status_code == 200
        assert response.json()["response"] == FALLBACK_APOLOGY

    @pytest.mark.parametrize("error, status, body", [
        (GatewayRateLimitedError("busy"), 429, RATE_LIMITED_NOTICE),
        (GatewayUnavailableError("down"), 503, UNAVAILABLE_NOTICE),
    ])
    async def test_gateway_capacity_errors(self, client: AsyncClient, gateway, conversation_id, error, status, body):
        gateway.error = error
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "hello"
        })
        assert response.status_code == status
        assert response.json() == {"error": body}

    async def test_unknown_conversation(self, client: AsyncClient):
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": "missing",
            "userId": "u1",
            "message": "hello"
        })
        assert response.status_code == 404
        assert "missing" in response.json()["error"]

    @pytest.mark.parametrize("message", ["", "   "])
    async def test_empty_message_rejected(self, client: AsyncClient, conversation_id, message):
        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": message
        })
        assert response.status_code == 422

    async def test_storage_failure(self, client: AsyncClient, message_repo, conversation_id, monkeypatch):
        def failing_add(message):
            raise StorageWriteError("disk full")

        monkeypatch.setattr(message_repo, "add", failing_add)

        response = await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "hello"
        })
        assert response.status_code == 500
        assert "error" in response.json()


class TestConversationMessages:
    """GET /api/v1/support/conversations/{id}/messages"""

    async def test_list_messages(self, client: AsyncClient, conversation_id):
        await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "hello"
        })

        response = await client.get(f"/api/v1/support/conversations/{conversation_id}/messages")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [m["sender_type"] for m in data["messages"]] == ["bot", "user", "bot"]

    async def test_limit(self, client: AsyncClient, conversation_id):
        """The limit caps the returned messages; total counts the whole conversation."""
        await client.post("/api/v1/support/chat", json={
            "conversationId": conversation_id,
            "userId": "u1",
            "message": "hello"
        })

        response = await client.get(
            f"/api/v1/support/conversations/{conversation_id}/messages",
            params={"limit": 1}
        )
        data = response.json()
        assert len(data["messages"]) == 1
        assert data["messages"][0]["sender_type"] == "bot"
        assert data["total"] == 3

    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/v1/support/conversations/missing/messages")
        assert response.status_code == 404
        assert response.json() == {"error": "Conversation not found: missing"}


class TestNotInitialized:
    async def test_router_missing(self):
        """Endpoints fail with 500 before the message router is injected."""
        support.message_router = None
        app = FastAPI()
        app.include_router(support.router)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.post("/api/v1/support/sessions", json={"userId": "u1"})
        assert response.status_code == 500
