"""Pytest fixtures for API testing."""

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from supportdesk.api import websocket
from supportdesk.api.v1 import support, operator


@pytest.fixture
def test_app(message_router, lifecycle, broadcaster):
    """FastAPI app wired to the per-test service stack, without lifespan."""
    # Inject dependencies into routers
    support.message_router = message_router
    operator.message_router = message_router
    websocket.lifecycle = lifecycle
    websocket.broadcaster = broadcaster

    app = FastAPI(title="Support Desk Test")
    app.include_router(support.router)
    app.include_router(operator.router)
    app.include_router(websocket.router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "Support Desk"}

    yield app

    support.message_router = None
    operator.message_router = None
    websocket.lifecycle = None
    websocket.broadcaster = None


@pytest.fixture
async def client(test_app):
    """Async HTTP client against the test app."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def conversation_id(client):
    """Open a support session for user u1 and return its conversation id."""
    response = await client.post("/api/v1/support/sessions", json={"userId": "u1"})
    return response.json()["conversation"]["id"]
