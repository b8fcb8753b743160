"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .config import settings
from .db import DatabaseConnection, ConversationRepository, MessageRepository
from .services import (
    ConversationLifecycleManager,
    MessageBroadcaster,
    MessageRouter,
    TextCompletionGateway,
)
from .utils.logger import init_app_logger, mask_secret
from .api.v1 import support, operator
from .api import websocket


# Initialize logger
logger = init_app_logger(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    # Startup
    logger.info("=" * 70)
    logger.info("Starting Support Desk...")
    logger.info("=" * 70)

    logger.info("")
    logger.info("📡 Server Configuration:")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Log Level: {settings.log_level}")
    logger.info(f"  Log File: {settings.log_file}")
    logger.info(f"  Database: {settings.database_path}")

    logger.info("")
    logger.info("🤖 Gateway Configuration:")
    logger.info(f"  Base URL: {settings.gateway_base_url}")
    logger.info(f"  Model: {settings.gateway_model}")
    logger.info(f"  Timeout: {settings.gateway_timeout}s")
    logger.info(f"  API Key: {mask_secret(settings.gateway_api_key)}")
    if not settings.gateway_api_key:
        logger.warning("  Gateway API key not set, automated replies will be unavailable")

    logger.info("")
    logger.info("🧭 Router Configuration:")
    logger.info(f"  History Limit: {settings.history_limit}")
    logger.info(f"  Escalation Keywords: {', '.join(settings.get_escalation_keywords())}")

    db_conn = DatabaseConnection(settings.database_path)
    conversations = ConversationRepository(db_conn.conn)
    messages = MessageRepository(db_conn.conn)

    broadcaster = MessageBroadcaster()
    lifecycle = ConversationLifecycleManager(conversations, messages, broadcaster)
    gateway = TextCompletionGateway(
        base_url=settings.gateway_base_url,
        api_key=settings.gateway_api_key,
        model=settings.gateway_model,
        timeout=settings.gateway_timeout
    )
    message_router = MessageRouter(
        lifecycle,
        gateway,
        history_limit=settings.history_limit,
        gateway_timeout=settings.gateway_timeout,
        escalation_keywords=settings.get_escalation_keywords()
    )

    # Inject dependencies into routers
    support.message_router = message_router
    operator.message_router = message_router
    websocket.lifecycle = lifecycle
    websocket.broadcaster = broadcaster

    logger.info("")
    logger.info("=" * 70)
    logger.info("✅ Support Desk started successfully!")
    logger.info(f"📍 Access at: http://{settings.host}:{settings.port}")
    logger.info(f"📚 API Docs: http://{settings.host}:{settings.port}/docs")
    logger.info("=" * 70)

    yield

    # Shutdown
    logger.info("Shutting down Support Desk...")
    await gateway.aclose()
    db_conn.close()
    logger.info("✅ Support Desk shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="Support Desk",
    description="Support chat with automated replies and escalation to human operators",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(support.router)
app.include_router(operator.router)
app.include_router(websocket.router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "Support Desk"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "supportdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
