"""Support chat REST API routes - V1 (user widget)."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ..responses import error_response
from ...errors import (
    ConversationNotFoundError,
    GatewayRateLimitedError,
    GatewayUnavailableError,
    StorageWriteError,
)
from ...models import (
    ChatResponse,
    ConversationMessagesResponse,
    ConversationResponse,
    ErrorResponse,
    InboundMessageRequest,
    MessageResponse,
    OpenSessionRequest,
    SessionResponse,
)
from ...services import MessageRouter
from ...services.prompts import RATE_LIMITED_NOTICE, UNAVAILABLE_NOTICE
from ...utils.logger import get_app_logger

router = APIRouter(prefix="/api/v1/support", tags=["Support"])

# Message router (set by main.py)
message_router: MessageRouter = None

logger = get_app_logger()


def get_message_router() -> MessageRouter:
    """Dependency to get the message router."""
    if message_router is None:
        raise HTTPException(status_code=500, detail="Message router not initialized")
    return message_router


@router.post(
    "/sessions",
    response_model=SessionResponse,
    responses={500: {"model": ErrorResponse}}
)
async def open_session(
    request: OpenSessionRequest,
    mr: MessageRouter = Depends(get_message_router)
):
    """Open the support widget: reuse the active conversation or start one."""
    try:
        session = await mr.open_session(request.user_id)
    except StorageWriteError as e:
        logger.error(f"Failed to start support chat for user {request.user_id}: {e}")
        return error_response(500, "Failed to start support chat.")

    return SessionResponse(
        conversation=ConversationResponse.from_do(session.conversation),
        messages=[MessageResponse.from_do(m) for m in session.messages]
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    }
)
async def chat(
    request: InboundMessageRequest,
    mr: MessageRouter = Depends(get_message_router)
):
    """Inbound message endpoint: escalate or answer with a generated reply."""
    try:
        reply = await mr.handle_inbound_message(
            conversation_id=request.conversation_id,
            user_id=request.user_id,
            text=request.message,
            explicit_forward=request.forward_to_admin
        )
    except ConversationNotFoundError as e:
        return error_response(404, str(e))
    except GatewayRateLimitedError:
        return error_response(429, RATE_LIMITED_NOTICE)
    except GatewayUnavailableError:
        return error_response(503, UNAVAILABLE_NOTICE)
    except StorageWriteError as e:
        logger.error(f"Support chat storage failure on {request.conversation_id}: {e}")
        return error_response(500, "Failed to send message.")
    except ValueError as e:
        return error_response(400, str(e))

    return ChatResponse(
        response=reply.response,
        forwarded_to_admin=reply.forwarded_to_admin,
        message_id=reply.message.id,
        created_at=reply.message.created_at,
        user_message_id=reply.user_message.id if reply.user_message else None
    )


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=ConversationMessagesResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_conversation_messages(
    conversation_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    mr: MessageRouter = Depends(get_message_router)
):
    """Get messages from a conversation, oldest first."""
    try:
        messages = await mr.lifecycle.get_messages(conversation_id, limit=limit)
        total = await mr.lifecycle.count_messages(conversation_id)
    except ConversationNotFoundError as e:
        return error_response(404, str(e))

    return ConversationMessagesResponse(
        conversation_id=conversation_id,
        messages=[MessageResponse.from_do(m) for m in messages],
        total=total
    )
