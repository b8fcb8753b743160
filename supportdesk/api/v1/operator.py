"""Operator console REST API routes - V1."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ..responses import error_response
from ...db.database_models import ConversationStatus
from ...errors import ConversationNotFoundError, StorageWriteError
from ...models import (
    ConversationListResponse,
    ConversationResponse,
    ErrorResponse,
    MessageResponse,
    OperatorReplyRequest,
    OperatorReplyResponse,
)
from ...services import MessageRouter

router = APIRouter(prefix="/api/v1/operator", tags=["Operator"])

# Message router (set by main.py)
message_router: MessageRouter = None


def get_message_router() -> MessageRouter:
    """Dependency to get the message router."""
    if message_router is None:
        raise HTTPException(status_code=500, detail="Message router not initialized")
    return message_router


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(
    status: Optional[ConversationStatus] = Query(None, description="Filter by status"),
    mr: MessageRouter = Depends(get_message_router)
):
    """Operator queue: conversations needing a human first, then most recently active."""
    conversations = await mr.lifecycle.list_operator_queue(status)

    return ConversationListResponse(
        conversations=[ConversationResponse.from_do(c) for c in conversations],
        total=len(conversations)
    )


@router.get("/users/{user_id}/conversations", response_model=ConversationListResponse)
async def list_user_conversations(
    user_id: str,
    mr: MessageRouter = Depends(get_message_router)
):
    """A user's support history, newest conversation first."""
    conversations = await mr.lifecycle.list_user_conversations(user_id)

    return ConversationListResponse(
        conversations=[ConversationResponse.from_do(c) for c in conversations],
        total=len(conversations)
    )


@router.get(
    "/conversations/{conversation_id}",
    response_model=ConversationResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_conversation(
    conversation_id: str,
    mr: MessageRouter = Depends(get_message_router)
):
    """Get conversation details."""
    try:
        conversation = await mr.lifecycle.get_conversation(conversation_id)
    except ConversationNotFoundError as e:
        return error_response(404, str(e))

    return ConversationResponse.from_do(conversation)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=OperatorReplyResponse,
    status_code=201,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    }
)
async def reply_to_conversation(
    conversation_id: str,
    request: OperatorReplyRequest,
    mr: MessageRouter = Depends(get_message_router)
):
    """Send an operator reply; clears the escalation flag."""
    try:
        reply = await mr.reply_as_operator(conversation_id, request.operator_id, request.message)
    except ConversationNotFoundError as e:
        return error_response(404, str(e))
    except StorageWriteError:
        return error_response(500, "Failed to send message")
    except ValueError as e:
        return error_response(400, str(e))

    return OperatorReplyResponse(
        message=MessageResponse.from_do(reply.message),
        flag_cleared=reply.flag_cleared,
        requires_human=reply.requires_human
    )


@router.post(
    "/conversations/{conversation_id}/resolve",
    response_model=ConversationResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def resolve_conversation(
    conversation_id: str,
    mr: MessageRouter = Depends(get_message_router)
):
    """Mark a conversation as resolved."""
    try:
        conversation = await mr.resolve(conversation_id)
    except ConversationNotFoundError as e:
        return error_response(404, str(e))
    except StorageWriteError:
        return error_response(500, "Failed to resolve conversation")

    return ConversationResponse.from_do(conversation)
