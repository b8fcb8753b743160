"""WebSocket API for realtime delivery of support messages."""

import asyncio
import json
from typing import Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..errors import ConversationNotFoundError
from ..models import MessageResponse
from ..services import ConversationLifecycleManager, MessageBroadcaster
from ..utils.logger import get_app_logger

router = APIRouter(tags=["websocket"])

# Set by main.py
lifecycle: ConversationLifecycleManager = None
broadcaster: MessageBroadcaster = None
logger = get_app_logger()


def _message_frame(message) -> dict:
    return {
        "type": "message",
        "message": MessageResponse.from_do(message).model_dump(mode="json")
    }


async def _forward_messages(websocket: WebSocket, queue: asyncio.Queue, sent_ids: Set[str]) -> None:
    """Push newly appended messages, skipping ids the client already has."""
    while True:
        message = await queue.get()
        if message.id in sent_ids:
            continue
        sent_ids.add(message.id)
        await websocket.send_json(_message_frame(message))


async def _stop_forwarder(forwarder: asyncio.Task) -> None:
    """Cancel the forwarder and collect its outcome."""
    forwarder.cancel()
    try:
        await forwarder
    except asyncio.CancelledError:
        pass
    except Exception as e:
        # Client left while a message was being sent
        logger.debug(f"Message forwarder stopped with error: {e}")


@router.websocket("/ws/conversations/{conversation_id}")
async def conversation_feed(websocket: WebSocket, conversation_id: str):
    """
    Subscribe to a conversation's messages.

    Sends a ``connected`` frame, a ``history`` frame with every stored
    message, then one ``message`` frame per appended message. Messages are
    deduplicated by id only.

    Args:
        websocket: WebSocket connection
        conversation_id: Conversation to follow
    """
    await websocket.accept()

    try:
        conversation = await lifecycle.get_conversation(conversation_id)
    except ConversationNotFoundError as e:
        await websocket.send_json({"type": "error", "content": str(e)})
        await websocket.close()
        return

    # Subscribe before reading history so nothing appended in between is lost
    queue = broadcaster.subscribe(conversation_id)
    sent_ids: Set[str] = set()
    forwarder = None
    logger.info(f"WebSocket subscribed to conversation: {conversation_id}")

    try:
        await websocket.send_json({
            "type": "connected",
            "conversation_id": conversation_id,
            "status": conversation.status.value,
            "requires_human": conversation.requires_human
        })

        history = await lifecycle.get_messages(conversation_id)
        sent_ids.update(m.id for m in history)
        await websocket.send_json({
            "type": "history",
            "messages": [MessageResponse.from_do(m).model_dump(mode="json") for m in history]
        })

        forwarder = asyncio.create_task(_forward_messages(websocket, queue, sent_ids))

        while True:
            data = await websocket.receive_text()
            try:
                frame = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "content": "Invalid JSON message"})
                continue

            if isinstance(frame, dict) and frame.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
            else:
                await websocket.send_json({"type": "error", "content": "Unknown message type"})

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected from conversation: {conversation_id}")

    finally:
        if forwarder is not None:
            await _stop_forwarder(forwarder)
        broadcaster.unsubscribe(conversation_id, queue)
        logger.info(f"WebSocket connection closed for conversation: {conversation_id}")
