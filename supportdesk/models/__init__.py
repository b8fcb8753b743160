"""Pydantic models for API request/response."""

from .conversation import (
    ConversationResponse,
    ConversationListResponse,
    OpenSessionRequest,
    SessionResponse,
    OperatorReplyRequest,
    OperatorReplyResponse,
)
from .message import (
    MessageResponse,
    ConversationMessagesResponse,
    InboundMessageRequest,
    ChatResponse,
    ErrorResponse,
)

__all__ = [
    "ConversationResponse",
    "ConversationListResponse",
    "OpenSessionRequest",
    "SessionResponse",
    "OperatorReplyRequest",
    "OperatorReplyResponse",
    "MessageResponse",
    "ConversationMessagesResponse",
    "InboundMessageRequest",
    "ChatResponse",
    "ErrorResponse",
]
