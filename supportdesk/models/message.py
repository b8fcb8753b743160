"""Message and chat API models."""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..db.database_models import MessageDO, SenderType


class MessageResponse(BaseModel):
    """Response model for a single support message."""

    id: str = Field(description="Message ID")
    conversation_id: str = Field(description="Conversation ID")
    sender_type: SenderType = Field(description="Message sender: user, bot or operator")
    sender_id: Optional[str] = Field(None, description="Sender user ID (null for bot messages)")
    text: str = Field(description="Message content")
    created_at: datetime = Field(description="Message timestamp")

    @classmethod
    def from_do(cls, message: MessageDO) -> "MessageResponse":
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender_type=message.sender_type,
            sender_id=message.sender_id,
            text=message.text,
            created_at=message.created_at
        )


class ConversationMessagesResponse(BaseModel):
    """Response model for conversation messages."""

    conversation_id: str = Field(description="Conversation ID")
    messages: List[MessageResponse] = Field(description="Messages, oldest first")
    total: int = Field(description="Number of messages in the conversation")


class InboundMessageRequest(BaseModel):
    """Request model for the inbound chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field(alias="conversationId", min_length=1, description="Conversation ID")
    user_id: str = Field(alias="userId", min_length=1, description="Sending user ID")
    message: Optional[str] = Field(default="", max_length=4000, description="Message text")
    forward_to_admin: bool = Field(default=False, alias="forwardToAdmin", description="Forward to a human operator")

    @model_validator(mode="after")
    def require_text_unless_forward(self):
        if not self.forward_to_admin and not (self.message or "").strip():
            raise ValueError("message is required unless forwardToAdmin is set")
        return self


class ChatResponse(BaseModel):
    """Response model for the inbound chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    response: str = Field(description="Bot reply text")
    forwarded_to_admin: bool = Field(default=False, alias="forwardedToAdmin", description="Conversation was escalated")
    message_id: str = Field(alias="messageId", description="ID of the persisted bot message")
    created_at: datetime = Field(alias="createdAt", description="Bot message timestamp")
    user_message_id: Optional[str] = Field(None, alias="userMessageId", description="ID of the persisted user message")


class ErrorResponse(BaseModel):
    """Error body returned by the chat endpoints."""

    error: str = Field(description="Error message")
