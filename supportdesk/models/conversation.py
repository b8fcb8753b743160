"""Conversation API models."""

from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field

from ..db.database_models import ConversationDO, ConversationStatus
from .message import MessageResponse


class ConversationResponse(BaseModel):
    """Response model for conversation information."""

    id: str = Field(description="Conversation ID")
    user_id: str = Field(description="Owner user ID")
    status: ConversationStatus = Field(description="active or resolved")
    requires_human: bool = Field(default=False, description="Waiting for an operator")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last activity timestamp")

    @classmethod
    def from_do(cls, conversation: ConversationDO) -> "ConversationResponse":
        return cls(
            id=conversation.id,
            user_id=conversation.user_id,
            status=conversation.status,
            requires_human=conversation.requires_human,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at
        )


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationResponse] = Field(description="List of conversations")
    total: int = Field(description="Total number of conversations")


class OpenSessionRequest(BaseModel):
    """Request model for opening the support widget."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1, description="Requesting user ID")


class SessionResponse(BaseModel):
    """Response model for an opened support session."""

    conversation: ConversationResponse = Field(description="Active conversation")
    messages: List[MessageResponse] = Field(description="Messages, oldest first")


class OperatorReplyRequest(BaseModel):
    """Request model for an operator reply."""

    model_config = ConfigDict(populate_by_name=True)

    operator_id: str = Field(alias="operatorId", min_length=1, description="Operator user ID")
    message: str = Field(min_length=1, max_length=4000, description="Reply text")


class OperatorReplyResponse(BaseModel):
    """Response model for an operator reply."""

    message: MessageResponse = Field(description="The persisted operator message")
    flag_cleared: bool = Field(description="This reply cleared the escalation flag")
    requires_human: bool = Field(description="Escalation flag after the reply")
