"""Conversation database model."""

from dataclasses import dataclass, field
from datetime import datetime

from .enums import ConversationStatus


@dataclass
class ConversationDO:
    """Conversation data object - maps to support_conversations table."""

    id: str
    user_id: str
    status: ConversationStatus = ConversationStatus.ACTIVE
    requires_human: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
