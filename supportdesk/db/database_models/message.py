"""Message database model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .enums import SenderType


@dataclass
class MessageDO:
    """Message data object - maps to support_messages table.

    Messages are append-only. ``seq`` is assigned by the database on insert
    and orders messages that share a ``created_at`` value.
    """

    id: str
    conversation_id: str
    sender_type: SenderType
    text: str
    sender_id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    seq: Optional[int] = None
