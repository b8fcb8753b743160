"""Database models (Data Objects) - map to database tables."""

from .enums import ConversationStatus, SenderType
from .conversation import ConversationDO
from .message import MessageDO

__all__ = ["ConversationStatus", "SenderType", "ConversationDO", "MessageDO"]
