"""Closed value sets stored in the conversations and messages tables."""

from enum import Enum


class ConversationStatus(str, Enum):
    """Lifecycle status of a support conversation."""

    ACTIVE = "active"
    RESOLVED = "resolved"


class SenderType(str, Enum):
    """Who wrote a support message."""

    USER = "user"
    BOT = "bot"
    OPERATOR = "operator"
