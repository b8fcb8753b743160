"""Services package."""

from .broadcaster import MessageBroadcaster
from .escalation_policy import Decision, decide
from .gateway import TextCompletionGateway
from .lifecycle import ConversationLifecycleManager
from .message_router import MessageRouter, RouterReply, OperatorReply, SessionResult

__all__ = [
    "MessageBroadcaster",
    "Decision",
    "decide",
    "TextCompletionGateway",
    "ConversationLifecycleManager",
    "MessageRouter",
    "RouterReply",
    "OperatorReply",
    "SessionResult",
]
