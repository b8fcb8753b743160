"""Message router - one call per inbound support message."""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..db.database_models import ConversationDO, MessageDO, SenderType
from ..errors import (
    GatewayError,
    GatewayRateLimitedError,
    GatewayUnavailableError,
    StorageWriteError,
)
from ..utils.logger import get_app_logger
from .escalation_policy import ESCALATION_KEYWORDS, Decision, decide, find_escalation_keyword
from .gateway import TextCompletionGateway
from .lifecycle import ConversationLifecycleManager
from .prompts import (
    ESCALATION_ACKNOWLEDGEMENT,
    FALLBACK_APOLOGY,
    FORWARD_ACKNOWLEDGEMENT,
    SYSTEM_PROMPT,
)


@dataclass
class SessionResult:
    """Active conversation and its messages for a widget open."""

    conversation: ConversationDO
    messages: List[MessageDO] = field(default_factory=list)


@dataclass
class RouterReply:
    """Outcome of one inbound user message."""

    message: MessageDO
    forwarded_to_admin: bool = False
    user_message: Optional[MessageDO] = None

    @property
    def response(self) -> str:
        return self.message.text


@dataclass
class OperatorReply:
    """Outcome of an operator message."""

    message: MessageDO
    flag_cleared: bool
    requires_human: bool


def to_chat_history(messages: Iterable[MessageDO]) -> List[Dict[str, str]]:
    """Map stored messages to chat-completions roles (operators speak as the assistant)."""
    return [
        {
            "role": "user" if m.sender_type == SenderType.USER else "assistant",
            "content": m.text,
        }
        for m in messages
    ]


class MessageRouter:
    """Routes inbound messages to an automated reply or to an operator."""

    def __init__(
        self,
        lifecycle: ConversationLifecycleManager,
        gateway: TextCompletionGateway,
        history_limit: int = 10,
        gateway_timeout: float = 30.0,
        escalation_keywords: Iterable[str] = ESCALATION_KEYWORDS,
        system_prompt: str = SYSTEM_PROMPT
    ):
        self.lifecycle = lifecycle
        self.gateway = gateway
        self.history_limit = history_limit
        self.gateway_timeout = gateway_timeout
        self.escalation_keywords = tuple(escalation_keywords)
        self.system_prompt = system_prompt
        self.logger = get_app_logger()

    async def open_session(self, user_id: str) -> SessionResult:
        """
        Session-start path: get or create the user's active conversation.

        Args:
            user_id: Requesting user

        Returns:
            SessionResult with the conversation and its messages
        """
        conversation = await self.lifecycle.get_or_create_active_conversation(user_id)
        messages = await self.lifecycle.get_messages(conversation.id)
        return SessionResult(conversation=conversation, messages=messages)

    async def handle_inbound_message(
        self,
        conversation_id: str,
        user_id: str,
        text: Optional[str],
        explicit_forward: bool = False
    ) -> RouterReply:
        """
        Handle one inbound user message.

        Args:
            conversation_id: Target conversation
            user_id: Sender
            text: Message text; may be empty only for an explicit forward
            explicit_forward: The user pressed "forward to admin"

        Returns:
            RouterReply with the persisted bot message

        Raises:
            ValueError: empty text without an explicit forward
            ConversationNotFoundError: unknown conversation
            StorageWriteError: a write did not go through
            GatewayRateLimitedError: gateway busy, nothing persisted for this turn
            GatewayUnavailableError: gateway down, nothing persisted for this turn
        """
        text = (text or "").strip()
        if not text and not explicit_forward:
            raise ValueError("Message text is required")

        user_message = None
        if text:
            user_message = await self.lifecycle.append_message(
                conversation_id, SenderType.USER, text, sender_id=user_id
            )

        decision = decide(text, explicit_forward, self.escalation_keywords)

        if decision == Decision.ESCALATE:
            return await self._escalate(conversation_id, text, explicit_forward, user_message)

        return await self._auto_reply(conversation_id, text, user_message)

    async def _escalate(
        self,
        conversation_id: str,
        text: str,
        explicit_forward: bool,
        user_message: Optional[MessageDO]
    ) -> RouterReply:
        if explicit_forward:
            self.logger.info(f"Conversation {conversation_id}: user asked to be forwarded")
            acknowledgement = FORWARD_ACKNOWLEDGEMENT
        else:
            keyword = find_escalation_keyword(text, self.escalation_keywords)
            self.logger.info(f"Conversation {conversation_id}: escalating on keyword '{keyword}'")
            acknowledgement = ESCALATION_ACKNOWLEDGEMENT

        await self.lifecycle.mark_requires_human(conversation_id)
        bot_message = await self.lifecycle.append_message(
            conversation_id, SenderType.BOT, acknowledgement
        )
        return RouterReply(message=bot_message, forwarded_to_admin=True, user_message=user_message)

    async def _auto_reply(
        self,
        conversation_id: str,
        text: str,
        user_message: Optional[MessageDO]
    ) -> RouterReply:
        history = await self._load_history(conversation_id, exclude_id=user_message.id if user_message else None)

        try:
            reply_text = await asyncio.wait_for(
                self.gateway.complete(self.system_prompt, history, text),
                timeout=self.gateway_timeout
            )
        except (GatewayRateLimitedError, GatewayUnavailableError):
            raise
        except asyncio.TimeoutError:
            self.logger.error(
                f"Conversation {conversation_id}: gateway timed out after {self.gateway_timeout}s, sending fallback"
            )
            reply_text = FALLBACK_APOLOGY
        except GatewayError as e:
            self.logger.error(f"Conversation {conversation_id}: gateway failed ({e}), sending fallback")
            reply_text = FALLBACK_APOLOGY

        bot_message = await self.lifecycle.append_message(conversation_id, SenderType.BOT, reply_text)
        return RouterReply(message=bot_message, forwarded_to_admin=False, user_message=user_message)

    async def _load_history(self, conversation_id: str, exclude_id: Optional[str]) -> List[Dict[str, str]]:
        """Last `history_limit` messages before the current turn, oldest first."""
        if self.history_limit <= 0:
            return []
        recent = await self.lifecycle.get_recent_messages(conversation_id, self.history_limit + 1)
        prior = [m for m in recent if m.id != exclude_id]
        return to_chat_history(prior[-self.history_limit:])

    async def reply_as_operator(self, conversation_id: str, operator_id: str, text: str) -> OperatorReply:
        """
        Operator reply path: append the message, then clear the escalation flag.

        If clearing fails after the append succeeded, the message stays visible
        and the conversation stays in the operator queue.

        Raises:
            ValueError: empty text
            ConversationNotFoundError: unknown conversation
            StorageWriteError: the operator message was not recorded
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message text is required")

        message = await self.lifecycle.append_message(
            conversation_id, SenderType.OPERATOR, text, sender_id=operator_id
        )

        conversation = await self.lifecycle.get_conversation(conversation_id)
        if not conversation.requires_human:
            return OperatorReply(message=message, flag_cleared=False, requires_human=False)

        try:
            await self.lifecycle.clear_requires_human(conversation_id)
        except StorageWriteError as e:
            self.logger.error(
                f"Conversation {conversation_id}: operator message {message.id} saved "
                f"but escalation flag not cleared: {e}"
            )
            return OperatorReply(message=message, flag_cleared=False, requires_human=True)

        return OperatorReply(message=message, flag_cleared=True, requires_human=False)

    async def resolve(self, conversation_id: str) -> ConversationDO:
        """Resolve a conversation and return its new state."""
        await self.lifecycle.resolve(conversation_id)
        return await self.lifecycle.get_conversation(conversation_id)
