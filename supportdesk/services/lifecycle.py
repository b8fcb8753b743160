"""Conversation lifecycle manager.

The only component that appends support messages or changes a conversation's
``status`` and ``requires_human`` fields. State machine::

    active --mark_requires_human--> active + requires_human
    active + requires_human --operator reply / clear_requires_human--> active
    active (either flag value) --resolve--> resolved

``resolve`` leaves ``requires_human`` untouched and frees the user's active
slot, so the next widget open starts a new conversation.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from ..db.database_models import (
    ConversationDO,
    ConversationStatus,
    MessageDO,
    SenderType,
)
from ..db.repositories import ConversationRepository, MessageRepository
from ..errors import ConversationNotFoundError, StorageWriteError
from ..utils.logger import get_app_logger
from .broadcaster import MessageBroadcaster
from .prompts import WELCOME_MESSAGE


class ConversationLifecycleManager:
    """Owns every write to support conversations and their messages."""

    def __init__(
        self,
        conversations: ConversationRepository,
        messages: MessageRepository,
        broadcaster: Optional[MessageBroadcaster] = None,
        welcome_message: str = WELCOME_MESSAGE
    ):
        """
        Args:
            conversations: Conversation repository
            messages: Message repository sharing the same connection
            broadcaster: Receives each message after it is committed
            welcome_message: Bot text appended to every new conversation
        """
        self.conversations = conversations
        self.messages = messages
        self.broadcaster = broadcaster
        self.welcome_message = welcome_message
        self.logger = get_app_logger()

    def _require(self, conversation_id: str) -> ConversationDO:
        conversation = self.conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    def _publish(self, message: MessageDO) -> None:
        if self.broadcaster is not None:
            self.broadcaster.publish(message)

    # === Reads ===

    async def get_conversation(self, conversation_id: str) -> ConversationDO:
        """Get a conversation or raise ConversationNotFoundError."""
        return self._require(conversation_id)

    async def get_messages(self, conversation_id: str, limit: Optional[int] = None) -> List[MessageDO]:
        """All messages of a conversation (oldest first, optionally the first `limit`)."""
        self._require(conversation_id)
        return self.messages.get_by_conversation(conversation_id, limit=limit)

    async def get_recent_messages(self, conversation_id: str, limit: int) -> List[MessageDO]:
        """The last `limit` messages of a conversation in chronological order."""
        self._require(conversation_id)
        if limit <= 0:
            return []
        return self.messages.get_recent(conversation_id, limit=limit)

    async def count_messages(self, conversation_id: str) -> int:
        self._require(conversation_id)
        return self.messages.count_by_conversation(conversation_id)

    async def list_user_conversations(self, user_id: str) -> List[ConversationDO]:
        """All of a user's conversations, newest first."""
        return self.conversations.list_by_user(user_id)

    async def list_operator_queue(self, status: Optional[ConversationStatus] = None) -> List[ConversationDO]:
        """Conversations flagged for a human first, then most recently active."""
        return self.conversations.list_queue(status)

    # === Writes ===

    async def get_or_create_active_conversation(self, user_id: str) -> ConversationDO:
        """
        Return the user's active conversation, creating it if there is none.

        A new conversation and its welcome message are written in one
        transaction after claiming the user's active slot. If another caller
        holds the slot, its conversation is returned instead.

        Args:
            user_id: Requesting user

        Returns:
            The active ConversationDO

        Raises:
            StorageWriteError: if the conversation or welcome message could not be written
        """
        existing = self.conversations.get_active_for_user(user_id)
        if existing is not None:
            return existing

        now = datetime.utcnow()
        conversation = ConversationDO(
            id=str(uuid.uuid4()),
            user_id=user_id,
            status=ConversationStatus.ACTIVE,
            requires_human=False,
            created_at=now,
            updated_at=now
        )
        welcome = MessageDO(
            id=str(uuid.uuid4()),
            conversation_id=conversation.id,
            sender_type=SenderType.BOT,
            text=self.welcome_message,
            created_at=now
        )

        with self.conversations.transaction():
            claimed = self.conversations.claim_active_slot(user_id, conversation.id)
            if claimed:
                self.conversations.create(conversation)
                self.messages.add(welcome)

        if not claimed:
            winner = self.conversations.get_active_for_user(user_id)
            if winner is None:
                raise StorageWriteError(f"Active conversation slot for user {user_id} points to no active conversation")
            self.logger.info(f"Reusing concurrently created conversation {winner.id} for user {user_id}")
            return winner

        self.logger.info(f"Started support conversation {conversation.id} for user {user_id}")
        self._publish(welcome)
        return conversation

    async def append_message(
        self,
        conversation_id: str,
        sender_type: SenderType,
        text: str,
        sender_id: Optional[str] = None
    ) -> MessageDO:
        """
        Append a message and bump the conversation's updated_at.

        Resolved conversations still accept messages.

        Raises:
            ConversationNotFoundError: unknown conversation
            StorageWriteError: the message was not recorded
        """
        self._require(conversation_id)

        now = datetime.utcnow()
        message = MessageDO(
            id=str(uuid.uuid4()),
            conversation_id=conversation_id,
            sender_type=sender_type,
            sender_id=None if sender_type == SenderType.BOT else sender_id,
            text=text,
            created_at=now
        )

        with self.conversations.transaction():
            self.messages.add(message)
            self.conversations.touch(conversation_id, now)

        self._publish(message)
        return message

    async def mark_requires_human(self, conversation_id: str) -> None:
        """
        Flag a conversation for operator attention. Idempotent.

        Raises:
            ConversationNotFoundError: unknown conversation
            StorageWriteError: the flag was not recorded
        """
        self._require(conversation_id)
        if self.conversations.set_requires_human(conversation_id, True, datetime.utcnow()):
            self.logger.info(f"Conversation {conversation_id} now requires a human")

    async def clear_requires_human(self, conversation_id: str) -> None:
        """
        Clear the operator-attention flag. Idempotent.

        Raises:
            ConversationNotFoundError: unknown conversation
            StorageWriteError: the flag was not recorded
        """
        self._require(conversation_id)
        if self.conversations.set_requires_human(conversation_id, False, datetime.utcnow()):
            self.logger.info(f"Conversation {conversation_id} no longer requires a human")

    async def resolve(self, conversation_id: str) -> None:
        """
        Mark a conversation resolved and free the user's active slot.

        Raises:
            ConversationNotFoundError: unknown conversation
            StorageWriteError: the status was not recorded
        """
        self._require(conversation_id)
        with self.conversations.transaction():
            changed = self.conversations.set_status(
                conversation_id, ConversationStatus.RESOLVED, datetime.utcnow()
            )
            self.conversations.release_active_slot(conversation_id)

        if changed:
            self.logger.info(f"Resolved conversation {conversation_id}")
