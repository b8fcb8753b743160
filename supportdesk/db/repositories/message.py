"""Message repository for database operations."""

from typing import Optional, List

import duckdb
from .base import BaseRepository
from ..database_models import MessageDO, SenderType
from ...errors import StorageWriteError


_COLUMNS = "id, seq, conversation_id, sender_type, sender_id, text, created_at"


def _to_do(row) -> MessageDO:
    return MessageDO(
        id=row[0],
        seq=row[1],
        conversation_id=row[2],
        sender_type=SenderType(row[3]),
        sender_id=row[4],
        text=row[5],
        created_at=row[6]
    )


class MessageRepository(BaseRepository):
    """Repository for append-only Message operations."""

    def add(self, message: MessageDO) -> MessageDO:
        """
        Append a message.

        Args:
            message: MessageDO instance (seq is assigned here)

        Returns:
            The stored message, with seq populated

        Raises:
            StorageWriteError: if the insert fails
        """
        try:
            result = self.conn.execute("""
                INSERT INTO support_messages (id, seq, conversation_id, sender_type, sender_id, text, created_at)
                VALUES (?, nextval('support_messages_seq'), ?, ?, ?, ?, ?)
                RETURNING seq
            """, [
                message.id,
                message.conversation_id,
                message.sender_type.value,
                message.sender_id,
                message.text,
                message.created_at
            ]).fetchone()
        except duckdb.Error as e:
            self.logger.error(f"Failed to add message to conversation {message.conversation_id}: {e}")
            raise StorageWriteError(f"Failed to append message: {e}") from e

        message.seq = result[0]
        self.logger.debug(f"Added message {message.id} to conversation {message.conversation_id}")
        return message

    def get_by_conversation(self, conversation_id: str, limit: Optional[int] = None) -> List[MessageDO]:
        """
        Get messages for a conversation, oldest first.

        Args:
            conversation_id: Conversation ID
            limit: Optional maximum number of messages (the oldest ones)

        Returns:
            List of MessageDO instances (chronological order)
        """
        limit_clause = "LIMIT ?" if limit is not None else ""
        params = [conversation_id, limit] if limit is not None else [conversation_id]
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM support_messages
                WHERE conversation_id = ?
                ORDER BY created_at ASC, seq ASC
                {limit_clause}
            """, params).fetchall()
            return [_to_do(row) for row in results]
        except duckdb.Error as e:
            self.logger.error(f"Failed to get conversation messages: {e}")
            return []

    def get_recent(self, conversation_id: str, limit: int = 10) -> List[MessageDO]:
        """
        Get the most recent messages for a conversation.

        Args:
            conversation_id: Conversation ID
            limit: Maximum number of messages to return

        Returns:
            List of MessageDO instances (chronological order)
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM support_messages
                WHERE conversation_id = ?
                ORDER BY created_at DESC, seq DESC
                LIMIT ?
            """, [conversation_id, limit]).fetchall()

            messages = [_to_do(row) for row in results]

            # Reverse to get chronological order
            messages.reverse()
            return messages
        except duckdb.Error as e:
            self.logger.error(f"Failed to get recent messages: {e}")
            return []

    def count_by_conversation(self, conversation_id: str) -> int:
        """Count messages in a conversation."""
        try:
            result = self.conn.execute("""
                SELECT COUNT(*) FROM support_messages WHERE conversation_id = ?
            """, [conversation_id]).fetchone()
            return result[0] if result else 0
        except duckdb.Error as e:
            self.logger.error(f"Failed to count messages: {e}")
            return 0
