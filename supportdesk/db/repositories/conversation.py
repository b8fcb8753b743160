"""Conversation repository for database operations."""

from datetime import datetime
from typing import Optional, List

import duckdb
from .base import BaseRepository
from ..database_models import ConversationDO, ConversationStatus
from ...errors import StorageWriteError


_COLUMNS = "c.id, c.user_id, c.status, c.requires_human, c.created_at, c.updated_at"


def _to_do(row) -> ConversationDO:
    return ConversationDO(
        id=row[0],
        user_id=row[1],
        status=ConversationStatus(row[2]),
        requires_human=bool(row[3]),
        created_at=row[4],
        updated_at=row[5]
    )


class ConversationRepository(BaseRepository):
    """Repository for Conversation CRUD operations."""

    def create(self, conversation: ConversationDO) -> None:
        """
        Insert a conversation record.

        Args:
            conversation: ConversationDO instance

        Raises:
            StorageWriteError: if the insert fails
        """
        try:
            self.conn.execute("""
                INSERT INTO support_conversations (id, user_id, status, requires_human, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, [
                conversation.id,
                conversation.user_id,
                conversation.status.value,
                conversation.requires_human,
                conversation.created_at,
                conversation.updated_at
            ])
            self.logger.info(f"Created conversation record: {conversation.id} (user {conversation.user_id})")
        except duckdb.Error as e:
            self.logger.error(f"Failed to create conversation: {e}")
            raise StorageWriteError(f"Failed to create conversation: {e}") from e

    def claim_active_slot(self, user_id: str, conversation_id: str) -> bool:
        """
        Reserve the user's single active-conversation slot.

        Args:
            user_id: Conversation owner
            conversation_id: Conversation that wants the slot

        Returns:
            True if the slot now belongs to conversation_id, False if another
            conversation already holds it
        """
        try:
            self.conn.execute("""
                INSERT INTO active_conversations (user_id, conversation_id)
                VALUES (?, ?)
                ON CONFLICT DO NOTHING
            """, [user_id, conversation_id])
            result = self.conn.execute("""
                SELECT conversation_id FROM active_conversations WHERE user_id = ?
            """, [user_id]).fetchone()
        except duckdb.Error as e:
            self.logger.error(f"Failed to claim active slot for user {user_id}: {e}")
            raise StorageWriteError(f"Failed to claim active conversation: {e}") from e

        return result is not None and result[0] == conversation_id

    def release_active_slot(self, conversation_id: str) -> None:
        """
        Free the active-conversation slot held by a conversation, if any.

        Raises:
            StorageWriteError: if the delete fails
        """
        try:
            self.conn.execute("""
                DELETE FROM active_conversations WHERE conversation_id = ?
            """, [conversation_id])
        except duckdb.Error as e:
            self.logger.error(f"Failed to release active slot of {conversation_id}: {e}")
            raise StorageWriteError(f"Failed to release active conversation: {e}") from e

    def get(self, conversation_id: str) -> Optional[ConversationDO]:
        """
        Get conversation by ID.

        Args:
            conversation_id: Conversation ID

        Returns:
            ConversationDO instance or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM support_conversations c
                WHERE c.id = ?
            """, [conversation_id]).fetchone()
            return _to_do(result) if result else None
        except duckdb.Error as e:
            self.logger.error(f"Failed to get conversation {conversation_id}: {e}")
            return None

    def get_active_for_user(self, user_id: str) -> Optional[ConversationDO]:
        """
        Get the user's active conversation.

        Args:
            user_id: Conversation owner

        Returns:
            ConversationDO instance or None
        """
        try:
            result = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM active_conversations a
                JOIN support_conversations c ON c.id = a.conversation_id
                WHERE a.user_id = ? AND c.status = 'active'
            """, [user_id]).fetchone()
            return _to_do(result) if result else None
        except duckdb.Error as e:
            self.logger.error(f"Failed to get active conversation for user {user_id}: {e}")
            return None

    def list_by_user(self, user_id: str) -> List[ConversationDO]:
        """
        List a user's conversations, newest first.

        Args:
            user_id: Conversation owner

        Returns:
            List of ConversationDO instances
        """
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM support_conversations c
                WHERE c.user_id = ?
                ORDER BY c.created_at DESC
            """, [user_id]).fetchall()
            return [_to_do(row) for row in results]
        except duckdb.Error as e:
            self.logger.error(f"Failed to list conversations for user {user_id}: {e}")
            return []

    def list_queue(self, status: Optional[ConversationStatus] = None) -> List[ConversationDO]:
        """
        List conversations in operator order: flagged first, then most recently updated.

        Args:
            status: Optional status filter

        Returns:
            List of ConversationDO instances
        """
        where = "WHERE c.status = ?" if status else ""
        params = [status.value] if status else []
        try:
            results = self.conn.execute(f"""
                SELECT {_COLUMNS}
                FROM support_conversations c
                {where}
                ORDER BY c.requires_human DESC, c.updated_at DESC
            """, params).fetchall()
            return [_to_do(row) for row in results]
        except duckdb.Error as e:
            self.logger.error(f"Failed to list operator queue: {e}")
            return []

    def set_requires_human(self, conversation_id: str, value: bool, updated_at: datetime) -> bool:
        """
        Set the requires_human flag if it differs from value.

        Args:
            conversation_id: Conversation ID
            value: New flag value
            updated_at: Timestamp recorded when the flag changes

        Returns:
            True if the flag changed, False if it already had that value

        Raises:
            StorageWriteError: if the update fails
        """
        try:
            result = self.conn.execute("""
                UPDATE support_conversations
                SET requires_human = ?, updated_at = ?
                WHERE id = ? AND requires_human <> ?
            """, [value, updated_at, conversation_id, value]).fetchone()
        except duckdb.Error as e:
            self.logger.error(f"Failed to set requires_human on {conversation_id}: {e}")
            raise StorageWriteError(f"Failed to update escalation flag: {e}") from e

        return bool(result and result[0])

    def set_status(self, conversation_id: str, status: ConversationStatus, updated_at: datetime) -> bool:
        """
        Set the conversation status if it differs.

        Returns:
            True if the status changed

        Raises:
            StorageWriteError: if the update fails
        """
        try:
            result = self.conn.execute("""
                UPDATE support_conversations
                SET status = ?, updated_at = ?
                WHERE id = ? AND status <> ?
            """, [status.value, updated_at, conversation_id, status.value]).fetchone()
        except duckdb.Error as e:
            self.logger.error(f"Failed to set status on {conversation_id}: {e}")
            raise StorageWriteError(f"Failed to update conversation status: {e}") from e

        return bool(result and result[0])

    def touch(self, conversation_id: str, updated_at: datetime) -> None:
        """
        Bump updated_at.

        Raises:
            StorageWriteError: if the update fails
        """
        try:
            self.conn.execute("""
                UPDATE support_conversations SET updated_at = ? WHERE id = ?
            """, [updated_at, conversation_id])
        except duckdb.Error as e:
            self.logger.error(f"Failed to touch conversation {conversation_id}: {e}")
            raise StorageWriteError(f"Failed to update conversation: {e}") from e
