"""Database connection and schema management."""

import duckdb
from typing import Optional
from pathlib import Path
from ..utils.logger import get_app_logger


class DatabaseConnection:
    """DuckDB connection manager."""

    def __init__(self, db_path: str = "./data/support_desk.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to DuckDB database file
        """
        self.db_path = db_path
        self.logger = get_app_logger()
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

        db_dir = Path(db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

        self._connect()
        self._init_schema()

    def _connect(self):
        """Connect to DuckDB database."""
        try:
            self.conn = duckdb.connect(self.db_path)
            self.logger.info(f"Connected to DuckDB at {self.db_path}")
        except Exception as e:
            self.logger.error(f"Failed to connect to DuckDB: {e}")
            raise

    def _init_schema(self):
        """Initialize database schema."""
        try:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS support_conversations (
                    id VARCHAR PRIMARY KEY,
                    user_id VARCHAR NOT NULL,
                    status VARCHAR NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'resolved')),
                    requires_human BOOLEAN NOT NULL DEFAULT FALSE,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)

            # One row per user with an active conversation. The primary key is
            # the storage-level guarantee that a user never has two.
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS active_conversations (
                    user_id VARCHAR PRIMARY KEY,
                    conversation_id VARCHAR NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS support_messages (
                    id VARCHAR PRIMARY KEY,
                    seq BIGINT NOT NULL,
                    conversation_id VARCHAR NOT NULL,
                    sender_type VARCHAR NOT NULL CHECK (sender_type IN ('user', 'bot', 'operator')),
                    sender_id VARCHAR,
                    text VARCHAR NOT NULL,
                    created_at TIMESTAMP NOT NULL
                )
            """)

            self.conn.execute("CREATE SEQUENCE IF NOT EXISTS support_messages_seq START 1")

            # Only index columns that are never updated
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_conversations_user ON support_conversations(user_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_conversation ON support_messages(conversation_id)")

            self.logger.info("Database schema initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize database schema: {e}")
            raise

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.logger.info("Database connection closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
