"""Base repository class."""

from contextlib import contextmanager
from typing import Iterator

import duckdb
from ...errors import StorageWriteError
from ...utils.logger import get_app_logger


class BaseRepository:
    """Base class for all repositories."""

    def __init__(self, conn: duckdb.DuckDBPyConnection):
        """
        Initialize repository with database connection.

        Args:
            conn: DuckDB connection instance
        """
        self.conn = conn
        self.logger = get_app_logger()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run the enclosed statements in one DuckDB transaction.

        Repositories sharing the same connection take part in it, so writes
        across tables commit or roll back together.

        Raises:
            StorageWriteError: if the commit fails
        """
        self.conn.begin()
        try:
            yield
            self.conn.commit()
        except duckdb.Error as e:
            self._rollback()
            self.logger.error(f"Transaction failed: {e}")
            raise StorageWriteError(f"Transaction failed: {e}") from e
        except Exception:
            self._rollback()
            raise

    def _rollback(self) -> None:
        try:
            self.conn.rollback()
        except duckdb.Error as e:
            # Already rolled back by a failed commit
            self.logger.debug(f"Rollback skipped: {e}")
