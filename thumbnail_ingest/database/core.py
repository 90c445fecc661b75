# thumbnail_ingest/database/core.py

"""
Database connection management.

``SyncDatabase`` owns the process-wide psycopg connection pool for a run:
opened once before the first pass, closed once after the last. Operation
classes receive it by composition and borrow connections per statement.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout

from ..enums import LoggerName, LogSource
from ..services.logger import get_service_logger
from ..utils.time_utils import utc_now
from .exceptions import StoreConnectionError

logger = get_service_logger(LoggerName.DATABASE, LogSource.DATABASE)

CONNECT_TIMEOUT_SECONDS = 10


class SyncDatabaseCore:
    """
    Core sync database functionality for composition-based architecture.

    Provides connection management without mixin inheritance; operation
    classes hold a reference and call ``get_connection``.
    """

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        pool_timeout: float = 30.0,
    ) -> None:
        """
        Args:
            database_url: PostgreSQL connection string
            pool_size: Maximum number of pooled connections
            pool_timeout: Seconds to wait for a connection (and for the pool to open)
        """
        self.database_url = database_url
        self.pool_size = pool_size
        self.pool_timeout = pool_timeout
        self._pool: Optional[ConnectionPool] = None
        self._failed_connections = 0
        self._pool_created_at = None

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None

    def initialize(self) -> None:
        """
        Open the connection pool and wait until it can serve connections.

        Raises:
            StoreConnectionError: If the store cannot be reached in time
        """
        if self._pool is not None:
            return

        pool = ConnectionPool(
            self.database_url,
            min_size=1,
            max_size=max(1, self.pool_size),
            timeout=self.pool_timeout,
            kwargs={
                "row_factory": dict_row,
                "connect_timeout": CONNECT_TIMEOUT_SECONDS,
            },
            open=False,
        )
        try:
            pool.open(wait=True, timeout=self.pool_timeout)
        except (PoolTimeout, psycopg.Error, OSError) as e:
            self._failed_connections += 1
            pool.close()
            raise StoreConnectionError(
                f"Failed to connect to store: {e}", operation="initialize"
            ) from e

        self._pool = pool
        self._pool_created_at = utc_now()
        logger.debug(f"Connection pool opened (max_size={self.pool_size})")

    def close(self) -> None:
        """
        Close the connection pool and cleanup resources.

        Safe to call more than once.
        """
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get connection pool statistics.

        Returns:
            Dictionary with pool statistics
        """
        if not self._pool:
            return {"pool_initialized": False}

        return {
            "pool_initialized": True,
            "pool_created_at": self._pool_created_at,
            "failed_connections": self._failed_connections,
            "pool_stats": self._pool.get_stats(),
        }

    @contextmanager
    def get_connection(self) -> Generator[Any, None, None]:
        """
        Borrow a connection from the pool.

        The transaction is committed when the block exits cleanly and rolled
        back if it raises.

        Yields:
            Connection: A sync database connection with dict_row factory

        Raises:
            RuntimeError: If the pool has not been initialized

        Usage:
            with db.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT * FROM images WHERE id = %s", (record_id,))
                    row = cur.fetchone()
        """
        if not self._pool:
            raise RuntimeError("Database pool not initialized")

        try:
            with self._pool.connection() as conn:
                yield conn
        except (psycopg.OperationalError, PoolTimeout):
            self._failed_connections += 1
            raise


SyncDatabase = SyncDatabaseCore
