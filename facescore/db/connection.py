"""PostgreSQL connection pool"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from facescore.config import (
    DATABASE_URL,
    DB_POOL_MAX_SIZE,
    DB_POOL_MIN_SIZE,
    DB_POOL_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class Database:
    """Owns the async pool; every query borrows a dict_row connection from it"""

    def __init__(
        self,
        connection_string: str = DATABASE_URL,
        min_size: int = DB_POOL_MIN_SIZE,
        max_size: int = DB_POOL_MAX_SIZE,
        timeout: float = DB_POOL_TIMEOUT_SECONDS
    ):
        self.connection_string = connection_string
        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self._pool: Optional[AsyncConnectionPool] = None

    async def init_pool(self) -> None:
        self._pool = AsyncConnectionPool(
            self.connection_string,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=self.timeout,
            kwargs={"row_factory": dict_row},
            open=False
        )
        await self._pool.open()
        logger.info(f"[DB] Pool open (min={self.min_size}, max={self.max_size})")

    async def close_pool(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """Borrow a connection; raises RuntimeError before init_pool()"""
        if not self._pool:
            raise RuntimeError("Database pool not initialized")

        async with self._pool.connection() as conn:
            yield conn

    async def ping(self) -> bool:
        """True when a pooled connection answers SELECT 1"""
        try:
            async with self.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1")
                    await cur.fetchone()
        except Exception as e:
            logger.error(f"[DB] Health check failed: {e}")
            return False
        return True


db = Database()
