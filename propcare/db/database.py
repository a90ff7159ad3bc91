"""
asyncpg pool shared by PostgresStore's repositories and by ensure_schema().

JSON/JSONB columns (issue photos, voice notes, settings category lists) are
decoded to Python lists and dicts on every pooled connection.
"""

import json
import logging
from typing import Any, List, Optional

import asyncpg

logger = logging.getLogger(__name__)


async def _register_json_codecs(conn) -> None:
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(type_name, encoder=json.dumps, decoder=json.loads, schema="pg_catalog")


class Database:
    """Connection pool for one PropCare deployment, opened by PropCareApp.initialize()."""

    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 10):
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database pool is not open. Call await db.initialize() first.")
        return self._pool

    async def initialize(self) -> None:
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            self._dsn,
            min_size=self._min_size,
            max_size=self._max_size,
            init=_register_json_codecs,
        )
        logger.info(f"Postgres pool open ({self._min_size}-{self._max_size} connections)")

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("Postgres pool closed")

    # Row helpers used by the repositories

    async def fetch(self, query: str, *args: Any) -> List[asyncpg.Record]:
        async with self.pool.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> Optional[asyncpg.Record]:
        async with self.pool.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, *args)
