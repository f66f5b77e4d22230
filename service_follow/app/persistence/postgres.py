"""
PostgreSQL persistence layer for follow edges.
"""

import asyncio
import re
from typing import List, Optional

import asyncpg
from shared.logging import get_logger
from ..errors import EdgeConflict, SelfFollowForbidden, StoreUnavailable
from ..follows.models import Edge

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")

# Failures that mean the store could not answer, as opposed to a bad request.
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class PostgresRelationshipStore:
    """PostgreSQL-backed relationship table."""

    def __init__(self, dsn: str, table: str = "follows", min_size: int = 2, max_size: int = 10):
        if not _IDENTIFIER.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        self.dsn = dsn
        self.table = table
        self.min_size = min_size
        self.max_size = max_size
        self.logger = get_logger("follow.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=30
            )

            await self._create_tables()

            self.logger.info("PostgreSQL persistence started", table=self.table)

        except STORE_ERRORS as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise StoreUnavailable("Failed to start PostgreSQL persistence", {"error": str(e)}) from e

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create the edge table and its followee index."""
        async with self.pool.acquire() as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    follower_id VARCHAR(255) NOT NULL,
                    followee_id VARCHAR(255) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    PRIMARY KEY (follower_id, followee_id),
                    CHECK (follower_id <> followee_id)
                );
            """)

            await conn.execute(f"""
                CREATE INDEX IF NOT EXISTS idx_{self.table}_followee
                ON {self.table}(followee_id, follower_id);
            """)

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise StoreUnavailable("PostgreSQL persistence not started")
        return self.pool

    async def create_edge(self, follower_id: str, followee_id: str) -> Edge:
        """Insert an edge; an existing edge is never overwritten."""
        if follower_id == followee_id:
            raise SelfFollowForbidden(follower_id)

        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow(f"""
                    INSERT INTO {self.table} (follower_id, followee_id)
                    VALUES ($1, $2)
                    ON CONFLICT (follower_id, followee_id) DO NOTHING
                    RETURNING follower_id, followee_id, created_at
                """, follower_id, followee_id)
        except STORE_ERRORS as e:
            self.logger.error("Error creating edge", follower_id=follower_id,
                              followee_id=followee_id, error=str(e))
            raise StoreUnavailable("Failed to create edge", {"error": str(e)}) from e

        if row is None:
            raise EdgeConflict(follower_id, followee_id)

        self.logger.info("Edge created", follower_id=follower_id, followee_id=followee_id)
        return self._row_to_edge(row)

    async def delete_edge(self, follower_id: str, followee_id: str) -> bool:
        """Delete an edge. Returns False when there was nothing to delete."""
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                status = await conn.execute(f"""
                    DELETE FROM {self.table}
                    WHERE follower_id = $1 AND followee_id = $2
                """, follower_id, followee_id)
        except STORE_ERRORS as e:
            self.logger.error("Error deleting edge", follower_id=follower_id,
                              followee_id=followee_id, error=str(e))
            raise StoreUnavailable("Failed to delete edge", {"error": str(e)}) from e

        # asyncpg returns the command tag, e.g. "DELETE 1"
        deleted = status.split()[-1] != "0"
        self.logger.info("Edge deleted", follower_id=follower_id,
                         followee_id=followee_id, existed=deleted)
        return deleted

    async def list_by_follower(self, follower_id: str) -> List[Edge]:
        """All edges where `follower_id` is the follower, by followee id."""
        return await self._fetch_edges(f"""
            SELECT follower_id, followee_id, created_at FROM {self.table}
            WHERE follower_id = $1
            ORDER BY followee_id
        """, follower_id)

    async def list_by_followee(self, followee_id: str) -> List[Edge]:
        """All edges where `followee_id` is followed, by follower id."""
        return await self._fetch_edges(f"""
            SELECT follower_id, followee_id, created_at FROM {self.table}
            WHERE followee_id = $1
            ORDER BY follower_id
        """, followee_id)

    async def edge_exists(self, follower_id: str, followee_id: str) -> bool:
        """Whether the edge follower -> followee is stored."""
        return bool(await self._fetch_value(f"""
            SELECT EXISTS(
                SELECT 1 FROM {self.table}
                WHERE follower_id = $1 AND followee_id = $2
            )
        """, follower_id, followee_id))

    async def count_by_follower(self, follower_id: str) -> int:
        """Number of users `follower_id` follows."""
        return await self._fetch_value(f"""
            SELECT COUNT(*) FROM {self.table} WHERE follower_id = $1
        """, follower_id)

    async def count_by_followee(self, followee_id: str) -> int:
        """Number of users following `followee_id`."""
        return await self._fetch_value(f"""
            SELECT COUNT(*) FROM {self.table} WHERE followee_id = $1
        """, followee_id)

    async def _fetch_value(self, query: str, *args):
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                return await conn.fetchval(query, *args)
        except STORE_ERRORS as e:
            self.logger.error("Error querying edges", args=args, error=str(e))
            raise StoreUnavailable("Failed to query edges", {"error": str(e)}) from e

    async def _fetch_edges(self, query: str, user_id: str) -> List[Edge]:
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(query, user_id)
        except STORE_ERRORS as e:
            self.logger.error("Error listing edges", user_id=user_id, error=str(e))
            raise StoreUnavailable("Failed to list edges", {"error": str(e)}) from e

        return [self._row_to_edge(row) for row in rows]

    async def health_check(self) -> bool:
        """Check PostgreSQL health."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except STORE_ERRORS:
            return False

    def _row_to_edge(self, row) -> Edge:
        return Edge(
            follower_id=row["follower_id"],
            followee_id=row["followee_id"],
            created_at=row["created_at"],
        )
