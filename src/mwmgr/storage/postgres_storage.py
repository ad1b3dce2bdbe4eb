"""
Postgres Storage

Hosted relational backend for the persistence port. Each collection maps to
a table whose snake_case columns match the record fields. Article comments
live in a child table and are folded back into article records on read.
"""
import asyncio
import json
import logging
import os
import time
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

import asyncpg

from .base import BaseStorage, StorageError

logger = logging.getLogger("mwmgr.storage.postgres")

TABLES = {
    "users": "users",
    "users_pwd": "user_passwords",
    "articles": "articles",
    "chat": "chat_messages",
    "todos": "todos",
    "notifications": "notifications",
    "notification_settings": "notification_settings",
}

COMMENTS_TABLE = "article_comments"

TIMESTAMP_FIELDS = {
    "created_at", "updated_at", "published_at", "last_login",
    "read_at", "completed_at",
}


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _to_db(record: dict) -> dict:
    """Convert ISO timestamp strings into datetimes for asyncpg"""
    values = {}
    for key, value in record.items():
        if key in TIMESTAMP_FIELDS and isinstance(value, str):
            value = datetime.fromisoformat(value)
        values[key] = value
    return values


def _from_db(row) -> dict:
    """Convert a database row into a plain record"""
    record = {}
    for key, value in dict(row).items():
        if isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, (list, tuple)):
            value = list(value)
        record[key] = value
    return record


async def _init_connection(conn):
    await conn.set_type_codec(
        "jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog"
    )


class PostgresStorage(BaseStorage):
    """Storage over PostgreSQL with connection pooling"""

    def __init__(self, postgres_dsn: str = "postgresql://postgres@localhost/mw_mgr"):
        """
        Initialize postgres storage.

        Args:
            postgres_dsn: PostgreSQL connection DSN
        """
        self.pg_pool: Optional[asyncpg.Pool] = None
        self.pg_dsn = postgres_dsn
        self.process_id = os.getpid()
        self._initialized = False

    async def init(self):
        """Initialize storage - connect to PostgreSQL"""
        if self._initialized:
            return

        start_time = time.time()
        logger.info("Initializing PostgresStorage...")

        await self._init_postgres()
        self._initialized = True

        duration_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(f"PostgresStorage initialized in {duration_ms}ms")

    async def _init_postgres(self):
        """Initialize PostgreSQL connection pool with retries"""
        max_retries = 3
        retry_delay = 1

        current_pid = os.getpid()

        # Handle process fork - need new pool
        if self.pg_pool is not None and self.process_id != current_pid:
            logger.info(f"New process detected (old: {self.process_id}, new: {current_pid}), creating new pool")
            self.pg_pool = None

        self.process_id = current_pid

        for attempt in range(1, max_retries + 1):
            try:
                self.pg_pool = await asyncpg.create_pool(
                    self.pg_dsn,
                    min_size=2,
                    max_size=10,
                    command_timeout=60,
                    init=_init_connection,
                )

                async with self.pg_pool.acquire() as conn:
                    await conn.fetchval("SELECT 1")

                logger.info(f"PostgreSQL connected (attempt {attempt}/{max_retries})")
                return

            except (OSError, asyncpg.PostgresError) as e:
                logger.error(f"PostgreSQL connection failed (attempt {attempt}/{max_retries}): {e}")
                if attempt < max_retries:
                    logger.info(f"Retrying in {retry_delay}s...")
                    await asyncio.sleep(retry_delay)

        raise StorageError("Failed to connect to PostgreSQL after all retries")

    async def close(self):
        """Close database connections"""
        if self.pg_pool:
            await self.pg_pool.close()
            self.pg_pool = None
            self._initialized = False
            logger.info("PostgresStorage closed")

    # ============================================
    # Whole-collection access
    # ============================================

    async def get(self, collection: str, default: Any = None) -> Any:
        try:
            if collection in TABLES:
                rows = await self._fetch_table(collection)
                return rows if rows else default
            async with self.pg_pool.acquire() as conn:
                row = await conn.fetchrow("SELECT value FROM app_state WHERE key = $1", collection)
            return row["value"] if row else default
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to read {collection}: {e}")
            return default

    async def set(self, collection: str, value: Any) -> None:
        try:
            if collection in TABLES:
                await self._replace_table(collection, value or [])
                return
            async with self.pg_pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO app_state (key, value) VALUES ($1, $2)
                    ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
                    """,
                    collection, value,
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to write {collection}: {e}")

    async def remove(self, collection: str) -> None:
        try:
            async with self.pg_pool.acquire() as conn:
                if collection in TABLES:
                    await conn.execute(f"DELETE FROM {_quote(TABLES[collection])}")
                else:
                    await conn.execute("DELETE FROM app_state WHERE key = $1", collection)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to remove {collection}: {e}")

    # ============================================
    # Record access (row level)
    # ============================================

    async def list(self, collection: str) -> List[dict]:
        return list(await self.get(collection, []) or [])

    async def find(self, collection: str, record_id: str) -> Optional[dict]:
        key = self._key_field(collection)
        try:
            rows = await self._fetch_table(collection, where=f"{_quote(key)} = $1", args=(UUID(record_id),))
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to read {collection}/{record_id}: {e}")
            return None
        return rows[0] if rows else None

    async def insert(self, collection: str, record: dict) -> dict:
        try:
            async with self.pg_pool.acquire() as conn:
                async with conn.transaction():
                    await self._upsert(conn, collection, record)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to insert into {collection}: {e}")
        return record

    async def update(self, collection: str, record_id: str, changes: dict) -> Optional[dict]:
        current = await self.find(collection, record_id)
        if current is None:
            return None
        updated = {**current, **changes}
        try:
            async with self.pg_pool.acquire() as conn:
                async with conn.transaction():
                    await self._upsert(conn, collection, updated)
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to update {collection}/{record_id}: {e}")
        return updated

    async def delete(self, collection: str, record_id: str) -> bool:
        key = self._key_field(collection)
        try:
            async with self.pg_pool.acquire() as conn:
                result = await conn.execute(
                    f"DELETE FROM {_quote(TABLES[collection])} WHERE {_quote(key)} = $1",
                    UUID(record_id),
                )
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to delete {collection}/{record_id}: {e}")
            return False
        return result.endswith(" 1")

    # ============================================
    # SQL helpers
    # ============================================

    async def _fetch_table(self, collection: str, where: str = "", args: tuple = ()) -> List[dict]:
        table = _quote(TABLES[collection])
        order = " ORDER BY created_at" if collection not in ("users_pwd", "notification_settings") else ""
        query = f"SELECT * FROM {table}" + (f" WHERE {where}" if where else "") + order

        async with self.pg_pool.acquire() as conn:
            rows = [_from_db(row) for row in await conn.fetch(query, *args)]
            if collection == "articles" and rows:
                comment_rows = await conn.fetch(
                    f"SELECT * FROM {COMMENTS_TABLE} WHERE article_id = ANY($1::uuid[]) ORDER BY created_at",
                    [UUID(r["id"]) for r in rows],
                )
                comments: Dict[str, List[dict]] = {}
                for comment in comment_rows:
                    record = _from_db(comment)
                    comments.setdefault(record["article_id"], []).append(record)
                for row in rows:
                    row["comments"] = comments.get(row["id"], [])
        return rows

    async def _replace_table(self, collection: str, records: List[dict]):
        """Make the table hold exactly `records`: upsert them, drop the rest"""
        key = self._key_field(collection)
        table = _quote(TABLES[collection])
        keep = [UUID(r[key]) for r in records]

        async with self.pg_pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    f"DELETE FROM {table} WHERE NOT ({_quote(key)} = ANY($1::uuid[]))", keep
                )
                for record in records:
                    await self._upsert(conn, collection, record)

    async def _upsert(self, conn, collection: str, record: dict):
        key = self._key_field(collection)
        row = dict(record)
        comments = row.pop("comments", None) if collection == "articles" else None

        await self._upsert_row(conn, TABLES[collection], key, row)

        if comments is not None:
            keep = [UUID(c["id"]) for c in comments]
            await conn.execute(
                f"DELETE FROM {COMMENTS_TABLE} WHERE article_id = $1 AND NOT (id = ANY($2::uuid[]))",
                UUID(row["id"]), keep,
            )
            for comment in comments:
                await self._upsert_row(conn, COMMENTS_TABLE, "id", comment)

    async def _upsert_row(self, conn, table: str, key: str, record: dict):
        values = _to_db(record)
        columns = list(values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        assignments = ", ".join(
            f"{_quote(c)} = EXCLUDED.{_quote(c)}" for c in columns if c != key
        )
        query = (
            f"INSERT INTO {_quote(table)} ({', '.join(_quote(c) for c in columns)}) "
            f"VALUES ({placeholders}) "
            f"ON CONFLICT ({_quote(key)}) DO "
            + (f"UPDATE SET {assignments}" if assignments else "NOTHING")
        )
        await conn.execute(query, *values.values())
