# key-value stores backing the catalog; values are JSON text written by crud
from __future__ import annotations

import asyncio
import os.path
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Protocol

import aiosqlite

from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

# fixed keys, one JSON document each
PRODUCTS_KEY = "products"
QUOTATIONS_KEY = "quotations"
CART_KEY = "cart"
ADMIN_AUTH_KEY = "admin_auth"
ADMIN_USER_KEY = "admin_user"
ADMIN_PASS_KEY = "admin_pass"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def keys(self) -> List[str]: ...


class MemoryStore:
    """Dict-backed store, used by tests and as a scratch store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self) -> List[str]:
        return sorted(self._data)


class SqliteStore:
    """Persistent store: a single two-column table in a local sqlite file."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or config.DB_PATH
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def _init_db(self, conn: aiosqlite.Connection) -> None:
        _logger.info(f"Initializing key-value table in {self.path}...")
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
            """
        )
        await conn.commit()

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Async context manager yielding an aiosqlite connection.

        Creates the database directory and the kv table on first use.
        """
        if not self._initialized:
            async with self._init_lock:
                if not self._initialized:
                    folder = os.path.dirname(self.path)
                    if folder:
                        os.makedirs(folder, exist_ok=True)
                    async with aiosqlite.connect(self.path) as conn:
                        await self._init_db(conn)
                    self._initialized = True

        conn = await aiosqlite.connect(self.path)
        try:
            yield conn
        finally:
            await conn.close()

    async def get(self, key: str) -> Optional[str]:
        async with self.connect() as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        async with self.connect() as conn:
            await conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, value),
            )
            await conn.commit()

    async def remove(self, key: str) -> None:
        async with self.connect() as conn:
            await conn.execute("DELETE FROM kv WHERE key = ?;", (key,))
            await conn.commit()

    async def keys(self) -> List[str]:
        async with self.connect() as conn:
            cur = await conn.execute("SELECT key FROM kv ORDER BY key;")
            rows = await cur.fetchall()
            await cur.close()
        return [row[0] for row in rows]
