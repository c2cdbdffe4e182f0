"""
PermissionStore - Always-allowed tool storage.

Persists the set of tool names the user approved with "always allow".
The whole set is read and written at once.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite
import orjson
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from voicetodo.tool.exceptions import PermissionStoreError
from voicetodo.utils.logging import get_logger

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

logger = get_logger(__name__)

ALLOWED_TOOLS_KEY = "allowed_tools"


class PermissionStore(ABC):
    """Abstract base class for always-allowed tool storage"""

    @abstractmethod
    async def load(self) -> set[str]:
        """Load the persisted set of always-allowed tool names"""
        pass

    @abstractmethod
    async def save(self, tools: Iterable[str]) -> None:
        """Replace the persisted set of always-allowed tool names"""
        pass

    async def close(self) -> None:
        """Close storage and release resources."""
        pass


class InMemoryPermissionStore(PermissionStore):
    """In-memory implementation for testing"""

    def __init__(self, initial: Iterable[str] | None = None) -> None:
        self._tools: frozenset[str] = frozenset(initial or ())

    async def load(self) -> set[str]:
        return set(self._tools)

    async def save(self, tools: Iterable[str]) -> None:
        self._tools = frozenset(tools)


class SQLitePermissionStore(PermissionStore):
    """
    SQLite implementation of PermissionStore.

    Keeps a small key/value `preferences` table; the allowed tools live
    under the `allowed_tools` key as a JSON list.
    """

    def __init__(self, db_path: str = "voicetodo.db") -> None:
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def _ensure_initialized(self) -> aiosqlite.Connection:
        """Connect and create the table on first use"""
        if self._initialized and self._connection is not None:
            return self._connection

        async with self._init_lock:
            if self._initialized and self._connection is not None:
                return self._connection

            db_path = self.db_path
            if db_path != ":memory:":
                path = Path(db_path).expanduser()
                path.parent.mkdir(parents=True, exist_ok=True)
                db_path = str(path)

            try:
                self._connection = await aiosqlite.connect(db_path)
                await self._connection.execute(
                    """
                    CREATE TABLE IF NOT EXISTS preferences (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """
                )
                await self._connection.commit()
            except aiosqlite.Error as e:
                logger.error(
                    "sqlite_permission_store_init_failed",
                    db_path=self.db_path,
                    error=str(e),
                    exc_info=True,
                )
                raise PermissionStoreError(
                    f"Failed to open permission store at {self.db_path}: {e}"
                ) from e

            self._initialized = True
            logger.info("sqlite_permission_store_initialized", db_path=self.db_path)
            return self._connection

    async def load(self) -> set[str]:
        connection = await self._ensure_initialized()
        try:
            async with connection.execute(
                "SELECT value FROM preferences WHERE key = ?", (ALLOWED_TOOLS_KEY,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("load_allowed_tools_failed", error=str(e), exc_info=True)
            raise PermissionStoreError(f"Failed to load allowed tools: {e}") from e

        if row is None:
            return set()
        try:
            return set(orjson.loads(row[0]))
        except orjson.JSONDecodeError as e:
            raise PermissionStoreError(f"Corrupt allowed tools value: {e}") from e

    async def save(self, tools: Iterable[str]) -> None:
        connection = await self._ensure_initialized()
        value = orjson.dumps(sorted(set(tools))).decode("utf-8")
        now = datetime.now(timezone.utc).isoformat()
        try:
            await connection.execute(
                """
                INSERT INTO preferences (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """,
                (ALLOWED_TOOLS_KEY, value, now),
            )
            await connection.commit()
        except aiosqlite.Error as e:
            logger.error("save_allowed_tools_failed", error=str(e), exc_info=True)
            raise PermissionStoreError(f"Failed to save allowed tools: {e}") from e

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None
            self._initialized = False


class MongoPermissionStore(PermissionStore):
    """
    MongoDB implementation of PermissionStore.

    Stores one document `{_id: "allowed_tools", tools: [...]}` in the
    preferences collection.
    """

    def __init__(
        self,
        uri: str | None = None,
        db_name: str = "voicetodo",
        collection_name: str = "preferences",
        client: AsyncIOMotorClient | None = None,
    ) -> None:
        """
        Args:
            uri: MongoDB connection URI (ignored when client is given)
            db_name: Database name
            collection_name: Collection holding preference documents
            client: Existing client to reuse
        """
        if client is None and not uri:
            raise ValueError("MongoPermissionStore requires a uri or a client")
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection_name
        self.client = client
        self._owns_client = client is None
        self._collection: "AsyncIOMotorCollection[Any] | None" = None
        self._init_lock = asyncio.Lock()

    async def _ensure_initialized(self) -> "AsyncIOMotorCollection[Any]":
        if self._collection is not None:
            return self._collection

        async with self._init_lock:
            if self._collection is not None:
                return self._collection
            if self.client is None:
                self.client = AsyncIOMotorClient(self.uri)
            self._collection = self.client[self.db_name][self.collection_name]
            logger.info(
                "mongodb_permission_store_initialized",
                db_name=self.db_name,
                collection=self.collection_name,
            )
            return self._collection

    async def load(self) -> set[str]:
        collection = await self._ensure_initialized()
        try:
            doc = await collection.find_one({"_id": ALLOWED_TOOLS_KEY})
        except PyMongoError as e:
            logger.error("load_allowed_tools_failed", error=str(e), exc_info=True)
            raise PermissionStoreError(f"Failed to load allowed tools: {e}") from e
        if not doc:
            return set()
        return set(doc.get("tools", []))

    async def save(self, tools: Iterable[str]) -> None:
        collection = await self._ensure_initialized()
        try:
            await collection.update_one(
                {"_id": ALLOWED_TOOLS_KEY},
                {
                    "$set": {
                        "tools": sorted(set(tools)),
                        "updated_at": datetime.now(timezone.utc),
                    }
                },
                upsert=True,
            )
        except PyMongoError as e:
            logger.error("save_allowed_tools_failed", error=str(e), exc_info=True)
            raise PermissionStoreError(f"Failed to save allowed tools: {e}") from e

    async def close(self) -> None:
        if self.client is not None and self._owns_client:
            self.client.close()
            self.client = None
        self._collection = None


__all__ = [
    "PermissionStore",
    "InMemoryPermissionStore",
    "SQLitePermissionStore",
    "MongoPermissionStore",
]
