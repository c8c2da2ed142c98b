"""
SQLite block store and resolver.

Single-file persistence for lightweight deployments. Each component keeps
its own aiosqlite connection; pointing both at the same file is supported.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosqlite

from ..exceptions import (
    BlockNotFoundError,
    NameNotFoundError,
    StorageConnectionError,
    StorageIOError,
)
from .base import Block, BlockResolver, BlockStore

logger = logging.getLogger(__name__)

_CREATE_BLOCKS_SQL = """
CREATE TABLE IF NOT EXISTS blocks (
    cid TEXT NOT NULL PRIMARY KEY,
    bytes BLOB NOT NULL
)
"""

_CREATE_NAMES_SQL = """
CREATE TABLE IF NOT EXISTS names (
    name TEXT NOT NULL PRIMARY KEY,
    cid TEXT NOT NULL
)
"""


@dataclass
class SQLiteConfig:
    """Configuration for SQLite storage."""

    db_path: str | Path = ":memory:"

    @classmethod
    def from_env(cls) -> SQLiteConfig:
        """Create config from environment variables."""
        return cls(db_path=os.environ.get("BLOCK_SERVICE_SQLITE_PATH", ":memory:"))


class _SQLiteComponent:
    """Connection handling shared by the SQLite store and resolver."""

    _schema_sql: str = ""

    def __init__(self, config: SQLiteConfig):
        self.config = config
        self.conn: Any = None  # aiosqlite.Connection
        self._initialized = False

    async def initialize(self) -> None:
        """Open the connection and create the schema."""
        if self._initialized:
            return

        db_path = str(self.config.db_path)
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            self.conn = await aiosqlite.connect(db_path)
            await self.conn.execute(self._schema_sql)
            await self.conn.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StorageConnectionError(db_path, e) from e

        self._initialized = True
        logger.info(f"{type(self).__name__} initialized at {db_path}")

    def _require_conn(self) -> Any:
        if not self._initialized or self.conn is None:
            raise StorageConnectionError(str(self.config.db_path), RuntimeError("not initialized"))
        return self.conn

    async def close(self) -> None:
        """Close the database connection."""
        if self.conn is not None:
            await self.conn.close()
            self.conn = None
        self._initialized = False


class SQLiteBlockStore(_SQLiteComponent, BlockStore):
    """SQLite-backed block store. INSERT OR REPLACE gives overwrite semantics."""

    _schema_sql = _CREATE_BLOCKS_SQL

    @classmethod
    async def create(cls, config: SQLiteConfig | None = None) -> SQLiteBlockStore:
        """Create and initialize a SQLite block store."""
        store = cls(config or SQLiteConfig.from_env())
        await store.initialize()
        return store

    async def put(self, block: Block) -> None:
        conn = self._require_conn()
        try:
            await conn.execute(
                "INSERT OR REPLACE INTO blocks (cid, bytes) VALUES (?, ?)",
                (str(block.cid), bytes(block.bytes)),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            raise StorageIOError("put", str(self.config.db_path), e) from e

    async def get(self, cid: str) -> bytes:
        conn = self._require_conn()
        try:
            async with conn.execute("SELECT bytes FROM blocks WHERE cid = ?", (str(cid),)) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageIOError("get", str(self.config.db_path), e) from e

        if row is None:
            raise BlockNotFoundError(cid)
        return bytes(row[0])


class SQLiteBlockResolver(_SQLiteComponent, BlockResolver):
    """SQLite-backed name resolver."""

    _schema_sql = _CREATE_NAMES_SQL

    @classmethod
    async def create(cls, config: SQLiteConfig | None = None) -> SQLiteBlockResolver:
        """Create and initialize a SQLite name resolver."""
        resolver = cls(config or SQLiteConfig.from_env())
        await resolver.initialize()
        return resolver

    async def resolve_name(self, name: str) -> str:
        conn = self._require_conn()
        try:
            async with conn.execute("SELECT cid FROM names WHERE name = ?", (name,)) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageIOError("resolve_name", str(self.config.db_path), e) from e

        if row is None:
            raise NameNotFoundError(name)
        return row[0]

    async def update_name(self, name: str, cid: str) -> None:
        conn = self._require_conn()
        try:
            await conn.execute(
                "INSERT OR REPLACE INTO names (name, cid) VALUES (?, ?)",
                (name, str(cid)),
            )
            await conn.commit()
        except aiosqlite.Error as e:
            raise StorageIOError("update_name", str(self.config.db_path), e) from e
