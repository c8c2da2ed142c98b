"""
Block store and resolver backends.

Provides in-memory, local file and SQLite implementations of the
BlockStore and BlockResolver interfaces.

Example:
    >>> from block_service.stores import Block, MemoryBlockStore
    >>> store = MemoryBlockStore()
    >>> await store.put(Block(cid="QmExample", bytes=b"hello world"))
    >>> await store.get("QmExample")
    b'hello world'
"""

from .base import Block, BlockResolver, BlockStore
from .factory import open_backends
from .local import LocalBlockResolver, LocalBlockStore
from .memory import MemoryBlockResolver, MemoryBlockStore
from .sqlite import SQLiteBlockResolver, SQLiteBlockStore, SQLiteConfig

__all__ = [
    # Interfaces
    "Block",
    "BlockStore",
    "BlockResolver",
    # Implementations
    "MemoryBlockStore",
    "MemoryBlockResolver",
    "LocalBlockStore",
    "LocalBlockResolver",
    "SQLiteBlockStore",
    "SQLiteBlockResolver",
    "SQLiteConfig",
    # Construction
    "open_backends",
]
