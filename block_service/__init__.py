"""
Block Service

A minimal content-addressable block store with a mutable name resolver,
exposed over HTTP.

Provides:
- BlockStore / BlockResolver interfaces with memory, local file and SQLite backends
- BlockService, an aiohttp server that also forwards both interfaces in-process

Usage:

    >>> from block_service import BlockService, MemoryBlockResolver, MemoryBlockStore
    >>> async with BlockService(MemoryBlockStore(), MemoryBlockResolver(), port=3000) as service:
    ...     await service.put(Block(cid="QmExample", bytes=b"hello world"))

HTTP surface:

    PUT /?cid=<cid>                  store the raw request body
    GET /?cid=<cid>                  fetch the raw bytes
    GET /resolve?name=<name>         resolve a name to a CID (JSON string)
    PUT /update?name=<name>&cid=<cid>  point a name at a CID
"""

from .config import BackendKind, ServiceConfig
from .exceptions import (
    BlockNotFoundError,
    BlockServiceError,
    ConfigurationError,
    MalformedRequestError,
    NameNotFoundError,
    NotFoundError,
    ServiceStateError,
    StorageConnectionError,
    StorageError,
    StorageIOError,
)
from .service import BlockService, ServiceState
from .stores import (
    Block,
    BlockResolver,
    BlockStore,
    LocalBlockResolver,
    LocalBlockStore,
    MemoryBlockResolver,
    MemoryBlockStore,
    SQLiteBlockResolver,
    SQLiteBlockStore,
    SQLiteConfig,
    open_backends,
)

__all__ = [
    # Core abstractions
    "Block",
    "BlockStore",
    "BlockResolver",
    # Backends
    "MemoryBlockStore",
    "MemoryBlockResolver",
    "LocalBlockStore",
    "LocalBlockResolver",
    "SQLiteBlockStore",
    "SQLiteBlockResolver",
    "SQLiteConfig",
    "open_backends",
    # Service
    "BlockService",
    "ServiceState",
    "ServiceConfig",
    "BackendKind",
    # Exceptions
    "BlockServiceError",
    "StorageError",
    "NotFoundError",
    "BlockNotFoundError",
    "NameNotFoundError",
    "StorageIOError",
    "StorageConnectionError",
    "MalformedRequestError",
    "ServiceStateError",
    "ConfigurationError",
]

__version__ = "0.1.0"
