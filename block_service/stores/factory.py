"""Build the store/resolver pair for a service configuration."""

from __future__ import annotations

import logging

from ..config import BackendKind, ServiceConfig
from .base import BlockResolver, BlockStore
from .local import LocalBlockResolver, LocalBlockStore
from .memory import MemoryBlockResolver, MemoryBlockStore
from .sqlite import SQLiteBlockResolver, SQLiteBlockStore, SQLiteConfig

logger = logging.getLogger(__name__)


async def open_backends(config: ServiceConfig) -> tuple[BlockStore, BlockResolver]:
    """Create and initialize the configured store and resolver.

    Args:
        config: Service configuration

    Returns:
        (store, resolver) ready for use; callers own both and must close them
    """
    if config.backend is BackendKind.LOCAL:
        root = config.local_root
        logger.info(f"Using local backend at {root}")
        return LocalBlockStore(root), LocalBlockResolver(root)

    if config.backend is BackendKind.SQLITE:
        sqlite_config = SQLiteConfig(db_path=config.sqlite_path)
        logger.info(f"Using sqlite backend at {sqlite_config.db_path}")
        store = await SQLiteBlockStore.create(sqlite_config)
        try:
            resolver = await SQLiteBlockResolver.create(sqlite_config)
        except Exception:
            await store.close()
            raise
        return store, resolver

    logger.info("Using in-memory backend")
    return MemoryBlockStore(), MemoryBlockResolver()
