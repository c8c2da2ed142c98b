"""
In-memory block store and resolver.

Reference implementations used by tests and by the default service
configuration. Data is lost when the process exits.
"""

from __future__ import annotations

import logging

from ..exceptions import BlockNotFoundError, NameNotFoundError
from .base import Block, BlockResolver, BlockStore

logger = logging.getLogger(__name__)


class MemoryBlockStore(BlockStore):
    """Dictionary-backed block store.

    Each put and get is a single dict assignment or lookup with no
    suspension point in between, so concurrent writers to the same CID
    race and the last write wins. There is no lock.

    Besides the BlockStore contract it exposes maintenance helpers
    (push, read counter, size, reset) that are never routed over HTTP.
    """

    def __init__(self) -> None:
        self._blocks: dict[str, bytes] = {}
        self._read_counter = 0

    async def put(self, block: Block) -> None:
        self._blocks[str(block.cid)] = bytes(block.bytes)

    async def get(self, cid: str) -> bytes:
        try:
            data = self._blocks[str(cid)]
        except KeyError:
            raise BlockNotFoundError(cid) from None
        self._read_counter += 1
        return data

    async def push(self, other: BlockStore) -> int:
        """Copy every held block into another store.

        The source is left untouched.

        Args:
            other: Destination store

        Returns:
            Number of blocks copied
        """
        # Snapshot so puts landing during the copy don't break iteration
        items = list(self._blocks.items())
        for cid, data in items:
            await other.put(Block(cid=cid, bytes=data))
        logger.debug(f"Pushed {len(items)} blocks to {type(other).__name__}")
        return len(items)

    def count_reads(self) -> int:
        """Number of successful gets since creation or the last reset_reads()."""
        return self._read_counter

    def reset_reads(self) -> None:
        self._read_counter = 0

    def size(self) -> int:
        """Number of blocks currently held."""
        return len(self._blocks)

    def reset(self) -> None:
        """Remove every block."""
        self._blocks.clear()

    async def close(self) -> None:
        """Close store (no-op for memory storage)."""
        pass


class MemoryBlockResolver(BlockResolver):
    """Dictionary-backed name resolver."""

    def __init__(self) -> None:
        self._names: dict[str, str] = {}

    async def resolve_name(self, name: str) -> str:
        cid = self._names.get(name)
        if cid is None:
            raise NameNotFoundError(name)
        return cid

    async def update_name(self, name: str, cid: str) -> None:
        self._names[name] = cid

    async def close(self) -> None:
        """Close resolver (no-op for memory storage)."""
        pass
