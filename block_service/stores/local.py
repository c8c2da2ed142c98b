"""
Local file-based block store and resolver.

Blocks are stored one file per CID; names are kept in a single JSON
map that is rewritten atomically on every update.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path

from ..exceptions import BlockNotFoundError, NameNotFoundError, StorageIOError
from .base import Block, BlockResolver, BlockStore
from .file_ops import ensure_directory, read_bytes, read_json, write_bytes_atomic, write_json_atomic

logger = logging.getLogger(__name__)

DEFAULT_ROOT = Path.home() / ".block-service"


class LocalBlockStore(BlockStore):
    """Local file-based block store.

    CIDs are opaque client strings, so file names are derived from
    their SHA-256 digest rather than used directly.

    Directory structure:
    {base_path}/
      blocks/
        {digest[:2]}/
          {digest}
    """

    def __init__(self, base_path: str | Path | None = None) -> None:
        """Initialize local storage.

        Args:
            base_path: Root directory (default: ~/.block-service)
        """
        self.base_path = Path(base_path) if base_path else DEFAULT_ROOT

    def _block_file(self, cid: str) -> Path:
        """Get the file path for a CID."""
        digest = hashlib.sha256(str(cid).encode("utf-8")).hexdigest()
        return self.base_path / "blocks" / digest[:2] / digest

    async def put(self, block: Block) -> None:
        await write_bytes_atomic(self._block_file(block.cid), bytes(block.bytes))

    async def get(self, cid: str) -> bytes:
        data = await read_bytes(self._block_file(cid))
        if data is None:
            raise BlockNotFoundError(cid)
        return data

    async def close(self) -> None:
        """Close storage (no-op for local storage)."""
        pass


class LocalBlockResolver(BlockResolver):
    """Local file-based name resolver.

    The name map lives in {base_path}/names.json. It is loaded once and
    written through on each update. Updates are serialized with a lock,
    so concurrent updates to different names are never lost and the file
    is never torn; for the same name the last update wins.
    """

    def __init__(self, base_path: str | Path | None = None) -> None:
        self.base_path = Path(base_path) if base_path else DEFAULT_ROOT
        self._names: dict[str, str] | None = None
        self._lock = asyncio.Lock()

    @property
    def names_file(self) -> Path:
        return self.base_path / "names.json"

    async def _load(self) -> dict[str, str]:
        if self._names is None:
            data = await read_json(self.names_file)
            if data is not None and not isinstance(data, dict):
                raise StorageIOError(
                    "parse_json", str(self.names_file), ValueError("expected an object")
                )
            # An update may have published a newer map while we were reading
            if self._names is None:
                self._names = {str(k): str(v) for k, v in (data or {}).items()}
        return self._names

    async def resolve_name(self, name: str) -> str:
        names = await self._load()
        cid = names.get(name)
        if cid is None:
            raise NameNotFoundError(name)
        return cid

    async def update_name(self, name: str, cid: str) -> None:
        async with self._lock:
            names = dict(await self._load())
            names[name] = cid
            await ensure_directory(self.base_path)
            await write_json_atomic(self.names_file, names)
            # Only publish the new map once it is on disk
            self._names = names

    async def close(self) -> None:
        """Close resolver (no-op for local storage)."""
        pass
