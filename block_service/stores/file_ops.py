"""
File operations for the local storage backend.

Provides async read/write helpers with:
- Atomic writes using temp file + rename
- Missing files reported as None rather than raised
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..exceptions import StorageIOError


async def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageIOError("create_directory", str(path), e) from e


async def read_bytes(path: Path) -> bytes | None:
    """Read a whole file as bytes.

    Args:
        path: Path to read

    Returns:
        File contents or None if the file doesn't exist
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise StorageIOError("read_bytes", str(path), e) from e


async def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write a file atomically using temp file + rename.

    Readers see either the previous contents or the new contents, never
    a partial write.

    Args:
        path: Target path
        data: Bytes to write
    """
    await ensure_directory(path.parent)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".tmp_",
        suffix=".blk",
    )
    try:
        os.close(fd)
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(data)
            await f.flush()
            os.fsync(f.fileno())

        await aiofiles.os.replace(temp_path, path)
    except Exception as e:
        # Clean up temp file on error
        try:
            await aiofiles.os.remove(temp_path)
        except OSError:
            pass
        raise StorageIOError("write_bytes", str(path), e) from e


async def read_json(path: Path) -> dict[str, Any] | None:
    """Read a JSON file.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON data or None if file doesn't exist
    """
    try:
        if not await aiofiles.os.path.exists(path):
            return None
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
            return json.loads(content) if content.strip() else None
    except json.JSONDecodeError as e:
        raise StorageIOError("parse_json", str(path), e) from e
    except OSError as e:
        raise StorageIOError("read_json", str(path), e) from e


async def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Write JSON file atomically using temp file + rename.

    Args:
        path: Target path for JSON file
        data: Data to serialize as JSON
    """
    payload = json.dumps(data, indent=2, sort_keys=True).encode("utf-8")
    try:
        await write_bytes_atomic(path, payload)
    except StorageIOError as e:
        raise StorageIOError("write_json", str(path), e.cause) from e

