"""
Abstract block store and resolver interfaces.

Defines the contract that all storage backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Block:
    """An immutable byte sequence addressed by an opaque content identifier.

    The CID is client-chosen and never verified against the bytes.
    """

    cid: str
    bytes: bytes


class BlockStore(ABC):
    """Abstract interface for block storage.

    All storage implementations (memory, local, sqlite) must
    implement this interface.
    """

    @abstractmethod
    async def put(self, block: Block) -> None:
        """Store a block, overwriting any block with the same CID.

        Args:
            block: The block to store. Zero-length bytes are accepted.

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def get(self, cid: str) -> bytes:
        """Read the bytes stored under a CID.

        Args:
            cid: The content identifier

        Returns:
            The complete byte sequence

        Raises:
            BlockNotFoundError: If nothing is stored under the CID
            StorageError: If the read fails
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the store and cleanup resources."""
        ...


class BlockResolver(ABC):
    """Abstract interface for mutable name resolution.

    Names map to CIDs with last-write-wins semantics.
    """

    @abstractmethod
    async def resolve_name(self, name: str) -> str:
        """Get the CID currently associated with a name.

        Raises:
            NameNotFoundError: If the name was never updated
            StorageError: If the read fails
        """
        ...

    @abstractmethod
    async def update_name(self, name: str, cid: str) -> None:
        """Associate a name with a CID, replacing any prior association.

        Raises:
            StorageError: If the write fails
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the resolver and cleanup resources."""
        ...
