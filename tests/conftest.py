"""
Shared test configuration and fixtures.

Provides in-memory backends and a running BlockService bound to a free
port on localhost, plus an aiohttp client session pointed at it.
"""

from collections.abc import AsyncIterator

import aiohttp
import pytest

from block_service import BlockService, MemoryBlockResolver, MemoryBlockStore


@pytest.fixture
def memory_store() -> MemoryBlockStore:
    return MemoryBlockStore()


@pytest.fixture
def memory_resolver() -> MemoryBlockResolver:
    return MemoryBlockResolver()


@pytest.fixture
async def service(
    memory_store: MemoryBlockStore, memory_resolver: MemoryBlockResolver
) -> AsyncIterator[BlockService]:
    """A started service on 127.0.0.1 with a free port."""
    svc = BlockService(memory_store, memory_resolver, host="127.0.0.1", port=0)
    await svc.start()
    yield svc
    await svc.close()


@pytest.fixture
async def http(service: BlockService) -> AsyncIterator[aiohttp.ClientSession]:
    """Client session whose base URL is the running service."""
    async with aiohttp.ClientSession(base_url=service.url) as session:
        yield session
