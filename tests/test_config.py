"""Tests for service configuration and backend selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from block_service import (
    BackendKind,
    BlockService,
    LocalBlockResolver,
    LocalBlockStore,
    MemoryBlockResolver,
    MemoryBlockStore,
    ServiceConfig,
    SQLiteBlockResolver,
    SQLiteBlockStore,
    open_backends,
)
from block_service.config import DEFAULT_MAX_BODY_SIZE, DEFAULT_PORT
from block_service.exceptions import ConfigurationError

ENV_VARS = (
    "BLOCK_SERVICE_PORT",
    "BLOCK_SERVICE_HOST",
    "BLOCK_SERVICE_BACKEND",
    "BLOCK_SERVICE_DATA_PATH",
    "BLOCK_SERVICE_SQLITE_PATH",
    "BLOCK_SERVICE_MAX_BODY_SIZE",
    "BLOCK_SERVICE_LOG_LEVEL",
    "BLOCK_SERVICE_JSON_LOGS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestServiceConfig:
    """Tests for ServiceConfig."""

    def test_defaults(self) -> None:
        """Defaults match the reference deployment."""
        config = ServiceConfig()

        assert config.port == DEFAULT_PORT == 3000
        assert config.backend is BackendKind.MEMORY
        assert config.max_body_size == DEFAULT_MAX_BODY_SIZE
        assert config.json_logs is False

    def test_from_environment_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        """An empty environment yields the defaults."""
        assert ServiceConfig.from_environment() == ServiceConfig()

    def test_from_environment(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Every field can come from the environment."""
        clean_env.setenv("BLOCK_SERVICE_PORT", "8080")
        clean_env.setenv("BLOCK_SERVICE_HOST", "127.0.0.1")
        clean_env.setenv("BLOCK_SERVICE_BACKEND", "LOCAL")
        clean_env.setenv("BLOCK_SERVICE_DATA_PATH", str(tmp_path))
        clean_env.setenv("BLOCK_SERVICE_MAX_BODY_SIZE", "2048")
        clean_env.setenv("BLOCK_SERVICE_LOG_LEVEL", "debug")
        clean_env.setenv("BLOCK_SERVICE_JSON_LOGS", "true")

        config = ServiceConfig.from_environment()

        assert config.port == 8080
        assert config.host == "127.0.0.1"
        assert config.backend is BackendKind.LOCAL
        assert config.local_root == tmp_path
        assert config.max_body_size == 2048
        assert config.log_level == "debug"
        assert config.json_logs is True

    def test_invalid_port_in_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        """Non-numeric ports are rejected."""
        clean_env.setenv("BLOCK_SERVICE_PORT", "http")

        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig.from_environment()

        assert exc_info.value.value == "http"

    def test_port_out_of_range(self) -> None:
        with pytest.raises(ConfigurationError):
            ServiceConfig(port=70000)

    def test_unknown_backend(self) -> None:
        """Unknown backend names list the valid choices."""
        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig(backend="redis")  # type: ignore[arg-type]

        assert "memory" in exc_info.value.reason

    def test_unknown_log_level(self) -> None:
        with pytest.raises(ConfigurationError):
            ServiceConfig(log_level="LOUD")

    def test_backend_string_is_coerced(self) -> None:
        assert ServiceConfig(backend="sqlite").backend is BackendKind.SQLITE  # type: ignore[arg-type]

    def test_default_local_root(self) -> None:
        assert ServiceConfig().local_root == Path.home() / ".block-service"


class TestOpenBackends:
    """Tests for open_backends."""

    async def test_memory(self) -> None:
        store, resolver = await open_backends(ServiceConfig())

        assert isinstance(store, MemoryBlockStore)
        assert isinstance(resolver, MemoryBlockResolver)

    async def test_local(self, tmp_path: Path) -> None:
        store, resolver = await open_backends(
            ServiceConfig(backend=BackendKind.LOCAL, data_path=str(tmp_path))
        )

        assert isinstance(store, LocalBlockStore)
        assert isinstance(resolver, LocalBlockResolver)
        assert store.base_path == tmp_path

    async def test_sqlite(self, tmp_path: Path) -> None:
        """SQLite backends are initialized and share the database file."""
        db_path = tmp_path / "blocks.db"
        store, resolver = await open_backends(
            ServiceConfig(backend=BackendKind.SQLITE, sqlite_path=str(db_path))
        )
        try:
            assert isinstance(store, SQLiteBlockStore)
            assert isinstance(resolver, SQLiteBlockResolver)
            assert db_path.exists()
        finally:
            await store.close()
            await resolver.close()

    async def test_service_from_config(self) -> None:
        """from_config carries host, port and body limit."""
        config = ServiceConfig(host="127.0.0.1", port=0, max_body_size=10)
        store, resolver = await open_backends(config)

        service = BlockService.from_config(config, store, resolver)

        assert service.host == "127.0.0.1"
        assert service.default_port == 0
        assert service.max_body_size == 10
