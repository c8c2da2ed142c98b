"""
Service configuration.

Configuration can be provided directly or via environment variables:

Environment Variables:
    BLOCK_SERVICE_PORT: Port to bind (default: 3000)
    BLOCK_SERVICE_HOST: Interface to bind (default: 0.0.0.0)
    BLOCK_SERVICE_BACKEND: memory, local or sqlite (default: memory)
    BLOCK_SERVICE_DATA_PATH: Root directory for the local backend
    BLOCK_SERVICE_SQLITE_PATH: Database file for the sqlite backend (default: :memory:)
    BLOCK_SERVICE_MAX_BODY_SIZE: Largest accepted block in bytes, 0 for no limit (default: 64 MiB)
    BLOCK_SERVICE_LOG_LEVEL: Logging level name (default: INFO)
    BLOCK_SERVICE_JSON_LOGS: Emit JSON-lines logs when "true"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .exceptions import ConfigurationError

DEFAULT_PORT = 3000
DEFAULT_MAX_BODY_SIZE = 64 * 1024 * 1024


class BackendKind(Enum):
    """Storage technology behind the service."""

    MEMORY = "memory"
    LOCAL = "local"
    SQLITE = "sqlite"


@dataclass
class ServiceConfig:
    """Configuration for the block service.

    Attributes:
        port: Port to bind; 0 picks a free port
        host: Interface to bind
        backend: Storage technology for the store and resolver
        data_path: Root directory for the local backend
        sqlite_path: Database path for the sqlite backend
        max_body_size: Largest request body accepted on block writes (0 = unlimited)
        log_level: Logging level name
        json_logs: Emit structured JSON logs instead of plain text
    """

    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    backend: BackendKind = BackendKind.MEMORY
    data_path: str | None = None
    sqlite_path: str = ":memory:"
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    log_level: str = "INFO"
    json_logs: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.backend, str):
            self.backend = parse_backend(self.backend)
        if not 0 <= self.port <= 65535:
            raise ConfigurationError("port", "must be between 0 and 65535", str(self.port))
        if self.max_body_size < 0:
            raise ConfigurationError("max_body_size", "must be >= 0", str(self.max_body_size))
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError("log_level", "unknown level", self.log_level)

    @property
    def local_root(self) -> Path:
        """Root directory for the local backend."""
        if self.data_path:
            return Path(self.data_path).expanduser()
        return Path.home() / ".block-service"

    @classmethod
    def from_environment(cls) -> ServiceConfig:
        """Create configuration from environment variables.

        Returns:
            ServiceConfig populated from environment variables

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        return cls(
            port=_int_from_env("BLOCK_SERVICE_PORT", DEFAULT_PORT),
            host=os.environ.get("BLOCK_SERVICE_HOST", "0.0.0.0"),
            backend=parse_backend(os.environ.get("BLOCK_SERVICE_BACKEND", "memory")),
            data_path=os.environ.get("BLOCK_SERVICE_DATA_PATH"),
            sqlite_path=os.environ.get("BLOCK_SERVICE_SQLITE_PATH", ":memory:"),
            max_body_size=_int_from_env("BLOCK_SERVICE_MAX_BODY_SIZE", DEFAULT_MAX_BODY_SIZE),
            log_level=os.environ.get("BLOCK_SERVICE_LOG_LEVEL", "INFO"),
            json_logs=os.environ.get("BLOCK_SERVICE_JSON_LOGS", "").lower() == "true",
        )


def parse_backend(value: str) -> BackendKind:
    """Parse a backend name, case-insensitively."""
    try:
        return BackendKind(value.strip().lower())
    except ValueError:
        choices = ", ".join(kind.value for kind in BackendKind)
        raise ConfigurationError("backend", f"must be one of {choices}", value) from None


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, "must be an integer", raw) from None
