"""
Command-line entry point for the block service.

Usage:
    block-service --port 3000 --backend sqlite --sqlite-path ./blocks.db

Flags override the BLOCK_SERVICE_* environment variables.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import replace

from .config import BackendKind, ServiceConfig, parse_backend
from .exceptions import BlockServiceError
from .logging_utils import configure_logging
from .service import BlockService
from .stores import open_backends

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="block-service",
        description="Content-addressed block store and name resolver over HTTP",
        epilog="Unset flags fall back to BLOCK_SERVICE_* environment variables.",
    )
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to bind (0 picks a free port)")
    parser.add_argument(
        "--backend",
        choices=[kind.value for kind in BackendKind],
        help="Storage backend for blocks and names",
    )
    parser.add_argument("--data-path", help="Root directory for the local backend")
    parser.add_argument("--sqlite-path", help="Database file for the sqlite backend")
    parser.add_argument("--max-body-size", type=int, help="Largest accepted block in bytes")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="Emit structured JSON logs",
    )
    return parser


def resolve_config(args: argparse.Namespace, base: ServiceConfig | None = None) -> ServiceConfig:
    """Apply explicitly given command-line flags on top of a base config."""
    config = base or ServiceConfig.from_environment()
    overrides = {
        "host": args.host,
        "port": args.port,
        "backend": parse_backend(args.backend) if args.backend else None,
        "data_path": args.data_path,
        "sqlite_path": args.sqlite_path,
        "max_body_size": args.max_body_size,
        "log_level": args.log_level,
        "json_logs": args.json_logs,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


async def serve(config: ServiceConfig, stop_event: asyncio.Event | None = None) -> None:
    """Run the service until stop_event is set (or SIGINT/SIGTERM arrives)."""
    if stop_event is None:
        stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Not available on Windows event loops or outside the main thread
            pass

    try:
        store, resolver = await open_backends(config)
        service = BlockService.from_config(config, store, resolver)
        try:
            await service.start()
            await stop_event.wait()
            logger.info("Shutdown requested")
        finally:
            await service.close()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
    except BlockServiceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level, json_logs=config.json_logs)

    try:
        asyncio.run(serve(config))
    except OSError as e:
        logger.error(f"Could not bind {config.host}:{config.port}: {e}")
        return 1
    except BlockServiceError as e:
        logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
