"""
HTTP block service.

Binds one BlockStore and one BlockResolver to an aiohttp server and
forwards the store/resolver contracts so the service itself can be used
wherever a store or resolver is expected in-process.

Example:
    >>> service = BlockService(MemoryBlockStore(), MemoryBlockResolver())
    >>> await service.start(port=3000)
    >>> ...
    >>> await service.stop()
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from aiohttp import web

from .config import DEFAULT_MAX_BODY_SIZE, DEFAULT_PORT, ServiceConfig
from .exceptions import MalformedRequestError, NotFoundError, ServiceStateError
from .logging_utils import ServiceLoggerAdapter
from .stores.base import Block, BlockResolver, BlockStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, PUT, POST, DELETE",
    "Access-Control-Allow-Headers": "Content-Type",
}

LifecycleCallback = Callable[[], Awaitable[None] | None]


class ServiceState(Enum):
    """Lifecycle of a BlockService. Transitions only move forward."""

    CREATED = "created"
    STARTED = "started"
    STOPPED = "stopped"


async def _add_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    """on_response_prepare hook: every response, errors included, is CORS-permissive."""
    for key, value in CORS_HEADERS.items():
        response.headers[key] = value


def _require_param(request: web.Request, name: str) -> str:
    value = request.query.get(name)
    if value is None:
        raise MalformedRequestError(name, "missing")
    if value == "":
        raise MalformedRequestError(name, "empty")
    return value


def _bad_request(error: MalformedRequestError) -> web.Response:
    return web.json_response(
        {"error": "malformed_request", "parameter": error.parameter, "reason": error.reason},
        status=400,
    )


async def _fire(callback: LifecycleCallback | None) -> None:
    if callback is None:
        return
    result = callback()
    if inspect.isawaitable(result):
        await result


class BlockService(BlockStore, BlockResolver):
    """Network-facing composition of a block store and a name resolver.

    The service holds its store and resolver for its whole lifetime and
    only forwards to them. It subclasses the two interfaces purely to
    declare conformance; all behaviour lives in the wrapped objects.

    Lifecycle: created -> started -> stopped. start() returns once the
    listener is bound and stop() once it is fully closed. Each accepts an
    optional callback fired exactly once. Starting twice, starting after
    stop, or stopping before start raises ServiceStateError.
    """

    def __init__(
        self,
        store: BlockStore,
        resolver: BlockResolver,
        *,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ) -> None:
        """Initialize the service.

        Args:
            store: Block store receiving puts and gets
            resolver: Resolver receiving name lookups and updates
            host: Interface to bind
            port: Default port for start()
            max_body_size: Largest request body accepted on block writes
        """
        self._store = store
        self._resolver = resolver
        self.host = host
        self.default_port = port
        self.max_body_size = max_body_size

        self._state = ServiceState.CREATED
        self._runner: web.AppRunner | None = None
        self._port: int | None = None
        self._app = self._build_app()

    @classmethod
    def from_config(
        cls, config: ServiceConfig, store: BlockStore, resolver: BlockResolver
    ) -> BlockService:
        """Create a service bound to the host, port and body limit of a config."""
        return cls(
            store,
            resolver,
            host=config.host,
            port=config.port,
            max_body_size=config.max_body_size,
        )

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def app(self) -> web.Application:
        """The aiohttp application serving the HTTP surface."""
        return self._app

    @property
    def port(self) -> int | None:
        """Port actually bound, or None when not started."""
        return self._port

    @property
    def url(self) -> str | None:
        if self._port is None:
            return None
        host = "127.0.0.1" if self.host in ("0.0.0.0", "") else self.host
        return f"http://{host}:{self._port}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(
        self,
        port: int | None = None,
        on_ready: LifecycleCallback | None = None,
    ) -> None:
        """Bind the listener and begin accepting connections.

        Args:
            port: Port to bind (default: the configured port; 0 picks a free one)
            on_ready: Called once after the listener is bound

        Raises:
            ServiceStateError: If the service was already started or stopped
            OSError: If the port cannot be bound
        """
        if self._state is not ServiceState.CREATED or self._runner is not None:
            raise ServiceStateError("start", self._state.value)

        bind_port = self.default_port if port is None else port
        # A fresh app per attempt; aiohttp apps are frozen once a runner sets them up
        if self._app.frozen:
            self._app = self._build_app()
        runner = web.AppRunner(self._app)
        self._runner = runner
        try:
            await runner.setup()
            site = web.TCPSite(runner, self.host, bind_port)
            await site.start()
        except Exception:
            self._runner = None
            await runner.cleanup()
            raise

        addresses = runner.addresses
        self._port = addresses[0][1] if addresses else bind_port
        self._state = ServiceState.STARTED
        logger.info(f"BlockService HTTP server started on port {self._port}")
        await _fire(on_ready)

    async def stop(self, on_stopped: LifecycleCallback | None = None) -> None:
        """Close the listener and wait for it to shut down.

        Args:
            on_stopped: Called once after the listener is fully closed

        Raises:
            ServiceStateError: If the service is not running
        """
        if self._state is not ServiceState.STARTED or self._runner is None:
            raise ServiceStateError("stop", self._state.value)

        self._state = ServiceState.STOPPED
        runner, self._runner = self._runner, None
        await runner.cleanup()
        logger.info(f"BlockService HTTP server on port {self._port} stopped")
        self._port = None
        await _fire(on_stopped)

    async def __aenter__(self) -> BlockService:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if self._state is ServiceState.STARTED:
            await self.stop()

    # ------------------------------------------------------------------
    # HTTP surface
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application(client_max_size=self.max_body_size)
        app.on_response_prepare.append(_add_cors_headers)

        app.router.add_put("/", self.handle_put_request)
        app.router.add_get("/", self.handle_get_request, allow_head=False)
        app.router.add_get("/resolve", self.handle_resolve_request, allow_head=False)
        app.router.add_put("/update", self.handle_update_request)
        for path in ("/", "/resolve", "/update"):
            app.router.add_route("OPTIONS", path, self.handle_preflight_request)
        return app

    def _request_log(self, request: web.Request, **context: str) -> ServiceLoggerAdapter:
        return ServiceLoggerAdapter(
            logger, {"method": request.method, "path": request.path, **context}
        )

    async def handle_put_request(self, request: web.Request) -> web.Response:
        """PUT /?cid= stores the raw request body under cid."""
        try:
            cid = _require_param(request, "cid")
        except MalformedRequestError as e:
            return _bad_request(e)

        log = self._request_log(request, cid=cid)
        # Buffers the whole body regardless of content type; over-limit
        # bodies raise HTTPRequestEntityTooLarge (413)
        data = await request.read()
        try:
            await self._store.put(Block(cid=cid, bytes=data))
        except Exception:
            log.exception(f"Error handling PUT request for {cid}")
            return web.Response(status=500)

        log.debug(f"Stored {len(data)} bytes under {cid}")
        return web.Response(status=200)

    async def handle_get_request(self, request: web.Request) -> web.Response:
        """GET /?cid= returns the raw bytes stored under cid."""
        try:
            cid = _require_param(request, "cid")
        except MalformedRequestError as e:
            return _bad_request(e)

        log = self._request_log(request, cid=cid)
        try:
            data = await self._store.get(cid)
        except NotFoundError:
            log.debug(f"Block not found: {cid}")
            return web.Response(status=404)
        except Exception:
            log.exception(f"Error handling GET request for {cid}")
            return web.Response(status=500)

        return web.Response(status=200, body=data, content_type="application/octet-stream")

    async def handle_resolve_request(self, request: web.Request) -> web.Response:
        """GET /resolve?name= returns the CID for name as a JSON string."""
        try:
            name = _require_param(request, "name")
        except MalformedRequestError as e:
            return _bad_request(e)

        log = self._request_log(request, block_name=name)
        try:
            cid = await self._resolver.resolve_name(name)
        except NotFoundError:
            log.debug(f"Name not found: {name}")
            return web.Response(status=404)
        except Exception:
            log.exception(f"Error handling RESOLVE request for {name}")
            return web.Response(status=500)

        return web.json_response(cid)

    async def handle_update_request(self, request: web.Request) -> web.Response:
        """PUT /update?name=&cid= points name at cid."""
        try:
            name = _require_param(request, "name")
            cid = _require_param(request, "cid")
        except MalformedRequestError as e:
            return _bad_request(e)

        log = self._request_log(request, block_name=name, cid=cid)
        try:
            await self._resolver.update_name(name, cid)
        except Exception:
            log.exception(f"Error handling UPDATE request for {name}")
            return web.Response(status=500)

        log.debug(f"Updated {name} -> {cid}")
        return web.Response(status=200)

    async def handle_preflight_request(self, request: web.Request) -> web.Response:
        """CORS preflight; headers are added by the response hook."""
        return web.Response(status=204)

    # ------------------------------------------------------------------
    # BlockStore / BlockResolver forwarding
    # ------------------------------------------------------------------

    async def put(self, block: Block) -> None:
        await self._store.put(block)

    async def get(self, cid: str) -> bytes:
        return await self._store.get(cid)

    async def resolve_name(self, name: str) -> str:
        return await self._resolver.resolve_name(name)

    async def update_name(self, name: str, cid: str) -> None:
        await self._resolver.update_name(name, cid)

    async def close(self) -> None:
        """Stop the listener if running, then close the wrapped store and resolver."""
        if self._state is ServiceState.STARTED:
            await self.stop()
        await self._store.close()
        await self._resolver.close()
