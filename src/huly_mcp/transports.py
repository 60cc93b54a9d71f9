"""Transport bindings for the MCP server.

Two interchangeable bindings implement ``Transport``:

- ``StdioTransport`` serves one protocol server over stdin/stdout and
  finishes when stdin reaches end of input.
- ``HttpTransport`` mounts a stateless streamable-HTTP endpoint on an app
  built by an ``HttpServerFactory`` and serves it. Every POST gets its own
  protocol server so concurrent callers never share dispatch state.

``start`` either succeeds or raises ``TransportError``; so does ``close``.
"""
import asyncio
import contextlib
import logging
import socket
from typing import Any, Callable, Optional, Protocol

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.types import Message, Receive, Scope, Send

logger = logging.getLogger("huly-mcp.transports")

MCP_PATH = "/mcp"
LOCAL_HOSTS = ("127.0.0.1", "localhost", "::1")

# JSON-RPC error codes used by the HTTP endpoint
SERVER_ERROR = -32000
INTERNAL_ERROR = -32603

# Upper bound on waiting for in-flight HTTP requests at shutdown
HTTP_DRAIN_SECONDS = 5

ServerFactory = Callable[[], Server]


class TransportError(Exception):
    """Raised when a transport fails to start or to close."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class Transport:
    """Common interface of the stdio and HTTP bindings."""

    name = "transport"

    async def start(self, server_factory: ServerFactory) -> None:
        raise NotImplementedError

    async def wait_closed(self) -> None:
        """Resolve when the transport terminates on its own."""
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


# ============================================================================
# Stdio
# ============================================================================


class StdioTransport(Transport):
    name = "stdio"

    def __init__(self, streams_factory: Callable[[], Any] = stdio_server):
        self._streams_factory = streams_factory
        self._task: Optional[asyncio.Task] = None
        self._closed = asyncio.Event()

    async def start(self, server_factory: ServerFactory) -> None:
        loop = asyncio.get_running_loop()
        connected: asyncio.Future = loop.create_future()
        try:
            server = server_factory()
        except Exception as e:
            raise TransportError(f"Failed to create MCP server: {e}", e) from e
        self._task = asyncio.create_task(self._serve(server, connected))
        try:
            await connected
        except Exception as e:
            raise TransportError(f"Could not open stdio streams: {e}", e) from e

    async def _serve(self, server: Server, connected: asyncio.Future) -> None:
        try:
            async with self._streams_factory() as (read_stream, write_stream):
                connected.set_result(None)
                await server.run(read_stream, write_stream, server.create_initialization_options())
            logger.info("stdin closed, stdio transport finished")
        except Exception as e:
            if not connected.done():
                connected.set_exception(e)
            else:
                logger.error(f"stdio transport failed: {type(e).__name__}: {e}")
        finally:
            if not connected.done():
                connected.set_exception(TransportError("stdio transport closed before connecting"))
            self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def close(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            raise TransportError(f"Failed to close stdio transport: {e}", e) from e


# ============================================================================
# HTTP
# ============================================================================


class ClosableServer(Protocol):
    async def close(self) -> None: ...


class HttpServerFactory(Protocol):
    """Builds and serves the HTTP app; injected so tests need no real socket."""

    def create_app(self, host: str, server_factory: ServerFactory) -> Any: ...

    async def listen(self, app: Any, port: int, host: str) -> ClosableServer: ...


def _jsonrpc_error(code: int, message: str) -> dict:
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": None}


class StatelessMcpEndpoint:
    """ASGI endpoint running a fresh protocol server for every request."""

    def __init__(self, server_factory: ServerFactory):
        self._server_factory = server_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response_started = False

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            server = self._server_factory()
            transport = StreamableHTTPServerTransport(mcp_session_id=None, is_json_response_enabled=True)

            async def run_server(*, task_status=anyio.TASK_STATUS_IGNORED) -> None:
                async with transport.connect() as (read_stream, write_stream):
                    task_status.started()
                    try:
                        await server.run(
                            read_stream,
                            write_stream,
                            server.create_initialization_options(),
                            stateless=True,
                        )
                    except Exception as e:
                        logger.error(f"Request-scoped MCP server failed: {type(e).__name__}: {e}")

            async with anyio.create_task_group() as tg:
                await tg.start(run_server)
                try:
                    await transport.handle_request(scope, receive, tracking_send)
                finally:
                    await transport.terminate()
                    tg.cancel_scope.cancel()
        except Exception as e:
            logger.error(f"Error handling MCP request: {type(e).__name__}: {e}")
            if not response_started:
                response = JSONResponse(_jsonrpc_error(INTERNAL_ERROR, "Internal server error"), status_code=500)
                await response(scope, receive, send)


async def method_not_allowed() -> JSONResponse:
    return JSONResponse(
        _jsonrpc_error(SERVER_ERROR, "Method not allowed. This server runs in stateless mode; use POST."),
        status_code=405,
    )


def mount_mcp_endpoint(app: FastAPI, server_factory: ServerFactory) -> None:
    app.add_route(MCP_PATH, StatelessMcpEndpoint(server_factory), methods=["POST"])
    app.add_api_route(MCP_PATH, method_not_allowed, methods=["GET", "DELETE"])


class _EmbeddedUvicornServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the caller."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class UvicornServerHandle:
    def __init__(self, server: uvicorn.Server, task: asyncio.Task):
        self._server = server
        self._task = task

    async def close(self) -> None:
        self._server.should_exit = True
        await self._task


class UvicornServerFactory:
    """Default factory: FastAPI app served by uvicorn."""

    startup_poll_interval = 0.05

    def create_app(self, host: str, server_factory: ServerFactory) -> FastAPI:
        app = FastAPI(title="Huly MCP Server", docs_url=None, redoc_url=None, openapi_url=None)
        if host in LOCAL_HOSTS:
            app.add_middleware(TrustedHostMiddleware, allowed_hosts=["127.0.0.1", "localhost", "[::1]"])

        @app.get("/health")
        def health_check():
            """Health check endpoint."""
            return {"status": "healthy"}

        mount_mcp_endpoint(app, server_factory)
        return app

    async def listen(self, app: FastAPI, port: int, host: str) -> UvicornServerHandle:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)

        config = uvicorn.Config(
            app,
            lifespan="off",
            log_level="warning",
            access_log=False,
            timeout_graceful_shutdown=HTTP_DRAIN_SECONDS,
        )
        server = _EmbeddedUvicornServer(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))
        while not server.started:
            if task.done():
                task.result()
                raise OSError(f"HTTP server on {host}:{port} exited during startup")
            await asyncio.sleep(self.startup_poll_interval)
        return UvicornServerHandle(server, task)


class HttpTransport(Transport):
    name = "http"

    def __init__(self, factory: Optional[HttpServerFactory] = None, port: int = 3000, host: str = "127.0.0.1"):
        self.factory = factory or UvicornServerFactory()
        self.port = port
        self.host = host
        self.app: Any = None
        self._server: Optional[ClosableServer] = None
        self._closed = asyncio.Event()

    async def start(self, server_factory: ServerFactory) -> None:
        try:
            self.app = self.factory.create_app(self.host, server_factory)
            self._server = await self.factory.listen(self.app, self.port, self.host)
        except Exception as e:
            raise TransportError(f"Failed to listen on {self.host}:{self.port}: {e}", e) from e
        logger.info(f"MCP HTTP server listening on http://{self.host}:{self.port}{MCP_PATH}")

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def close(self) -> None:
        server, self._server = self._server, None
        try:
            if server is not None:
                await server.close()
        except Exception as e:
            raise TransportError(f"Failed to close HTTP server: {e}", e) from e
        finally:
            self._closed.set()
