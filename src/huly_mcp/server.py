"""Huly MCP Server - expose a Huly workspace to AI assistants.

``HulyMcpServer`` owns the process lifecycle: it wires the tool registry into
the protocol's list-tools and call-tool handlers, starts exactly one
transport, and shuts down cleanly on SIGINT/SIGTERM, end of input or an
explicit ``stop()``.
"""
import asyncio
import logging
import os
import signal
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from mcp import types
from mcp.server import Server
from mcp.types import Tool

from huly_client.client import HulyClient

from . import __version__
from .config import (
    ConfigFileError,
    ConfigValidationError,
    McpServerConfig,
    load_huly_config,
    load_server_config,
)
from .error_mapping import UNKNOWN_TOOL_TAG, ToolResponse, create_unknown_tool_error
from .telemetry import SessionStartProps, Telemetry, ToolCalledProps, get_telemetry
from .tools import ToolRegistry, create_filtered_registry, parse_toolsets
from .transports import HttpServerFactory, HttpTransport, StdioTransport, Transport, TransportError

logger = logging.getLogger("huly-mcp")

SERVER_NAME = "huly-mcp"
SHUTDOWN_GRACE_SECONDS = 2.0
AUTH_METHOD = "token"

# Set once per process by the first list-tools request
_first_list_tools_fired = False


def reset_first_list_tools() -> None:
    global _first_list_tools_fired
    _first_list_tools_fired = False


class RunState(Enum):
    NOT_RUNNING = "not_running"
    RUNNING = "running"


class McpServerError(Exception):
    """Lifecycle failure: already running, connect/listen failure or close failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def _safe_telemetry(method: Callable, *args: Any) -> None:
    try:
        method(*args)
    except Exception as e:
        logger.debug(f"Telemetry call {getattr(method, '__name__', method)} failed: {e}")


# ============================================================================
# Request handlers
# ============================================================================


async def dispatch_tool_call(
    registry: ToolRegistry,
    client: HulyClient,
    telemetry: Telemetry,
    name: str,
    arguments: Optional[dict],
) -> ToolResponse:
    tool = registry.get(name)
    if tool is None:
        logger.warning(f"Unknown tool requested: {name}")
        _safe_telemetry(telemetry.tool_called, ToolCalledProps(name, "error", 0.0, UNKNOWN_TOOL_TAG))
        return create_unknown_tool_error(name)

    logger.info(f"Tool call: {name}")
    return await tool.handler(arguments or {}, client, telemetry)


def create_mcp_server(registry: ToolRegistry, client: HulyClient, telemetry: Telemetry) -> Server:
    """Build a protocol server with the list-tools and call-tool handlers."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        global _first_list_tools_fired
        if not _first_list_tools_fired:
            _first_list_tools_fired = True
            _safe_telemetry(telemetry.first_list_tools)
        return [definition.to_mcp_tool() for definition in registry.list()]

    # Registered directly so arguments reach the tool's own validation
    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        response = await dispatch_tool_call(
            registry, client, telemetry, request.params.name, request.params.arguments
        )
        return types.ServerResult(response.to_call_tool_result())

    server.request_handlers[types.CallToolRequest] = call_tool
    return server


# ============================================================================
# Lifecycle
# ============================================================================


@dataclass
class _RunHandle:
    """Per-run state, present only while running."""

    transport: Transport
    stop_event: asyncio.Event = field(default_factory=asyncio.Event)
    signals: set = field(default_factory=set)
    shutdown_task: Optional[asyncio.Task] = None


class HulyMcpServer:
    def __init__(
        self,
        registry: ToolRegistry,
        client: HulyClient,
        telemetry: Telemetry,
        toolsets: Optional[list[str]] = None,
        http_factory: Optional[HttpServerFactory] = None,
        stdio_streams: Optional[Callable[[], Any]] = None,
        exit_func: Callable[[int], Any] = sys.exit,
        shutdown_grace: float = SHUTDOWN_GRACE_SECONDS,
    ):
        self.registry = registry
        self.client = client
        self.telemetry = telemetry
        self.toolsets = toolsets
        self.http_factory = http_factory
        self.stdio_streams = stdio_streams
        self.exit_func = exit_func
        self.shutdown_grace = shutdown_grace
        self.state = RunState.NOT_RUNNING
        self._run: Optional[_RunHandle] = None

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING

    def _create_transport(self, config: McpServerConfig) -> Transport:
        if config.transport == "http":
            return HttpTransport(self.http_factory, port=config.http_port, host=config.http_host)
        if self.stdio_streams is not None:
            return StdioTransport(self.stdio_streams)
        return StdioTransport()

    def _server_factory(self) -> Server:
        return create_mcp_server(self.registry, self.client, self.telemetry)

    async def run(self, config: McpServerConfig) -> None:
        if self.state is RunState.RUNNING:
            raise McpServerError("MCP server is already running")

        handle = _RunHandle(transport=self._create_transport(config))
        self.state = RunState.RUNNING
        self._run = handle

        _safe_telemetry(
            self.telemetry.session_start,
            SessionStartProps(
                transport=config.transport,
                auth_method=AUTH_METHOD,
                tool_count=len(self.registry),
                toolsets=self.toolsets,
            ),
        )

        try:
            await handle.transport.start(self._server_factory)
        except TransportError as e:
            logger.error(f"Failed to connect {config.transport} transport: {e}")
            try:
                await self._shutdown(handle)
            except TransportError as close_error:
                logger.warning(f"Transport cleanup after connect failure failed: {close_error}")
            raise McpServerError(f"Failed to connect {config.transport} transport: {e}", e) from e
        except asyncio.CancelledError:
            await self._finish_run(handle, started_late=True)
            raise

        # stop() may have run its shutdown while the transport was still starting
        started_late = handle.shutdown_task is not None
        try:
            if started_late:
                logger.info("Stop requested while the transport was starting")
            else:
                self._install_signal_handlers(handle)
                logger.info(f"Huly MCP server running on {config.transport} with {len(self.registry)} tools")
                await self._wait_for_termination(handle)
        finally:
            await self._finish_run(handle, started_late)

        if config.auto_exit:
            self.exit_func(0)

    async def _wait_for_termination(self, handle: _RunHandle) -> None:
        waiters = [
            asyncio.create_task(handle.transport.wait_closed()),
            asyncio.create_task(handle.stop_event.wait()),
        ]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

    async def _finish_run(self, handle: _RunHandle, started_late: bool) -> None:
        """Shut down even when ``run`` is cancelled; a late transport is closed again."""
        try:
            await asyncio.shield(self._shutdown(handle))
            if started_late:
                await handle.transport.close()
        except TransportError as e:
            raise McpServerError(f"Failed to close server: {e}", e) from e

    async def stop(self) -> None:
        handle = self._run
        if self.state is RunState.NOT_RUNNING or handle is None:
            return
        handle.stop_event.set()
        try:
            await self._shutdown(handle)
        except TransportError as e:
            raise McpServerError(f"Failed to stop server: {e}", e) from e

    async def _shutdown(self, handle: _RunHandle) -> None:
        """Run the shutdown sequence once per run; later callers join it."""
        if handle.shutdown_task is None:
            handle.shutdown_task = asyncio.ensure_future(self._do_shutdown(handle))
        await asyncio.shield(handle.shutdown_task)

    async def _do_shutdown(self, handle: _RunHandle) -> None:
        try:
            self._remove_signal_handlers(handle)
            await self._flush_telemetry()
            await handle.transport.close()
        finally:
            self.state = RunState.NOT_RUNNING
            if self._run is handle:
                self._run = None
            logger.info("Huly MCP server stopped")

    async def _flush_telemetry(self) -> None:
        try:
            await asyncio.wait_for(self.telemetry.shutdown(), timeout=self.shutdown_grace)
        except asyncio.TimeoutError:
            logger.warning(f"Telemetry flush did not finish within {self.shutdown_grace}s")
        except Exception as e:
            logger.debug(f"Telemetry flush failed: {e}")

    def _on_signal(self, sig: signal.Signals, handle: _RunHandle) -> None:
        logger.info(f"Received {sig.name}, shutting down")
        handle.stop_event.set()

    def _install_signal_handlers(self, handle: _RunHandle) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            if sig in handle.signals:
                continue
            try:
                loop.add_signal_handler(sig, self._on_signal, sig, handle)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                logger.debug(f"Cannot install handler for {sig.name}: {e}")
                continue
            handle.signals.add(sig)

    def _remove_signal_handlers(self, handle: _RunHandle) -> None:
        loop = asyncio.get_running_loop()
        for sig in list(handle.signals):
            loop.remove_signal_handler(sig)
            handle.signals.discard(sig)


# ============================================================================
# Entry point
# ============================================================================


def configure_logging() -> None:
    # stdout carries the stdio protocol, so logs go to stderr
    level = os.getenv("HULY_MCP_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )


async def main() -> None:
    server_config = load_server_config(auto_exit_default=True)
    huly_config = load_huly_config()
    toolsets = parse_toolsets(os.getenv("TOOLSETS"))
    registry = create_filtered_registry(toolsets)
    telemetry = get_telemetry(__version__)

    logger.info(f"Huly MCP server {__version__} connecting to {huly_config.url} (workspace {huly_config.workspace})")
    async with HulyClient(
        huly_config.url,
        huly_config.workspace,
        huly_config.token,
        timeout=huly_config.timeout_seconds,
    ) as client:
        server = HulyMcpServer(registry, client, telemetry, toolsets=toolsets)
        await server.run(server_config)


def run_main() -> None:
    configure_logging()
    try:
        asyncio.run(main())
    except (ConfigValidationError, ConfigFileError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except McpServerError as e:
        logger.error(f"MCP server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run_main()
