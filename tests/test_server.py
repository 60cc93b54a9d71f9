"""Tests for dispatch and the server lifecycle."""
import asyncio
import os
import signal
import sys
from contextlib import asynccontextmanager

import pytest
from mcp import types

from conftest import ExplodingTelemetry, MemoryStdio, RecordingTelemetry, wait_until
from huly_client.schemas import ToolParams
from huly_mcp.config import McpServerConfig
from huly_mcp.server import (
    HulyMcpServer,
    McpServerError,
    RunState,
    create_mcp_server,
    dispatch_tool_call,
)
from huly_mcp.tools import build_registry, define_tool


class EchoParams(ToolParams):
    value: str


class RecordingOperation:
    def __init__(self):
        self.calls = []

    async def __call__(self, client, params):
        self.calls.append(params)
        return {"echo": params.value}


@pytest.fixture
def operation():
    return RecordingOperation()


@pytest.fixture
def registry(operation):
    return build_registry([define_tool("echo_value", "Echo a value", EchoParams, operation, "test")])


@pytest.fixture
def stdio():
    return MemoryStdio()


def make_server(registry, telemetry, **kwargs):
    return HulyMcpServer(registry, client=None, telemetry=telemetry, **kwargs)


async def start_in_background(server, config):
    task = asyncio.create_task(server.run(config))
    await wait_until(lambda: server.is_running and server._run is not None and bool(server._run.signals) or task.done())
    return task


class FailingHttpFactory:
    def create_app(self, host, server_factory):
        return {"host": host}

    async def listen(self, app, port, host):
        raise OSError("address already in use")


class GatedHttpFactory:
    """Listen blocks until the gate opens."""

    def __init__(self):
        self.listening = asyncio.Event()
        self.gate = asyncio.Event()
        self.closed = 0

    def create_app(self, host, server_factory):
        return {"host": host}

    async def listen(self, app, port, host):
        self.listening.set()
        await self.gate.wait()
        return self

    async def close(self):
        self.closed += 1


class SlowFlushTelemetry(RecordingTelemetry):
    async def shutdown(self):
        await asyncio.sleep(0.05)
        await super().shutdown()


def list_tools_request():
    return types.ListToolsRequest(method="tools/list")


def call_tool_request(name, arguments=None):
    return types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments or {}),
    )


class TestDispatch:
    """Test call-tool dispatch."""

    async def test_unknown_tool(self, registry, telemetry, operation):
        """Test that an unknown name yields an error result and runs nothing."""
        response = await dispatch_tool_call(registry, None, telemetry, "no_such_tool", {})

        assert response.is_error
        assert response.text == "Unknown tool: no_such_tool"
        assert operation.calls == []
        calls = telemetry.of("tool_called")
        assert len(calls) == 1
        assert calls[0].tool_name == "no_such_tool"
        assert calls[0].error_tag == "unknown_tool"

    async def test_known_tool(self, registry, telemetry, operation):
        """Test that a known name runs its handler."""
        response = await dispatch_tool_call(registry, None, telemetry, "echo_value", {"value": "hi"})

        assert not response.is_error
        assert len(operation.calls) == 1

    async def test_missing_arguments_treated_as_empty(self, registry, telemetry, operation):
        """Test that absent arguments reach validation as an empty object."""
        response = await dispatch_tool_call(registry, None, telemetry, "echo_value", None)

        assert response.is_error
        assert "value" in response.text
        assert operation.calls == []

    async def test_unknown_tool_via_protocol_handler(self, registry, telemetry, operation):
        """Test the call-tool protocol handler returns isError for unknown names."""
        server = create_mcp_server(registry, None, telemetry)
        handler = server.request_handlers[types.CallToolRequest]

        result = await handler(call_tool_request("no_such_tool"))

        assert result.root.isError is True
        assert result.root.content[0].text == "Unknown tool: no_such_tool"
        assert operation.calls == []

    async def test_validation_via_protocol_handler(self, registry, telemetry, operation):
        """Test that bad arguments come back as an error result rather than a protocol error."""
        server = create_mcp_server(registry, None, telemetry)
        handler = server.request_handlers[types.CallToolRequest]

        result = await handler(call_tool_request("echo_value", {"wrong": 1}))

        assert result.root.isError is True
        assert "Invalid parameters for echo_value" in result.root.content[0].text
        assert operation.calls == []

    async def test_telemetry_failure_does_not_break_unknown_tool(self, registry):
        """Test that a failing sink does not affect dispatch."""
        response = await dispatch_tool_call(registry, None, ExplodingTelemetry(), "nope", {})
        assert response.is_error


class TestListTools:
    """Test the list-tools handler."""

    async def test_lists_registered_definitions(self, registry, telemetry):
        """Test that every registered tool is advertised with its schema."""
        server = create_mcp_server(registry, None, telemetry)

        result = await server.request_handlers[types.ListToolsRequest](list_tools_request())

        tools = result.root.tools
        assert [t.name for t in tools] == ["echo_value"]
        assert "value" in tools[0].inputSchema["properties"]
        assert tools[0].annotations.openWorldHint is True

    async def test_first_list_tools_reported_once(self, registry, telemetry):
        """Test that only the first list-tools request is reported."""
        server = create_mcp_server(registry, None, telemetry)
        handler = server.request_handlers[types.ListToolsRequest]

        for _ in range(3):
            await handler(list_tools_request())

        assert len(telemetry.of("first_list_tools")) == 1

    async def test_first_list_tools_once_per_process(self, registry, telemetry):
        """Test that a second protocol server in the same process does not report again."""
        for _ in range(2):
            server = create_mcp_server(registry, None, telemetry)
            await server.request_handlers[types.ListToolsRequest](list_tools_request())

        assert len(telemetry.of("first_list_tools")) == 1


class TestLifecycle:
    """Test run and stop."""

    async def test_end_of_input_flushes_before_run_returns(self, registry, telemetry, stdio):
        """Test that stdin EOF shuts down and flushes telemetry once."""
        server = make_server(registry, telemetry, stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())

        await stdio.end_of_input()
        await asyncio.wait_for(task, 5)

        assert telemetry.shutdown_calls == 1
        assert server.state is RunState.NOT_RUNNING
        assert stdio.opened == 1

    async def test_session_start_reported(self, registry, telemetry, stdio):
        """Test the session start payload."""
        server = make_server(registry, telemetry, stdio_streams=stdio, toolsets=["test"])
        task = await start_in_background(server, McpServerConfig())
        await stdio.end_of_input()
        await asyncio.wait_for(task, 5)

        starts = telemetry.of("session_start")
        assert len(starts) == 1
        assert starts[0].transport == "stdio"
        assert starts[0].auth_method == "token"
        assert starts[0].tool_count == 1
        assert starts[0].toolsets == ["test"]

    async def test_second_run_rejected(self, registry, telemetry, stdio):
        """Test that run while running fails and leaves the first run alone."""
        server = make_server(registry, telemetry, stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())

        with pytest.raises(McpServerError) as exc_info:
            await server.run(McpServerConfig())

        assert str(exc_info.value) == "MCP server is already running"
        assert server.is_running
        assert not task.done()
        assert stdio.opened == 1

        await server.stop()
        await asyncio.wait_for(task, 5)

    async def test_stop_when_not_running_is_noop(self, registry, telemetry):
        """Test that stop before run does nothing."""
        server = make_server(registry, telemetry)

        await server.stop()
        await server.stop()

        assert telemetry.events == []
        assert server.state is RunState.NOT_RUNNING

    async def test_stop_while_running(self, registry, telemetry, stdio):
        """Test that stop ends the run and flushes once."""
        server = make_server(registry, telemetry, stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())

        await server.stop()
        await asyncio.wait_for(task, 5)
        await server.stop()

        assert telemetry.shutdown_calls == 1
        assert not server.is_running

    async def test_can_run_again_after_stop(self, registry, telemetry):
        """Test that a stopped server can be started again."""
        server = make_server(registry, telemetry, stdio_streams=MemoryStdio())
        task = await start_in_background(server, McpServerConfig())
        await server.stop()
        await asyncio.wait_for(task, 5)

        server.stdio_streams = MemoryStdio()
        task = await start_in_background(server, McpServerConfig())
        assert server.is_running
        await server.stop()
        await asyncio.wait_for(task, 5)

        assert telemetry.shutdown_calls == 2

    async def test_auto_exit(self, registry, telemetry, stdio):
        """Test that auto exit terminates the process after cleanup."""
        exits = []

        def exit_func(code):
            assert telemetry.shutdown_calls == 1
            exits.append(code)

        server = make_server(registry, telemetry, stdio_streams=stdio, exit_func=exit_func)
        task = await start_in_background(server, McpServerConfig(auto_exit=True))
        await stdio.end_of_input()
        await asyncio.wait_for(task, 5)

        assert exits == [0]

    async def test_no_exit_without_auto_exit(self, registry, telemetry, stdio):
        """Test that run simply returns when auto exit is off."""
        exits = []
        server = make_server(registry, telemetry, stdio_streams=stdio, exit_func=exits.append)
        task = await start_in_background(server, McpServerConfig())
        await stdio.end_of_input()
        await asyncio.wait_for(task, 5)

        assert exits == []

    async def test_http_listen_failure(self, registry, telemetry):
        """Test that a listen failure surfaces as a lifecycle error."""
        server = make_server(registry, telemetry, http_factory=FailingHttpFactory())

        with pytest.raises(McpServerError) as exc_info:
            await server.run(McpServerConfig(transport="http", http_port=3000))

        assert "address already in use" in str(exc_info.value)
        assert not server.is_running
        assert telemetry.shutdown_calls == 1

    async def test_stdio_connect_failure(self, registry, telemetry):
        """Test that a stdio connect failure surfaces as a lifecycle error."""

        @asynccontextmanager
        async def broken_streams():
            raise OSError("stdin is not readable")
            yield

        server = make_server(registry, telemetry, stdio_streams=broken_streams)

        with pytest.raises(McpServerError) as exc_info:
            await server.run(McpServerConfig())

        assert str(exc_info.value).startswith("Failed to connect stdio transport")
        assert "stdin is not readable" in str(exc_info.value)
        assert not server.is_running

    async def test_slow_telemetry_flush_is_bounded(self, registry, stdio):
        """Test that a hanging flush does not block shutdown past the grace period."""

        class SlowTelemetry(RecordingTelemetry):
            async def shutdown(self):
                await asyncio.sleep(30)

        server = make_server(registry, SlowTelemetry(), stdio_streams=stdio, shutdown_grace=0.05)
        task = await start_in_background(server, McpServerConfig())
        await stdio.end_of_input()
        await asyncio.wait_for(task, 5)

        assert not server.is_running

    async def test_failing_telemetry_does_not_break_lifecycle(self, registry, stdio):
        """Test that a sink raising everywhere does not affect run or stop."""
        server = make_server(registry, ExplodingTelemetry(), stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())
        await server.stop()
        await asyncio.wait_for(task, 5)

        assert not server.is_running

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    async def test_sigterm_shuts_down_and_removes_handlers(self, registry, telemetry, stdio):
        """Test that SIGTERM stops the server and its handlers are removed."""
        server = make_server(registry, telemetry, stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())
        handle = server._run
        assert handle.signals == {signal.SIGINT, signal.SIGTERM}

        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(task, 5)

        assert telemetry.shutdown_calls == 1
        assert handle.signals == set()
        assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL


class TestShutdownRaces:
    """Test shutdown under cancellation and overlapping stop calls."""

    async def test_cancelled_run_still_shuts_down(self, registry, telemetry, stdio):
        """Test that cancelling run removes handlers, flushes and allows a new run."""
        server = make_server(registry, telemetry, stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())
        handle = server._run

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert server.state is RunState.NOT_RUNNING
        assert handle.signals == set()
        assert telemetry.shutdown_calls == 1

        server.stdio_streams = MemoryStdio()
        task = await start_in_background(server, McpServerConfig())
        assert server.is_running
        await server.stop()
        await asyncio.wait_for(task, 5)

    async def test_cancelled_while_listening(self, registry, telemetry):
        """Test that cancelling run during listen still completes shutdown."""
        factory = GatedHttpFactory()
        server = make_server(registry, telemetry, http_factory=factory)
        task = asyncio.create_task(server.run(McpServerConfig(transport="http")))
        await asyncio.wait_for(factory.listening.wait(), 5)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not server.is_running
        assert telemetry.shutdown_calls == 1

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    async def test_stop_during_listen_leaks_nothing(self, registry, telemetry):
        """Test that a server coming up after stop is closed and installs no handlers."""
        factory = GatedHttpFactory()
        server = make_server(registry, telemetry, http_factory=factory)
        task = asyncio.create_task(server.run(McpServerConfig(transport="http")))
        await asyncio.wait_for(factory.listening.wait(), 5)
        handle = server._run

        await server.stop()
        factory.gate.set()
        await asyncio.wait_for(task, 5)

        assert factory.closed == 1
        assert handle.signals == set()
        assert not asyncio.get_running_loop().remove_signal_handler(signal.SIGTERM)
        assert not server.is_running
        assert telemetry.shutdown_calls == 1

    async def test_concurrent_stops_flush_once(self, registry, stdio):
        """Test that a stop arriving while another is completing joins it."""
        telemetry = SlowFlushTelemetry()
        server = make_server(registry, telemetry, stdio_streams=stdio)
        task = await start_in_background(server, McpServerConfig())

        await asyncio.gather(server.stop(), server.stop())
        await asyncio.wait_for(task, 5)

        assert telemetry.shutdown_calls == 1
        assert not server.is_running

    async def test_http_listen_failure_with_opaque_app(self, registry, telemetry):
        """Test that the app handle is never inspected by the transport."""
        server = make_server(registry, telemetry, http_factory=FailingHttpFactory())

        with pytest.raises(McpServerError) as exc_info:
            await server.run(McpServerConfig(transport="http"))

        assert "Failed to connect http transport" in str(exc_info.value)
        assert "address already in use" in str(exc_info.value)
