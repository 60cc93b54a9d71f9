"""Tests for telemetry selection and the OpenTelemetry sink."""
import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from huly_mcp.telemetry import NoopTelemetry, SessionStartProps, ToolCalledProps, get_telemetry
from huly_mcp.telemetry.otel import OpenTelemetrySink


@pytest.fixture
def spans():
    return InMemorySpanExporter()


@pytest.fixture
def metrics():
    return InMemoryMetricReader()


@pytest.fixture
def sink(spans, metrics):
    return OpenTelemetrySink(version="1.0.0", span_exporter=spans, metric_reader=metrics)


def metric_points(reader):
    points = {}
    data = reader.get_metrics_data()
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points[metric.name] = list(metric.data.data_points)
    return points


class TestSelection:
    """Test choosing an implementation from the environment."""

    @pytest.mark.parametrize("value", ["0", "false", "OFF", "no"])
    def test_disabled(self, monkeypatch, value):
        """Test that the toggle selects the no-op sink."""
        monkeypatch.setenv("HULY_MCP_TELEMETRY", value)
        assert isinstance(get_telemetry("1.0.0"), NoopTelemetry)

    def test_enabled_by_default(self, monkeypatch):
        """Test that telemetry is on unless disabled."""
        monkeypatch.delenv("HULY_MCP_TELEMETRY", raising=False)
        monkeypatch.setenv("OTEL_EXPORTER", "console")
        assert isinstance(get_telemetry("1.0.0"), OpenTelemetrySink)

    async def test_noop_accepts_everything(self):
        """Test that the no-op sink accepts every call."""
        sink = NoopTelemetry()
        sink.session_start(SessionStartProps("stdio", "token", 3))
        sink.first_list_tools()
        sink.tool_called(ToolCalledProps("get_issue", "success", 1.0))
        await sink.shutdown()


class TestOpenTelemetrySink:
    """Test the OpenTelemetry sink."""

    async def test_session_span(self, sink, spans):
        """Test that the session is one span carrying the lifecycle events."""
        sink.session_start(SessionStartProps("http", "token", 48, ["issues", "projects"]))
        sink.first_list_tools()
        await sink.shutdown()

        finished = spans.get_finished_spans()
        assert len(finished) == 1
        span = finished[0]
        assert span.name == "huly_mcp.session"
        assert span.attributes["transport"] == "http"
        assert span.attributes["tool_count"] == 48
        assert span.attributes["toolsets"] == "issues,projects"
        assert [e.name for e in span.events] == ["session_start", "first_list_tools", "session_end"]

    def test_tool_calls_recorded(self, sink, metrics):
        """Test that tool calls feed the counter and the histogram."""
        sink.tool_called(ToolCalledProps("get_issue", "success", 12.5))
        sink.tool_called(ToolCalledProps("get_issue", "error", 3.0, "IssueNotFoundError"))

        points = metric_points(metrics)

        counts = {p.attributes.get("status"): p.value for p in points["huly_mcp.tool_calls"]}
        assert counts == {"success": 1, "error": 1}
        errored = [p for p in points["huly_mcp.tool_calls"] if p.attributes.get("status") == "error"][0]
        assert errored.attributes["error_tag"] == "IssueNotFoundError"
        assert sum(p.count for p in points["huly_mcp.tool_call.duration"]) == 2

    async def test_shutdown_without_session(self, sink, spans):
        """Test that shutdown works when no session was started."""
        await sink.shutdown()
        assert spans.get_finished_spans() == ()

    async def test_errors_are_swallowed(self, sink):
        """Test that a broken instrument never raises to the caller."""
        class Broken:
            def add(self, *args, **kwargs):
                raise RuntimeError("exporter down")

            def record(self, *args, **kwargs):
                raise RuntimeError("exporter down")

        sink._tool_calls = Broken()
        sink._tool_duration = Broken()

        sink.tool_called(ToolCalledProps("get_issue", "success", 1.0))
        await sink.shutdown()
        await sink.shutdown()

    def test_session_ids_are_unique(self, spans, metrics):
        """Test that every sink gets its own session id."""
        first = OpenTelemetrySink("1.0.0", span_exporter=spans, metric_reader=metrics)
        second = OpenTelemetrySink("1.0.0", span_exporter=InMemorySpanExporter(), metric_reader=InMemoryMetricReader())
        assert first.session_id != second.session_id
