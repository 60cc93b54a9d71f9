"""OpenTelemetry-backed telemetry sink.

One span covers the whole session; list-tools and session end are recorded
as span events. Tool calls feed a counter and a duration histogram.

Exporter selection follows the usual variables:
- OTEL_EXPORTER: ``console`` (default, writes to stderr) or ``otlp``
- OTEL_EXPORTER_OTLP_ENDPOINT: collector endpoint, read by the OTLP exporters
- OTEL_SERVICE_NAME: service name (default ``huly-mcp``)
"""
import asyncio
import logging
import os
import sys
import uuid
from typing import Optional

from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter

from .telemetry import SessionStartProps, ToolCalledProps

logger = logging.getLogger("huly-mcp.telemetry")

EXPORT_INTERVAL_MS = 60000


def _attributes(props: dict) -> dict:
    """Drop ``None`` values and flatten lists; OTel attributes reject both."""
    attrs = {}
    for key, value in props.items():
        if value is None:
            continue
        if isinstance(value, list):
            value = ",".join(str(v) for v in value)
        attrs[key] = value
    return attrs


class OpenTelemetrySink:
    """Telemetry over private tracer and meter providers."""

    def __init__(
        self,
        version: str,
        debug: bool = False,
        exporter: Optional[str] = None,
        span_exporter: Optional[SpanExporter] = None,
        metric_reader=None,
    ):
        self.version = version
        self.debug = debug
        self.session_id = str(uuid.uuid4())
        self._session_span = None

        exporter = exporter or os.getenv("OTEL_EXPORTER", "console")
        resource = Resource.create({
            SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", "huly-mcp"),
            SERVICE_VERSION: version,
            "session.id": self.session_id,
        })

        if span_exporter is None:
            if exporter == "otlp":
                span_exporter = OTLPSpanExporter()
            else:
                span_exporter = ConsoleSpanExporter(out=sys.stderr)
        if metric_reader is None:
            if exporter == "otlp":
                metric_exporter = OTLPMetricExporter()
            else:
                metric_exporter = ConsoleMetricExporter(out=sys.stderr)
            metric_reader = PeriodicExportingMetricReader(metric_exporter, export_interval_millis=EXPORT_INTERVAL_MS)

        self._tracer_provider = TracerProvider(resource=resource)
        self._tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
        self._meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])

        self._tracer = self._tracer_provider.get_tracer("huly-mcp", version)
        meter = self._meter_provider.get_meter("huly-mcp", version)
        self._tool_calls = meter.create_counter(
            "huly_mcp.tool_calls",
            description="Tool calls by tool and outcome",
        )
        self._tool_duration = meter.create_histogram(
            "huly_mcp.tool_call.duration",
            unit="ms",
            description="Tool call duration",
        )

    def _debug(self, event: str, props: Optional[dict] = None) -> None:
        if self.debug:
            logger.info(f"[telemetry] {event} {props or {}}")

    def session_start(self, props: SessionStartProps) -> None:
        try:
            data = {**props.to_dict(), "version": self.version, "session_id": self.session_id}
            self._session_span = self._tracer.start_span("huly_mcp.session", attributes=_attributes(data))
            self._session_span.add_event("session_start", attributes=_attributes(data))
            self._debug("session_start", data)
        except Exception as e:
            logger.debug(f"Telemetry session_start failed: {e}")

    def first_list_tools(self) -> None:
        try:
            if self._session_span is not None:
                self._session_span.add_event("first_list_tools")
            self._debug("first_list_tools")
        except Exception as e:
            logger.debug(f"Telemetry first_list_tools failed: {e}")

    def tool_called(self, props: ToolCalledProps) -> None:
        try:
            attrs = _attributes({
                "tool_name": props.tool_name,
                "status": props.status,
                "error_tag": props.error_tag,
            })
            self._tool_calls.add(1, attrs)
            self._tool_duration.record(props.duration_ms, attrs)
            self._debug("tool_called", props.to_dict())
        except Exception as e:
            logger.debug(f"Telemetry tool_called failed: {e}")

    def _flush(self) -> None:
        if self._session_span is not None:
            self._session_span.add_event("session_end")
            self._session_span.end()
            self._session_span = None
        self._tracer_provider.shutdown()
        self._meter_provider.shutdown()

    async def shutdown(self) -> None:
        try:
            self._debug("session_end")
            await asyncio.to_thread(self._flush)
        except Exception as e:
            logger.debug(f"Telemetry shutdown failed: {e}")
