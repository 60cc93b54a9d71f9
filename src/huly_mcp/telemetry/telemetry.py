"""Observability sink interface and selection.

The server reports four things: session start, the first list-tools request,
every tool call outcome and session end (via ``shutdown``). Implementations
must never raise from any of these; the server additionally guards every call.
"""
import logging
import os
from dataclasses import asdict, dataclass
from typing import Literal, Optional, Protocol

logger = logging.getLogger("huly-mcp.telemetry")

TELEMETRY_ENV = "HULY_MCP_TELEMETRY"
TELEMETRY_DEBUG_ENV = "HULY_MCP_TELEMETRY_DEBUG"

_FALSEY = {"0", "false", "no", "off"}


@dataclass
class SessionStartProps:
    transport: Literal["stdio", "http"]
    auth_method: str
    tool_count: int
    toolsets: Optional[list[str]] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ToolCalledProps:
    tool_name: str
    status: Literal["success", "error"]
    duration_ms: float
    error_tag: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


class Telemetry(Protocol):
    def session_start(self, props: SessionStartProps) -> None: ...

    def first_list_tools(self) -> None: ...

    def tool_called(self, props: ToolCalledProps) -> None: ...

    async def shutdown(self) -> None: ...


class NoopTelemetry:
    """Telemetry implementation that records nothing."""

    def session_start(self, props: SessionStartProps) -> None:
        pass

    def first_list_tools(self) -> None:
        pass

    def tool_called(self, props: ToolCalledProps) -> None:
        pass

    async def shutdown(self) -> None:
        pass


def is_telemetry_enabled() -> bool:
    return os.getenv(TELEMETRY_ENV, "1").strip().lower() not in _FALSEY


def is_debug_enabled() -> bool:
    return os.getenv(TELEMETRY_DEBUG_ENV, "0").strip().lower() not in _FALSEY


def get_telemetry(version: str) -> Telemetry:
    """Select the telemetry implementation from the environment."""
    if not is_telemetry_enabled():
        logger.info("Telemetry disabled")
        return NoopTelemetry()

    from .otel import OpenTelemetrySink

    return OpenTelemetrySink(version=version, debug=is_debug_enabled())
