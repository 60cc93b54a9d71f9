"""Map tool failures to MCP tool results.

Every failure a tool call can produce ends up here and becomes a
``ToolResponse`` with ``is_error=True``:

- Parameter validation failures -> tag ``validation``
- Not-found and invalid-value domain errors -> tag is the error class name
- Connection and authentication failures -> tag ``connection``
- Anything else -> tag ``internal`` with a generic message

The mapping is total. Internal details (tracebacks, stack frames) are logged
to stderr and never sent to the caller.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from mcp.types import CallToolResult, TextContent
from pydantic import ValidationError

from huly_client.errors import HulyAuthError, HulyConnectionError, HulyError, InvalidStatusError, NotFoundError

logger = logging.getLogger("huly-mcp.error_mapping")

# JSON-RPC error codes
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

VALIDATION_TAG = "validation"
CONNECTION_TAG = "connection"
INTERNAL_TAG = "internal"
UNKNOWN_TOOL_TAG = "unknown_tool"

Severity = Literal["expected", "unexpected"]

CONNECTION_MESSAGE = "Connection error: could not reach the Huly server"
AUTH_MESSAGE = "Authentication error: the Huly server rejected the credentials"
INTERNAL_MESSAGE = "Internal error: an unexpected error occurred"


@dataclass
class ToolResponse:
    """Result of one tool call plus metadata that stays server side."""

    content: list[dict] = field(default_factory=list)
    is_error: bool = False
    error_tag: Optional[str] = None
    error_code: Optional[int] = None
    severity: Optional[Severity] = None

    @property
    def text(self) -> str:
        return "\n".join(c.get("text", "") for c in self.content)

    def to_call_tool_result(self) -> CallToolResult:
        """Strip the server-side fields and build the protocol result."""
        return CallToolResult(
            content=[TextContent(type="text", text=c["text"]) for c in self.content],
            isError=self.is_error,
        )


def _error_response(text: str, tag: str, code: int, severity: Severity) -> ToolResponse:
    return ToolResponse(
        content=[{"type": "text", "text": text}],
        is_error=True,
        error_tag=tag,
        error_code=code,
        severity=severity,
    )


def _format_location(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "(root)"


def map_validation_error(tool_name: str, error: ValidationError) -> ToolResponse:
    """Describe every violated constraint, naming the offending field."""
    problems = "; ".join(f"{_format_location(e['loc'])}: {e['msg']}" for e in error.errors())
    return _error_response(
        f"Invalid parameters for {tool_name}: {problems}",
        VALIDATION_TAG,
        INVALID_PARAMS,
        "expected",
    )


def map_domain_error(error: BaseException, tool_name: Optional[str] = None) -> ToolResponse:
    if isinstance(error, ValidationError):
        return map_validation_error(tool_name or "tool", error)

    if isinstance(error, (NotFoundError, InvalidStatusError)):
        return _error_response(str(error), error.tag, INVALID_PARAMS, "expected")

    if isinstance(error, HulyAuthError):
        logger.warning(f"Authentication failure during {tool_name}: {error}")
        return _error_response(AUTH_MESSAGE, CONNECTION_TAG, INTERNAL_ERROR, "unexpected")

    if isinstance(error, HulyConnectionError):
        logger.warning(f"Connection failure during {tool_name}: {error}")
        return _error_response(CONNECTION_MESSAGE, CONNECTION_TAG, INTERNAL_ERROR, "unexpected")

    if isinstance(error, HulyError):
        return _error_response(str(error), error.tag, INVALID_PARAMS, "expected")

    logger.error(f"Unexpected error during {tool_name}: {type(error).__name__}: {error}", exc_info=error)
    return _error_response(INTERNAL_MESSAGE, INTERNAL_TAG, INTERNAL_ERROR, "unexpected")


def create_success_response(result: Any) -> ToolResponse:
    return ToolResponse(content=[{"type": "text", "text": json.dumps(result, indent=2, default=str)}])


def create_unknown_tool_error(tool_name: str) -> ToolResponse:
    return _error_response(f"Unknown tool: {tool_name}", UNKNOWN_TOOL_TAG, INVALID_PARAMS, "expected")
