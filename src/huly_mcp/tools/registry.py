"""Tool definitions and the handler factory.

A tool pairs an MCP-facing definition (name, description, JSON input schema,
category, annotations) with a handler built by ``create_tool_handler``. The
handler validates raw arguments with the tool's pydantic model, runs the
operation once and turns the outcome into a ``ToolResponse``. It never raises
and reports exactly one outcome to telemetry per call.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from mcp.types import Tool, ToolAnnotations
from pydantic import BaseModel, ValidationError

from huly_client.client import HulyClient

from ..error_mapping import ToolResponse, create_success_response, map_domain_error, map_validation_error
from ..telemetry import Telemetry, ToolCalledProps

logger = logging.getLogger("huly-mcp.tools")

Operation = Callable[[HulyClient, Any], Awaitable[Any]]
ToolHandler = Callable[[dict, HulyClient, Telemetry], Awaitable[ToolResponse]]

READ_PREFIXES = ("list_", "get_", "search_", "fulltext_", "download_", "preview_")
CREATE_PREFIXES = ("create_", "add_", "upload_", "send_", "log_")
UPDATE_PREFIXES = (
    "update_", "set_", "pin_", "unpin_", "mark_", "archive_",
    "start_", "stop_", "save_", "unsave_", "remove_",
)
DELETE_PREFIXES = ("delete_",)


def derive_title(name: str) -> str:
    """``list_issues`` -> ``List Issues``."""
    return " ".join(word.capitalize() for word in name.split("_") if word)


def derive_annotations(name: str) -> ToolAnnotations:
    """Derive the display title and behaviour hints from the tool name."""
    if name.startswith(READ_PREFIXES):
        hints = dict(readOnlyHint=True, destructiveHint=False, idempotentHint=True)
    elif name.startswith(DELETE_PREFIXES):
        hints = dict(readOnlyHint=False, destructiveHint=True, idempotentHint=True)
    elif name.startswith(UPDATE_PREFIXES):
        hints = dict(readOnlyHint=False, destructiveHint=False, idempotentHint=True)
    elif name.startswith(CREATE_PREFIXES):
        hints = dict(readOnlyHint=False, destructiveHint=False, idempotentHint=False)
    else:
        hints = dict(readOnlyHint=False, destructiveHint=True, idempotentHint=False)
    return ToolAnnotations(title=derive_title(name), openWorldHint=True, **hints)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict
    category: str
    annotations: Optional[ToolAnnotations] = None

    def to_mcp_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema,
            annotations=self.annotations,
        )


@dataclass(frozen=True)
class RegisteredTool:
    definition: ToolDefinition
    handler: ToolHandler = field(compare=False)

    @property
    def name(self) -> str:
        return self.definition.name


def _report(telemetry: Telemetry, props: ToolCalledProps) -> None:
    try:
        telemetry.tool_called(props)
    except Exception as e:
        logger.debug(f"Telemetry tool_called raised: {e}")


def create_tool_handler(
    name: str,
    params_model: type[BaseModel],
    operation: Operation,
) -> ToolHandler:
    """Wrap ``operation`` as parse -> invoke -> serialize."""

    async def handler(arguments: dict, client: HulyClient, telemetry: Telemetry) -> ToolResponse:
        start = time.monotonic()

        def elapsed_ms() -> float:
            return round((time.monotonic() - start) * 1000, 3)

        try:
            params = params_model.model_validate(arguments if arguments is not None else {})
        except ValidationError as e:
            response = map_validation_error(name, e)
            _report(telemetry, ToolCalledProps(name, "error", elapsed_ms(), response.error_tag))
            return response
        except Exception as e:
            response = map_domain_error(e, name)
            _report(telemetry, ToolCalledProps(name, "error", elapsed_ms(), response.error_tag))
            return response

        try:
            result = await operation(client, params)
            response = create_success_response(result)
        except Exception as e:
            response = map_domain_error(e, name)
            _report(telemetry, ToolCalledProps(name, "error", elapsed_ms(), response.error_tag))
            return response

        _report(telemetry, ToolCalledProps(name, "success", elapsed_ms()))
        return response

    return handler


def define_tool(
    name: str,
    description: str,
    params_model: type[BaseModel],
    operation: Operation,
    category: str,
) -> RegisteredTool:
    """Build a registered tool whose input schema comes from ``params_model``."""
    definition = ToolDefinition(
        name=name,
        description=description,
        input_schema=params_model.model_json_schema(),
        category=category,
        annotations=derive_annotations(name),
    )
    return RegisteredTool(definition, create_tool_handler(name, params_model, operation))
