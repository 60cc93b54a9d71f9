"""Tool catalogue.

Each category module exposes ``CATEGORY`` and ``TOOLS``. ``build_registry``
concatenates the per-category lists into one name-keyed registry and refuses
duplicate names.
"""
import logging
from typing import Iterable, Optional

from . import (
    attachments,
    calendar,
    comments,
    components,
    contacts,
    documents,
    issue_templates,
    issues,
    labels,
    milestones,
    notifications,
    projects,
    search,
    time_tracking,
)
from .registry import RegisteredTool, ToolDefinition, create_tool_handler, define_tool, derive_annotations

logger = logging.getLogger("huly-mcp.tools")

CATEGORY_MODULES = [
    projects,
    issues,
    issue_templates,
    comments,
    milestones,
    components,
    labels,
    documents,
    attachments,
    contacts,
    calendar,
    notifications,
    time_tracking,
    search,
]

TOOLS_BY_CATEGORY: dict[str, list[RegisteredTool]] = {m.CATEGORY: m.TOOLS for m in CATEGORY_MODULES}
CATEGORY_NAMES: list[str] = list(TOOLS_BY_CATEGORY)


class ToolRegistry:
    """Immutable name-keyed catalogue of registered tools."""

    def __init__(self, tools: dict[str, RegisteredTool]):
        self._tools = dict(tools)
        self._definitions = [t.definition for t in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list(self) -> list[ToolDefinition]:
        return list(self._definitions)


def build_registry(*category_lists: Iterable[RegisteredTool]) -> ToolRegistry:
    tools: dict[str, RegisteredTool] = {}
    for tool_list in category_lists:
        for tool in tool_list:
            if tool.name in tools:
                raise ValueError(f"Tool '{tool.name}' is already registered")
            tools[tool.name] = tool
    return ToolRegistry(tools)


def parse_toolsets(value: Optional[str]) -> Optional[list[str]]:
    """Parse a comma separated list of category names.

    Returns ``None`` when nothing usable was given, meaning all categories.
    """
    if value is None or not value.strip():
        return None
    requested = [part.strip().lower() for part in value.split(",") if part.strip()]
    valid = []
    for name in requested:
        if name not in TOOLS_BY_CATEGORY:
            logger.warning(f"Unknown toolset '{name}' ignored (known: {', '.join(CATEGORY_NAMES)})")
        elif name not in valid:
            valid.append(name)
    return valid or None


def create_filtered_registry(categories: Optional[list[str]] = None) -> ToolRegistry:
    if categories is None:
        return build_registry(*TOOLS_BY_CATEGORY.values())
    return build_registry(*(TOOLS_BY_CATEGORY[c] for c in categories if c in TOOLS_BY_CATEGORY))


TOOL_REGISTRY = build_registry(*TOOLS_BY_CATEGORY.values())

__all__ = [
    "CATEGORY_NAMES",
    "TOOLS_BY_CATEGORY",
    "TOOL_REGISTRY",
    "RegisteredTool",
    "ToolDefinition",
    "ToolRegistry",
    "build_registry",
    "create_filtered_registry",
    "create_tool_handler",
    "define_tool",
    "derive_annotations",
    "parse_toolsets",
]
