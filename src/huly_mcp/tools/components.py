"""Component tools."""
from huly_client.operations import components
from huly_client.schemas import (
    CreateComponentParams,
    DeleteComponentParams,
    GetComponentParams,
    ListComponentsParams,
    SetIssueComponentParams,
)

from .registry import define_tool

CATEGORY = "components"

TOOLS = [
    define_tool(
        "list_components",
        "List components of a project.",
        ListComponentsParams,
        components.list_components,
        CATEGORY,
    ),
    define_tool(
        "get_component",
        "Get a component by id or label.",
        GetComponentParams,
        components.get_component,
        CATEGORY,
    ),
    define_tool(
        "create_component",
        "Create a component in a project, optionally with a lead.",
        CreateComponentParams,
        components.create_component,
        CATEGORY,
    ),
    define_tool(
        "set_issue_component",
        "Set the component of an issue, or clear it with null.",
        SetIssueComponentParams,
        components.set_issue_component,
        CATEGORY,
    ),
    define_tool(
        "delete_component",
        "Delete a component.",
        DeleteComponentParams,
        components.delete_component,
        CATEGORY,
    ),
]
