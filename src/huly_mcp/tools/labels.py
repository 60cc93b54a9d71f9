"""Label tools."""
from huly_client.operations import labels
from huly_client.schemas import CreateLabelParams, DeleteLabelParams, ListLabelsParams, RemoveIssueLabelParams

from .registry import define_tool

CATEGORY = "labels"

TOOLS = [
    define_tool(
        "list_labels",
        "List issue labels defined in the workspace.",
        ListLabelsParams,
        labels.list_labels,
        CATEGORY,
    ),
    define_tool(
        "create_label",
        "Create an issue label. Fails if a label with the same title exists.",
        CreateLabelParams,
        labels.create_label,
        CATEGORY,
    ),
    define_tool(
        "delete_label",
        "Delete an issue label by id or title.",
        DeleteLabelParams,
        labels.delete_label,
        CATEGORY,
    ),
    define_tool(
        "remove_issue_label",
        "Detach a label from an issue.",
        RemoveIssueLabelParams,
        labels.remove_issue_label,
        CATEGORY,
    ),
]
