"""Issue comment tools."""
from huly_client.operations import comments
from huly_client.schemas import AddCommentParams, DeleteCommentParams, ListCommentsParams, UpdateCommentParams

from .registry import define_tool

CATEGORY = "comments"

TOOLS = [
    define_tool(
        "list_comments",
        "List comments on an issue, oldest first.",
        ListCommentsParams,
        comments.list_comments,
        CATEGORY,
    ),
    define_tool(
        "add_comment",
        "Add a comment to an issue. The body supports markdown.",
        AddCommentParams,
        comments.add_comment,
        CATEGORY,
    ),
    define_tool(
        "update_comment",
        "Replace the body of an existing comment.",
        UpdateCommentParams,
        comments.update_comment,
        CATEGORY,
    ),
    define_tool(
        "delete_comment",
        "Delete a comment from an issue.",
        DeleteCommentParams,
        comments.delete_comment,
        CATEGORY,
    ),
]
