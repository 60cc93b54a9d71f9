"""Issue tools."""
from huly_client.operations import issues
from huly_client.schemas import (
    AddIssueLabelParams,
    CreateIssueParams,
    DeleteIssueParams,
    GetIssueParams,
    ListIssuesParams,
    UpdateIssueParams,
)

from .registry import define_tool

CATEGORY = "issues"

TOOLS = [
    define_tool(
        "list_issues",
        "List issues in a project, most recently modified first. Filter by status name or assignee.",
        ListIssuesParams,
        issues.list_issues,
        CATEGORY,
    ),
    define_tool(
        "get_issue",
        "Get full details of an issue. Accepts 'HULY-123' or just '123' as identifier.",
        GetIssueParams,
        issues.get_issue,
        CATEGORY,
    ),
    define_tool(
        "create_issue",
        "Create an issue in a project. Status defaults to the project's default status. "
        "Priority is one of: urgent, high, medium, low, no-priority.",
        CreateIssueParams,
        issues.create_issue,
        CATEGORY,
    ),
    define_tool(
        "update_issue",
        "Update fields of an existing issue. Only provided fields are changed; an empty assignee unassigns.",
        UpdateIssueParams,
        issues.update_issue,
        CATEGORY,
    ),
    define_tool(
        "delete_issue",
        "Permanently delete an issue.",
        DeleteIssueParams,
        issues.delete_issue,
        CATEGORY,
    ),
    define_tool(
        "add_issue_label",
        "Attach a label to an issue, creating the label if it does not exist.",
        AddIssueLabelParams,
        issues.add_issue_label,
        CATEGORY,
    ),
]
