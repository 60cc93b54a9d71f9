"""Issue template tools."""
from huly_client.operations import issue_templates
from huly_client.schemas import (
    CreateIssueFromTemplateParams,
    CreateIssueTemplateParams,
    DeleteIssueTemplateParams,
    GetIssueTemplateParams,
    ListIssueTemplatesParams,
    UpdateIssueTemplateParams,
)

from .registry import define_tool

CATEGORY = "issue-templates"

TOOLS = [
    define_tool(
        "list_issue_templates",
        "List issue templates of a project, most recently modified first.",
        ListIssueTemplatesParams,
        issue_templates.list_issue_templates,
        CATEGORY,
    ),
    define_tool(
        "get_issue_template",
        "Get an issue template by id or title.",
        GetIssueTemplateParams,
        issue_templates.get_issue_template,
        CATEGORY,
    ),
    define_tool(
        "create_issue_template",
        "Create an issue template with default title, description, priority, assignee, component and estimation.",
        CreateIssueTemplateParams,
        issue_templates.create_issue_template,
        CATEGORY,
    ),
    define_tool(
        "create_issue_from_template",
        "Create an issue from a template. Given fields override the template's values.",
        CreateIssueFromTemplateParams,
        issue_templates.create_issue_from_template,
        CATEGORY,
    ),
    define_tool(
        "update_issue_template",
        "Update an issue template. Pass null for assignee or component to clear it.",
        UpdateIssueTemplateParams,
        issue_templates.update_issue_template,
        CATEGORY,
    ),
    define_tool(
        "delete_issue_template",
        "Delete an issue template.",
        DeleteIssueTemplateParams,
        issue_templates.delete_issue_template,
        CATEGORY,
    ),
]
