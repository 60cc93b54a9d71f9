"""Milestone tools."""
from huly_client.operations import milestones
from huly_client.schemas import (
    CreateMilestoneParams,
    DeleteMilestoneParams,
    GetMilestoneParams,
    ListMilestonesParams,
    SetIssueMilestoneParams,
)

from .registry import define_tool

CATEGORY = "milestones"

TOOLS = [
    define_tool(
        "list_milestones",
        "List milestones in a project, latest target date first.",
        ListMilestonesParams,
        milestones.list_milestones,
        CATEGORY,
    ),
    define_tool(
        "get_milestone",
        "Get a milestone by id or label.",
        GetMilestoneParams,
        milestones.get_milestone,
        CATEGORY,
    ),
    define_tool(
        "create_milestone",
        "Create a milestone in a project with a target date (Unix ms).",
        CreateMilestoneParams,
        milestones.create_milestone,
        CATEGORY,
    ),
    define_tool(
        "set_issue_milestone",
        "Assign an issue to a milestone, or clear it with null.",
        SetIssueMilestoneParams,
        milestones.set_issue_milestone,
        CATEGORY,
    ),
    define_tool(
        "delete_milestone",
        "Delete a milestone.",
        DeleteMilestoneParams,
        milestones.delete_milestone,
        CATEGORY,
    ),
]
