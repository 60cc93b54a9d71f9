"""Milestone operations."""
from typing import Optional

from .. import classes
from ..client import HulyClient
from ..errors import MilestoneNotFoundError
from ..schemas import (
    MILESTONE_STATUS_FROM_HULY,
    MILESTONE_STATUS_TO_HULY,
    CreateMilestoneParams,
    DeleteMilestoneParams,
    GetMilestoneParams,
    ListMilestonesParams,
    MilestoneStatus,
    SetIssueMilestoneParams,
)
from .shared import SORT_DESCENDING, find_issue, find_project


async def find_milestone(client: HulyClient, project: dict, reference: str) -> dict:
    milestone = await client.find_one(classes.MILESTONE, {"space": project["_id"], "_id": reference})
    if milestone is None:
        milestone = await client.find_one(classes.MILESTONE, {"space": project["_id"], "label": reference})
    if milestone is None:
        raise MilestoneNotFoundError(reference, project["identifier"])
    return milestone


def _status_name(value: Optional[int]) -> Optional[str]:
    status = MILESTONE_STATUS_FROM_HULY.get(value) if value is not None else None
    return status.value if status else None


def _milestone_summary(milestone: dict) -> dict:
    return {
        "id": milestone["_id"],
        "label": milestone.get("label"),
        "status": _status_name(milestone.get("status")),
        "target_date": milestone.get("targetDate"),
    }


async def list_milestones(client: HulyClient, params: ListMilestonesParams) -> dict:
    project = await find_project(client, params.project)
    milestones = await client.find_all(
        classes.MILESTONE,
        {"space": project["_id"]},
        {"limit": params.limit, "sort": {"targetDate": SORT_DESCENDING}},
    )
    return {"milestones": [_milestone_summary(m) for m in milestones], "total": len(milestones)}


async def get_milestone(client: HulyClient, params: GetMilestoneParams) -> dict:
    project = await find_project(client, params.project)
    milestone = await find_milestone(client, project, params.milestone)
    result = _milestone_summary(milestone)
    result["description"] = milestone.get("description") or None
    result["project"] = project["identifier"]
    return result


async def create_milestone(client: HulyClient, params: CreateMilestoneParams) -> dict:
    project = await find_project(client, params.project)
    milestone_id = await client.create_doc(
        classes.MILESTONE,
        project["_id"],
        {
            "label": params.label,
            "description": params.description or "",
            "status": MILESTONE_STATUS_TO_HULY[MilestoneStatus.PLANNED],
            "targetDate": params.target_date,
            "comments": 0,
            "attachments": 0,
        },
    )
    return {"id": milestone_id, "label": params.label}


async def set_issue_milestone(client: HulyClient, params: SetIssueMilestoneParams) -> dict:
    project = await find_project(client, params.project)
    issue = await find_issue(client, project, params.identifier)
    milestone_id = None
    if params.milestone is not None:
        milestone_id = (await find_milestone(client, project, params.milestone))["_id"]
    await client.update_doc(classes.ISSUE, project["_id"], issue["_id"], {"milestone": milestone_id})
    return {"identifier": issue.get("identifier"), "milestone": milestone_id}


async def delete_milestone(client: HulyClient, params: DeleteMilestoneParams) -> dict:
    project = await find_project(client, params.project)
    milestone = await find_milestone(client, project, params.milestone)
    await client.remove_doc(classes.MILESTONE, project["_id"], milestone["_id"])
    return {"id": milestone["_id"], "deleted": True}
