"""Issue operations.

Issues are attached to their project through the ``issues`` collection and
numbered from the project's ``sequence`` counter.
"""
import logging
from typing import Optional

from .. import classes
from ..client import HulyClient, generate_id
from ..errors import InvalidStatusError
from ..schemas import (
    PRIORITY_FROM_HULY,
    PRIORITY_TO_HULY,
    AddIssueLabelParams,
    CreateIssueParams,
    DeleteIssueParams,
    GetIssueParams,
    ListIssuesParams,
    UpdateIssueParams,
)
from .labels import ensure_label
from .shared import (
    SORT_DESCENDING,
    find_issue,
    find_person,
    find_project,
    find_project_and_issue,
    find_project_statuses,
    make_rank_after,
    person_display_name,
    person_names,
)

logger = logging.getLogger("huly-client.issues")


def _resolve_status(statuses: list[dict], name: str, project_identifier: str) -> str:
    wanted = name.strip().lower()
    for status in statuses:
        if status["name"].lower() == wanted:
            return status["id"]
    raise InvalidStatusError(name, project_identifier)


def _priority_name(value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    priority = PRIORITY_FROM_HULY.get(value)
    return priority.value if priority else None


async def list_issues(client: HulyClient, params: ListIssuesParams) -> dict:
    project = await find_project(client, params.project)
    statuses = await find_project_statuses(client, project)
    status_names = {s["id"]: s["name"] for s in statuses}

    query: dict = {"space": project["_id"]}
    if params.status:
        query["status"] = _resolve_status(statuses, params.status, params.project)
    if params.assignee:
        person = await find_person(client, params.assignee)
        query["assignee"] = person["_id"]

    issues = await client.find_all(
        classes.ISSUE,
        query,
        {"limit": params.limit, "sort": {"modifiedOn": SORT_DESCENDING}},
    )
    assignees = await person_names(client, [i.get("assignee") for i in issues])

    return {
        "issues": [
            {
                "identifier": issue.get("identifier"),
                "title": issue.get("title"),
                "status": status_names.get(issue.get("status"), issue.get("status")),
                "priority": _priority_name(issue.get("priority")),
                "assignee": assignees.get(issue.get("assignee")),
                "modified_on": issue.get("modifiedOn"),
            }
            for issue in issues
        ],
        "total": len(issues),
    }


async def get_issue(client: HulyClient, params: GetIssueParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)
    statuses = await find_project_statuses(client, project)
    status_names = {s["id"]: s["name"] for s in statuses}
    assignee = None
    if issue.get("assignee"):
        person = await client.find_one(classes.PERSON, {"_id": issue["assignee"]})
        assignee = person_display_name(person) if person else None

    return {
        "identifier": issue.get("identifier"),
        "title": issue.get("title"),
        "description": issue.get("description") or None,
        "status": status_names.get(issue.get("status"), issue.get("status")),
        "priority": _priority_name(issue.get("priority")),
        "assignee": assignee,
        "project": project.get("identifier"),
        "component": issue.get("component"),
        "milestone": issue.get("milestone"),
        "due_date": issue.get("dueDate"),
        "estimation": issue.get("estimation"),
        "reported_time": issue.get("reportedTime"),
        "comments": issue.get("comments", 0),
        "modified_on": issue.get("modifiedOn"),
        "created_on": issue.get("createdOn"),
    }


async def create_issue(client: HulyClient, params: CreateIssueParams) -> dict:
    project = await find_project(client, params.project)

    status = project.get("defaultIssueStatus")
    if params.status is not None:
        statuses = await find_project_statuses(client, project)
        status = _resolve_status(statuses, params.status, params.project)

    assignee = None
    if params.assignee is not None:
        assignee = (await find_person(client, params.assignee))["_id"]

    await client.update_doc(classes.PROJECT, classes.SPACE_SPACE, project["_id"], {"$inc": {"sequence": 1}})
    refreshed = await find_project(client, params.project)
    number = refreshed.get("sequence", project.get("sequence", 0) + 1)

    last_issue = await client.find_one(
        classes.ISSUE,
        {"space": project["_id"]},
        {"sort": {"rank": SORT_DESCENDING}},
    )
    identifier = f"{project['identifier']}-{number}"
    issue_id = generate_id()

    await client.add_collection(
        classes.ISSUE,
        project["_id"],
        project["_id"],
        classes.PROJECT,
        "issues",
        {
            "title": params.title,
            "description": params.description or "",
            "status": status,
            "number": number,
            "kind": classes.TASK_TYPE_ISSUE,
            "identifier": identifier,
            "priority": PRIORITY_TO_HULY[params.priority] if params.priority else 0,
            "assignee": assignee,
            "component": None,
            "milestone": None,
            "estimation": 0,
            "remainingTime": 0,
            "reportedTime": 0,
            "reports": 0,
            "subIssues": 0,
            "parents": [],
            "childInfo": [],
            "dueDate": None,
            "rank": make_rank_after(last_issue.get("rank") if last_issue else None),
        },
        issue_id,
    )
    logger.info(f"Created issue {identifier}")
    return {"identifier": identifier, "issue_id": issue_id}


async def update_issue(client: HulyClient, params: UpdateIssueParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)

    operations: dict = {}
    if params.title is not None:
        operations["title"] = params.title
    if params.description is not None:
        operations["description"] = params.description
    if params.priority is not None:
        operations["priority"] = PRIORITY_TO_HULY[params.priority]
    if params.status is not None:
        statuses = await find_project_statuses(client, project)
        operations["status"] = _resolve_status(statuses, params.status, params.project)
    if params.assignee is not None:
        if params.assignee == "":
            operations["assignee"] = None
        else:
            operations["assignee"] = (await find_person(client, params.assignee))["_id"]

    if not operations:
        return {"identifier": issue.get("identifier"), "updated": False}

    await client.update_doc(classes.ISSUE, project["_id"], issue["_id"], operations)
    return {"identifier": issue.get("identifier"), "updated": True}


async def delete_issue(client: HulyClient, params: DeleteIssueParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)
    await client.remove_doc(classes.ISSUE, project["_id"], issue["_id"])
    return {"identifier": issue.get("identifier"), "deleted": True}


async def add_issue_label(client: HulyClient, params: AddIssueLabelParams) -> dict:
    project = await find_project(client, params.project)
    issue = await find_issue(client, project, params.identifier)
    tag = await ensure_label(client, params.label, params.color)

    existing = await client.find_one(
        classes.TAG_REFERENCE,
        {"attachedTo": issue["_id"], "tag": tag["_id"]},
    )
    if existing is not None:
        return {"identifier": issue.get("identifier"), "label": tag.get("title"), "added": False}

    await client.add_collection(
        classes.TAG_REFERENCE,
        project["_id"],
        issue["_id"],
        classes.ISSUE,
        "labels",
        {"title": tag.get("title"), "color": tag.get("color", 0), "tag": tag["_id"]},
    )
    return {"identifier": issue.get("identifier"), "label": tag.get("title"), "added": True}
