"""Issue template operations.

A template lives in its project's space and carries the defaults for new
issues: title, description, priority, assignee, component and estimation.
"""
import logging

from .. import classes
from ..client import HulyClient
from ..errors import IssueTemplateNotFoundError
from ..schemas import (
    PRIORITY_FROM_HULY,
    PRIORITY_TO_HULY,
    CreateIssueFromTemplateParams,
    CreateIssueParams,
    CreateIssueTemplateParams,
    DeleteIssueTemplateParams,
    GetIssueTemplateParams,
    ListIssueTemplatesParams,
    UpdateIssueTemplateParams,
)
from .components import find_component
from .issues import _priority_name, create_issue
from .shared import SORT_DESCENDING, find_person, find_project, person_names

logger = logging.getLogger("huly-client.issue_templates")


async def find_template(client: HulyClient, project: dict, reference: str) -> dict:
    template = await client.find_one(classes.ISSUE_TEMPLATE, {"space": project["_id"], "_id": reference})
    if template is None:
        template = await client.find_one(classes.ISSUE_TEMPLATE, {"space": project["_id"], "title": reference})
    if template is None:
        raise IssueTemplateNotFoundError(reference, project["identifier"])
    return template


async def list_issue_templates(client: HulyClient, params: ListIssueTemplatesParams) -> dict:
    project = await find_project(client, params.project)
    templates = await client.find_all(
        classes.ISSUE_TEMPLATE,
        {"space": project["_id"]},
        {"limit": params.limit, "sort": {"modifiedOn": SORT_DESCENDING}},
    )
    return {
        "templates": [
            {
                "id": t["_id"],
                "title": t.get("title"),
                "priority": _priority_name(t.get("priority")),
                "modified_on": t.get("modifiedOn"),
            }
            for t in templates
        ],
        "total": len(templates),
    }


async def get_issue_template(client: HulyClient, params: GetIssueTemplateParams) -> dict:
    project = await find_project(client, params.project)
    template = await find_template(client, project, params.template)
    assignees = await person_names(client, [template.get("assignee")])

    component = None
    if template.get("component"):
        doc = await client.find_one(classes.COMPONENT, {"_id": template["component"]})
        component = doc.get("label") if doc else None

    return {
        "id": template["_id"],
        "title": template.get("title"),
        "description": template.get("description") or None,
        "priority": _priority_name(template.get("priority")),
        "assignee": assignees.get(template.get("assignee")),
        "component": component,
        "estimation": template.get("estimation") or None,
        "project": project["identifier"],
        "modified_on": template.get("modifiedOn"),
        "created_on": template.get("createdOn"),
    }


async def create_issue_template(client: HulyClient, params: CreateIssueTemplateParams) -> dict:
    project = await find_project(client, params.project)

    assignee = None
    if params.assignee is not None:
        assignee = (await find_person(client, params.assignee))["_id"]
    component = None
    if params.component is not None:
        component = (await find_component(client, project, params.component))["_id"]

    template_id = await client.create_doc(
        classes.ISSUE_TEMPLATE,
        project["_id"],
        {
            "title": params.title,
            "description": params.description or "",
            "priority": PRIORITY_TO_HULY[params.priority] if params.priority else 0,
            "assignee": assignee,
            "component": component,
            "estimation": params.estimation or 0,
            "children": [],
            "comments": 0,
        },
    )
    logger.info(f"Created issue template '{params.title}' in {project['identifier']}")
    return {"id": template_id, "title": params.title}


async def create_issue_from_template(client: HulyClient, params: CreateIssueFromTemplateParams) -> dict:
    """Create an issue from a template; explicit parameters override its fields."""
    project = await find_project(client, params.project)
    template = await find_template(client, project, params.template)

    result = await create_issue(
        client,
        CreateIssueParams(
            project=params.project,
            title=params.title or template.get("title"),
            description=params.description if params.description is not None else template.get("description") or None,
            priority=params.priority or PRIORITY_FROM_HULY.get(template.get("priority") or 0),
            # a person id resolves directly
            assignee=params.assignee or template.get("assignee"),
            status=params.status,
        ),
    )

    defaults = {}
    if template.get("component"):
        defaults["component"] = template["component"]
    if template.get("estimation"):
        defaults["estimation"] = template["estimation"]
    if defaults:
        await client.update_doc(classes.ISSUE, project["_id"], result["issue_id"], defaults)

    return {**result, "template": template["_id"]}


async def update_issue_template(client: HulyClient, params: UpdateIssueTemplateParams) -> dict:
    """Update a template. An explicit null ``assignee`` or ``component`` clears it."""
    project = await find_project(client, params.project)
    template = await find_template(client, project, params.template)
    given = params.model_fields_set

    operations: dict = {}
    if params.title is not None:
        operations["title"] = params.title
    if params.description is not None:
        operations["description"] = params.description
    if params.priority is not None:
        operations["priority"] = PRIORITY_TO_HULY[params.priority]
    if params.estimation is not None:
        operations["estimation"] = params.estimation
    if "assignee" in given:
        operations["assignee"] = None
        if params.assignee is not None:
            operations["assignee"] = (await find_person(client, params.assignee))["_id"]
    if "component" in given:
        operations["component"] = None
        if params.component is not None:
            operations["component"] = (await find_component(client, project, params.component))["_id"]

    if not operations:
        return {"id": template["_id"], "updated": False}

    await client.update_doc(classes.ISSUE_TEMPLATE, project["_id"], template["_id"], operations)
    return {"id": template["_id"], "updated": True}


async def delete_issue_template(client: HulyClient, params: DeleteIssueTemplateParams) -> dict:
    project = await find_project(client, params.project)
    template = await find_template(client, project, params.template)
    await client.remove_doc(classes.ISSUE_TEMPLATE, project["_id"], template["_id"])
    return {"id": template["_id"], "deleted": True}
