"""Component operations."""
from .. import classes
from ..client import HulyClient
from ..errors import ComponentNotFoundError
from ..schemas import (
    CreateComponentParams,
    DeleteComponentParams,
    GetComponentParams,
    ListComponentsParams,
    SetIssueComponentParams,
)
from .shared import find_issue, find_person, find_project, person_names


async def find_component(client: HulyClient, project: dict, reference: str) -> dict:
    component = await client.find_one(classes.COMPONENT, {"space": project["_id"], "_id": reference})
    if component is None:
        component = await client.find_one(classes.COMPONENT, {"space": project["_id"], "label": reference})
    if component is None:
        raise ComponentNotFoundError(reference, project["identifier"])
    return component


async def list_components(client: HulyClient, params: ListComponentsParams) -> dict:
    project = await find_project(client, params.project)
    components = await client.find_all(
        classes.COMPONENT,
        {"space": project["_id"]},
        {"limit": params.limit, "sort": {"label": 1}},
    )
    leads = await person_names(client, [c.get("lead") for c in components])
    return {
        "components": [
            {"id": c["_id"], "label": c.get("label"), "lead": leads.get(c.get("lead"))}
            for c in components
        ],
        "total": len(components),
    }


async def get_component(client: HulyClient, params: GetComponentParams) -> dict:
    project = await find_project(client, params.project)
    component = await find_component(client, project, params.component)
    leads = await person_names(client, [component.get("lead")])
    return {
        "id": component["_id"],
        "label": component.get("label"),
        "description": component.get("description") or None,
        "lead": leads.get(component.get("lead")),
        "project": project["identifier"],
    }


async def create_component(client: HulyClient, params: CreateComponentParams) -> dict:
    project = await find_project(client, params.project)
    lead = None
    if params.lead is not None:
        lead = (await find_person(client, params.lead))["_id"]
    component_id = await client.create_doc(
        classes.COMPONENT,
        project["_id"],
        {
            "label": params.label,
            "description": params.description or "",
            "lead": lead,
            "comments": 0,
            "attachments": 0,
        },
    )
    return {"id": component_id, "label": params.label}


async def set_issue_component(client: HulyClient, params: SetIssueComponentParams) -> dict:
    project = await find_project(client, params.project)
    issue = await find_issue(client, project, params.identifier)
    component_id = None
    if params.component is not None:
        component_id = (await find_component(client, project, params.component))["_id"]
    await client.update_doc(classes.ISSUE, project["_id"], issue["_id"], {"component": component_id})
    return {"identifier": issue.get("identifier"), "component": component_id}


async def delete_component(client: HulyClient, params: DeleteComponentParams) -> dict:
    project = await find_project(client, params.project)
    component = await find_component(client, project, params.component)
    await client.remove_doc(classes.COMPONENT, project["_id"], component["_id"])
    return {"id": component["_id"], "deleted": True}
