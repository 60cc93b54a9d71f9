"""Project operations."""
from .. import classes
from ..client import HulyClient
from ..schemas import GetProjectParams, ListProjectsParams
from .shared import find_project, find_project_statuses


def _project_summary(project: dict) -> dict:
    return {
        "identifier": project.get("identifier"),
        "name": project.get("name"),
        "description": project.get("description") or None,
        "archived": bool(project.get("archived", False)),
    }


async def list_projects(client: HulyClient, params: ListProjectsParams) -> dict:
    query = {} if params.include_archived else {"archived": False}
    projects = await client.find_all(
        classes.PROJECT,
        query,
        {"limit": params.limit, "sort": {"name": 1}},
    )
    return {
        "projects": [_project_summary(p) for p in projects],
        "total": len(projects),
    }


async def get_project(client: HulyClient, params: GetProjectParams) -> dict:
    project = await find_project(client, params.project)
    statuses = await find_project_statuses(client, project)
    result = _project_summary(project)
    result["statuses"] = [s["name"] for s in statuses]
    default_status = next((s["name"] for s in statuses if s["id"] == project.get("defaultIssueStatus")), None)
    result["default_status"] = default_status
    return result
