"""Project tools."""
from huly_client.operations import projects
from huly_client.schemas import GetProjectParams, ListProjectsParams

from .registry import define_tool

CATEGORY = "projects"

TOOLS = [
    define_tool(
        "list_projects",
        "List projects in the Huly workspace. Archived projects are excluded unless include_archived is true.",
        ListProjectsParams,
        projects.list_projects,
        CATEGORY,
    ),
    define_tool(
        "get_project",
        "Get a project by identifier, including its available issue statuses and the default status.",
        GetProjectParams,
        projects.get_project,
        CATEGORY,
    ),
]
