"""Contact tools."""
from huly_client.operations import contacts
from huly_client.schemas import GetPersonParams, ListEmployeesParams, ListPersonsParams

from .registry import define_tool

CATEGORY = "contacts"

TOOLS = [
    define_tool(
        "list_persons",
        "List persons in the workspace, optionally filtered by name.",
        ListPersonsParams,
        contacts.list_persons,
        CATEGORY,
    ),
    define_tool(
        "get_person",
        "Get a person by id, email or name.",
        GetPersonParams,
        contacts.get_person,
        CATEGORY,
    ),
    define_tool(
        "list_employees",
        "List active employees (workspace members).",
        ListEmployeesParams,
        contacts.list_employees,
        CATEGORY,
    ),
]
