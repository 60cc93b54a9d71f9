"""Person and employee lookups."""
from .. import classes
from ..client import HulyClient
from ..schemas import GetPersonParams, ListEmployeesParams, ListPersonsParams
from .shared import find_person, person_display_name


async def _emails_by_person(client: HulyClient, person_ids: list[str]) -> dict[str, str]:
    if not person_ids:
        return {}
    channels = await client.find_all(
        classes.CHANNEL,
        {"provider": classes.EMAIL_PROVIDER, "attachedTo": {"$in": person_ids}},
    )
    emails: dict[str, str] = {}
    for channel in channels:
        emails.setdefault(channel.get("attachedTo"), channel.get("value"))
    return emails


async def list_persons(client: HulyClient, params: ListPersonsParams) -> dict:
    query: dict = {}
    if params.name_search:
        query["name"] = {"$like": f"%{params.name_search}%"}
    persons = await client.find_all(classes.PERSON, query, {"limit": params.limit, "sort": {"name": 1}})
    emails = await _emails_by_person(client, [p["_id"] for p in persons])
    return {
        "persons": [
            {"id": p["_id"], "name": person_display_name(p), "email": emails.get(p["_id"])}
            for p in persons
        ],
        "total": len(persons),
    }


async def get_person(client: HulyClient, params: GetPersonParams) -> dict:
    person = await find_person(client, params.person)
    emails = await _emails_by_person(client, [person["_id"]])
    return {
        "id": person["_id"],
        "name": person_display_name(person),
        "email": emails.get(person["_id"]),
        "city": person.get("city") or None,
    }


async def list_employees(client: HulyClient, params: ListEmployeesParams) -> dict:
    employees = await client.find_all(
        classes.EMPLOYEE,
        {"active": True},
        {"limit": params.limit, "sort": {"name": 1}},
    )
    emails = await _emails_by_person(client, [e["_id"] for e in employees])
    return {
        "employees": [
            {"id": e["_id"], "name": person_display_name(e), "email": emails.get(e["_id"])}
            for e in employees
        ],
        "total": len(employees),
    }
