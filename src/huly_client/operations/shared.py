"""Lookups shared by several operation modules."""
import re
from typing import Optional

from .. import classes
from ..client import HulyClient
from ..errors import IssueNotFoundError, PersonNotFoundError, ProjectNotFoundError

SORT_ASCENDING = 1
SORT_DESCENDING = -1

_FULL_IDENTIFIER = re.compile(r"^([A-Z]+)-(\d+)$", re.IGNORECASE)
_NUMBER_ONLY = re.compile(r"^\d+$")

# LexoRank alphabet used by Huly for ordering
_RANK_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def parse_issue_identifier(identifier: str, project_identifier: str) -> tuple[str, Optional[int]]:
    """Normalize an issue reference to ``(full_identifier, number)``.

    Accepts ``"abc-12"``, ``"ABC-12"`` or a bare ``"12"``. Anything else is
    returned unchanged with no number.
    """
    value = str(identifier).strip()
    match = _FULL_IDENTIFIER.match(value)
    if match:
        return f"{match.group(1).upper()}-{match.group(2)}", int(match.group(2))
    if _NUMBER_ONLY.match(value):
        number = int(value)
        return f"{project_identifier.upper()}-{number}", number
    return value, None


def make_rank_after(previous: Optional[str]) -> str:
    """Return a rank string that sorts after ``previous``."""
    if not previous:
        return "0|hzzzzz:"
    body = previous.rstrip(":")
    last = body[-1]
    index = _RANK_ALPHABET.find(last)
    if 0 <= index < len(_RANK_ALPHABET) - 1:
        return f"{body[:-1]}{_RANK_ALPHABET[index + 1]}:"
    return f"{body}i:"


def person_display_name(person: dict) -> str:
    """Huly stores names as ``"Last,First"``."""
    name = person.get("name") or ""
    if "," in name:
        last, first = name.split(",", 1)
        return f"{first} {last}".strip()
    return name


async def find_project(client: HulyClient, identifier: str) -> dict:
    project = await client.find_one(classes.PROJECT, {"identifier": identifier})
    if project is None:
        raise ProjectNotFoundError(identifier)
    return project


async def find_project_statuses(client: HulyClient, project: dict) -> list[dict]:
    """Load the status documents of a project's type.

    Returns dicts with ``id``, ``name``, ``is_done`` and ``is_canceled``.
    """
    project_type = await client.find_one(classes.PROJECT_TYPE, {"_id": project.get("type")})
    if project_type is None:
        return []
    refs = [s["_id"] for s in project_type.get("statuses", []) if "_id" in s]
    if not refs:
        return []
    docs = await client.find_all(classes.STATUS, {"_id": {"$in": refs}})
    return [
        {
            "id": doc["_id"],
            "name": doc.get("name", ""),
            "is_done": doc.get("category") == classes.STATUS_CATEGORY_WON,
            "is_canceled": doc.get("category") == classes.STATUS_CATEGORY_LOST,
        }
        for doc in docs
    ]


async def find_issue(client: HulyClient, project: dict, identifier: str) -> dict:
    full_identifier, number = parse_issue_identifier(identifier, project["identifier"])
    issue = await client.find_one(
        classes.ISSUE,
        {"space": project["_id"], "identifier": full_identifier},
    )
    if issue is None and number is not None:
        issue = await client.find_one(classes.ISSUE, {"space": project["_id"], "number": number})
    if issue is None:
        raise IssueNotFoundError(identifier, project["identifier"])
    return issue


async def find_project_and_issue(client: HulyClient, project_identifier: str, identifier: str) -> tuple[dict, dict]:
    project = await find_project(client, project_identifier)
    issue = await find_issue(client, project, identifier)
    return project, issue


async def find_person(client: HulyClient, reference: str) -> dict:
    """Resolve a person by id, email or display name."""
    person = await client.find_one(classes.PERSON, {"_id": reference})
    if person is not None:
        return person

    if "@" in reference:
        channel = await client.find_one(
            classes.CHANNEL,
            {"provider": classes.EMAIL_PROVIDER, "value": reference},
        )
        if channel is not None:
            person = await client.find_one(classes.PERSON, {"_id": channel.get("attachedTo")})
            if person is not None:
                return person

    person = await client.find_one(classes.PERSON, {"name": reference})
    if person is None and " " in reference:
        first, last = reference.split(" ", 1)
        person = await client.find_one(classes.PERSON, {"name": f"{last},{first}"})
    if person is None:
        raise PersonNotFoundError(reference)
    return person


async def person_names(client: HulyClient, person_ids: list[str]) -> dict[str, str]:
    """Map person ids to display names in one query."""
    ids = sorted({pid for pid in person_ids if pid})
    if not ids:
        return {}
    persons = await client.find_all(classes.PERSON, {"_id": {"$in": ids}})
    return {p["_id"]: person_display_name(p) for p in persons}
