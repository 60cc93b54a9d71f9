"""Label (tag) operations for issues."""
from typing import Optional

from .. import classes
from ..client import HulyClient
from ..errors import LabelExistsError, LabelNotFoundError
from ..schemas import CreateLabelParams, DeleteLabelParams, ListLabelsParams, RemoveIssueLabelParams
from .shared import find_project_and_issue

DEFAULT_COLOR = 0


async def find_label(client: HulyClient, reference: str) -> dict:
    tag = await client.find_one(classes.TAG_ELEMENT, {"_id": reference, "targetClass": classes.ISSUE})
    if tag is None:
        tag = await client.find_one(classes.TAG_ELEMENT, {"title": reference, "targetClass": classes.ISSUE})
    if tag is None:
        raise LabelNotFoundError(reference)
    return tag


async def ensure_label(client: HulyClient, title: str, color: Optional[int] = None) -> dict:
    """Return the issue label called ``title``, creating it when missing."""
    tag = await client.find_one(classes.TAG_ELEMENT, {"title": title, "targetClass": classes.ISSUE})
    if tag is not None:
        return tag
    attributes = {
        "title": title,
        "description": "",
        "targetClass": classes.ISSUE,
        "color": DEFAULT_COLOR if color is None else color,
        "category": "tracker:category:Other",
    }
    tag_id = await client.create_doc(classes.TAG_ELEMENT, classes.SPACE_WORKSPACE, attributes)
    return {"_id": tag_id, **attributes}


async def list_labels(client: HulyClient, params: ListLabelsParams) -> dict:
    tags = await client.find_all(
        classes.TAG_ELEMENT,
        {"targetClass": classes.ISSUE},
        {"limit": params.limit, "sort": {"title": 1}},
    )
    return {
        "labels": [
            {"id": t["_id"], "title": t.get("title"), "color": t.get("color"), "description": t.get("description") or None}
            for t in tags
        ],
        "total": len(tags),
    }


async def create_label(client: HulyClient, params: CreateLabelParams) -> dict:
    existing = await client.find_one(classes.TAG_ELEMENT, {"title": params.title, "targetClass": classes.ISSUE})
    if existing is not None:
        raise LabelExistsError(params.title)
    tag_id = await client.create_doc(
        classes.TAG_ELEMENT,
        classes.SPACE_WORKSPACE,
        {
            "title": params.title,
            "description": params.description or "",
            "targetClass": classes.ISSUE,
            "color": DEFAULT_COLOR if params.color is None else params.color,
            "category": "tracker:category:Other",
        },
    )
    return {"id": tag_id, "title": params.title}


async def delete_label(client: HulyClient, params: DeleteLabelParams) -> dict:
    tag = await find_label(client, params.label)
    await client.remove_doc(classes.TAG_ELEMENT, tag.get("space", classes.SPACE_WORKSPACE), tag["_id"])
    return {"id": tag["_id"], "title": tag.get("title"), "deleted": True}


async def remove_issue_label(client: HulyClient, params: RemoveIssueLabelParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)
    refs = await client.find_all(
        classes.TAG_REFERENCE,
        {"attachedTo": issue["_id"], "attachedToClass": classes.ISSUE},
    )
    wanted = params.label.lower()
    matching = [r for r in refs if (r.get("title") or "").lower() == wanted or r.get("tag") == params.label]
    if not matching:
        raise LabelNotFoundError(params.label)
    for ref in matching:
        await client.remove_doc(classes.TAG_REFERENCE, project["_id"], ref["_id"])
    return {"identifier": issue.get("identifier"), "label": params.label, "removed": True}
