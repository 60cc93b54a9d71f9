"""Teamspace and document operations."""
from .. import classes
from ..client import HulyClient, generate_id
from ..errors import DocumentNotFoundError, TeamspaceNotFoundError
from ..schemas import (
    CreateDocumentParams,
    DeleteDocumentParams,
    GetDocumentParams,
    ListDocumentsParams,
    ListTeamspacesParams,
    UpdateDocumentParams,
)
from .shared import SORT_DESCENDING, make_rank_after


async def find_teamspace(client: HulyClient, reference: str) -> dict:
    teamspace = await client.find_one(classes.TEAMSPACE, {"name": reference, "archived": False})
    if teamspace is None:
        teamspace = await client.find_one(classes.TEAMSPACE, {"_id": reference})
    if teamspace is None:
        raise TeamspaceNotFoundError(reference)
    return teamspace


async def find_document(client: HulyClient, teamspace: dict, reference: str) -> dict:
    document = await client.find_one(classes.DOCUMENT, {"space": teamspace["_id"], "title": reference})
    if document is None:
        document = await client.find_one(classes.DOCUMENT, {"space": teamspace["_id"], "_id": reference})
    if document is None:
        raise DocumentNotFoundError(reference, teamspace.get("name") or teamspace["_id"])
    return document


async def list_teamspaces(client: HulyClient, params: ListTeamspacesParams) -> dict:
    query = {} if params.include_archived else {"archived": False}
    teamspaces = await client.find_all(classes.TEAMSPACE, query, {"limit": params.limit, "sort": {"name": 1}})
    return {
        "teamspaces": [
            {
                "id": t["_id"],
                "name": t.get("name"),
                "description": t.get("description") or None,
                "archived": bool(t.get("archived", False)),
                "private": bool(t.get("private", False)),
            }
            for t in teamspaces
        ],
        "total": len(teamspaces),
    }


async def list_documents(client: HulyClient, params: ListDocumentsParams) -> dict:
    teamspace = await find_teamspace(client, params.teamspace)
    documents = await client.find_all(
        classes.DOCUMENT,
        {"space": teamspace["_id"]},
        {"limit": params.limit, "sort": {"modifiedOn": SORT_DESCENDING}},
    )
    return {
        "documents": [
            {"id": d["_id"], "title": d.get("title"), "modified_on": d.get("modifiedOn")}
            for d in documents
        ],
        "teamspace": teamspace.get("name"),
        "total": len(documents),
    }


async def get_document(client: HulyClient, params: GetDocumentParams) -> dict:
    teamspace = await find_teamspace(client, params.teamspace)
    document = await find_document(client, teamspace, params.document)
    return {
        "id": document["_id"],
        "title": document.get("title"),
        "content": document.get("content") or None,
        "teamspace": teamspace.get("name"),
        "modified_on": document.get("modifiedOn"),
        "created_on": document.get("createdOn"),
    }


async def create_document(client: HulyClient, params: CreateDocumentParams) -> dict:
    teamspace = await find_teamspace(client, params.teamspace)
    last = await client.find_one(
        classes.DOCUMENT,
        {"space": teamspace["_id"]},
        {"sort": {"rank": SORT_DESCENDING}},
    )
    document_id = generate_id()
    await client.create_doc(
        classes.DOCUMENT,
        teamspace["_id"],
        {
            "title": params.title,
            "content": params.content or "",
            "parent": classes.NO_PARENT_DOCUMENT,
            "rank": make_rank_after(last.get("rank") if last else None),
        },
        document_id,
    )
    return {"id": document_id, "title": params.title}


async def update_document(client: HulyClient, params: UpdateDocumentParams) -> dict:
    teamspace = await find_teamspace(client, params.teamspace)
    document = await find_document(client, teamspace, params.document)
    operations = {}
    if params.title is not None:
        operations["title"] = params.title
    if params.content is not None:
        operations["content"] = params.content
    if not operations:
        return {"id": document["_id"], "updated": False}
    await client.update_doc(classes.DOCUMENT, teamspace["_id"], document["_id"], operations)
    return {"id": document["_id"], "updated": True}


async def delete_document(client: HulyClient, params: DeleteDocumentParams) -> dict:
    teamspace = await find_teamspace(client, params.teamspace)
    document = await find_document(client, teamspace, params.document)
    await client.remove_doc(classes.DOCUMENT, teamspace["_id"], document["_id"])
    return {"id": document["_id"], "deleted": True}
