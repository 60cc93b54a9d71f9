"""Issue comment operations. Comments are chat messages attached to an issue."""
from .. import classes
from ..client import HulyClient, now_ms
from ..errors import CommentNotFoundError
from ..schemas import AddCommentParams, DeleteCommentParams, ListCommentsParams, UpdateCommentParams
from .shared import SORT_ASCENDING, find_project_and_issue


async def _find_comment(client: HulyClient, issue: dict, comment_id: str, issue_reference: str) -> dict:
    comment = await client.find_one(
        classes.CHAT_MESSAGE,
        {"_id": comment_id, "attachedTo": issue["_id"]},
    )
    if comment is None:
        raise CommentNotFoundError(comment_id, issue.get("identifier") or issue_reference)
    return comment


async def list_comments(client: HulyClient, params: ListCommentsParams) -> dict:
    """List comments on an issue, oldest first."""
    _, issue = await find_project_and_issue(client, params.project, params.issue_identifier)
    messages = await client.find_all(
        classes.CHAT_MESSAGE,
        {"attachedTo": issue["_id"], "attachedToClass": classes.ISSUE},
        {"limit": params.limit, "sort": {"createdOn": SORT_ASCENDING}},
    )
    return {
        "comments": [
            {
                "id": m["_id"],
                "body": m.get("message") or "",
                "author_id": m.get("modifiedBy"),
                "created_on": m.get("createdOn"),
                "modified_on": m.get("modifiedOn"),
                "edited_on": m.get("editedOn"),
            }
            for m in messages
        ],
        "total": len(messages),
    }


async def add_comment(client: HulyClient, params: AddCommentParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.issue_identifier)
    comment_id = await client.add_collection(
        classes.CHAT_MESSAGE,
        project["_id"],
        issue["_id"],
        classes.ISSUE,
        "comments",
        {"message": params.body},
    )
    return {"comment_id": comment_id, "issue_identifier": issue.get("identifier")}


async def update_comment(client: HulyClient, params: UpdateCommentParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.issue_identifier)
    comment = await _find_comment(client, issue, params.comment_id, params.issue_identifier)
    if comment.get("message") == params.body:
        return {"comment_id": params.comment_id, "updated": False}
    await client.update_doc(
        classes.CHAT_MESSAGE,
        project["_id"],
        comment["_id"],
        {"message": params.body, "editedOn": now_ms()},
    )
    return {"comment_id": params.comment_id, "updated": True}


async def delete_comment(client: HulyClient, params: DeleteCommentParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.issue_identifier)
    comment = await _find_comment(client, issue, params.comment_id, params.issue_identifier)
    await client.remove_doc(classes.CHAT_MESSAGE, project["_id"], comment["_id"])
    return {"comment_id": params.comment_id, "deleted": True}
