"""Attachment operations.

An attachment is a blob in workspace storage plus an ``Attachment`` document
in the ``attachments`` collection of its parent (an issue, a document or any
other object).
"""
import base64
import binascii
import logging
from pathlib import Path

from .. import classes
from ..client import HulyClient, generate_id, now_ms
from ..errors import AttachmentNotFoundError, FileTooLargeError, InvalidContentTypeError, InvalidFileDataError
from ..schemas import (
    AddAttachmentParams,
    AddDocumentAttachmentParams,
    AddIssueAttachmentParams,
    DeleteAttachmentParams,
    DownloadAttachmentParams,
    FileSourceParams,
    GetAttachmentParams,
    ListAttachmentsParams,
    PinAttachmentParams,
    UpdateAttachmentParams,
)
from .documents import find_document, find_teamspace
from .shared import SORT_DESCENDING, find_project_and_issue

logger = logging.getLogger("huly-client.attachments")

MAX_FILE_SIZE = 100 * 1024 * 1024

ALLOWED_CONTENT_TYPES = frozenset({
    # Images
    "image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml", "image/bmp", "image/tiff",
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain", "text/csv", "text/markdown", "text/html",
    # Archives
    "application/zip", "application/x-tar", "application/gzip",
    "application/x-7z-compressed", "application/x-rar-compressed",
    # Media
    "audio/mpeg", "audio/wav", "audio/ogg", "video/mp4", "video/webm", "video/quicktime",
    # Code and data
    "application/json", "application/xml", "text/xml", "application/javascript",
    "application/octet-stream",
})


async def find_attachment(client: HulyClient, attachment_id: str) -> dict:
    attachment = await client.find_one(classes.ATTACHMENT, {"_id": attachment_id})
    if attachment is None:
        raise AttachmentNotFoundError(attachment_id)
    return attachment


def read_file_source(params: FileSourceParams) -> bytes:
    """Load the bytes named by ``file_path`` or decode ``data``, then validate them."""
    if params.file_path is not None:
        try:
            data = Path(params.file_path).expanduser().read_bytes()
        except OSError as e:
            raise InvalidFileDataError(params.filename, f"cannot read {params.file_path}: {e.strerror or e}") from e
    else:
        try:
            data = base64.b64decode(params.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidFileDataError(params.filename, "data is not valid base64") from e

    if len(data) > MAX_FILE_SIZE:
        raise FileTooLargeError(params.filename, len(data), MAX_FILE_SIZE)
    if params.content_type not in ALLOWED_CONTENT_TYPES:
        raise InvalidContentTypeError(params.filename, params.content_type)
    return data


async def _upload_and_attach(
    client: HulyClient,
    params: FileSourceParams,
    space: str,
    object_id: str,
    object_class: str,
) -> dict:
    data = read_file_source(params)
    upload = await client.upload_file(params.filename, data, params.content_type)

    attributes = {
        "name": params.filename,
        "file": upload["blob_id"],
        "size": upload["size"],
        "type": params.content_type,
        "lastModified": now_ms(),
        "pinned": params.pinned,
    }
    if params.description is not None:
        attributes["description"] = params.description

    attachment_id = await client.add_collection(
        classes.ATTACHMENT,
        space,
        object_id,
        object_class,
        "attachments",
        attributes,
        generate_id(),
    )
    return {"attachment_id": attachment_id, "blob_id": upload["blob_id"], "url": upload["url"]}


def _summary(attachment: dict) -> dict:
    return {
        "id": attachment["_id"],
        "name": attachment.get("name"),
        "type": attachment.get("type"),
        "size": attachment.get("size"),
        "pinned": attachment.get("pinned") or False,
        "description": attachment.get("description") or None,
        "modified_on": attachment.get("modifiedOn"),
    }


async def list_attachments(client: HulyClient, params: ListAttachmentsParams) -> dict:
    attachments = await client.find_all(
        classes.ATTACHMENT,
        {"attachedTo": params.object_id, "attachedToClass": params.object_class},
        {"limit": params.limit, "sort": {"modifiedOn": SORT_DESCENDING}},
    )
    return {"attachments": [_summary(a) for a in attachments], "total": len(attachments)}


async def get_attachment(client: HulyClient, params: GetAttachmentParams) -> dict:
    attachment = await find_attachment(client, params.attachment_id)
    return {
        **_summary(attachment),
        "readonly": attachment.get("readonly") or False,
        "url": client.file_url(attachment["file"]) if attachment.get("file") else None,
        "created_on": attachment.get("createdOn"),
    }


async def add_attachment(client: HulyClient, params: AddAttachmentParams) -> dict:
    return await _upload_and_attach(client, params, params.space, params.object_id, params.object_class)


async def add_issue_attachment(client: HulyClient, params: AddIssueAttachmentParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)
    result = await _upload_and_attach(client, params, project["_id"], issue["_id"], classes.ISSUE)
    logger.info(f"Attached {params.filename} to {issue.get('identifier')}")
    return result


async def add_document_attachment(client: HulyClient, params: AddDocumentAttachmentParams) -> dict:
    teamspace = await find_teamspace(client, params.teamspace)
    document = await find_document(client, teamspace, params.document)
    return await _upload_and_attach(client, params, teamspace["_id"], document["_id"], classes.DOCUMENT)


async def update_attachment(client: HulyClient, params: UpdateAttachmentParams) -> dict:
    """Update description and pinned flag. An explicit null description clears it."""
    attachment = await find_attachment(client, params.attachment_id)

    operations: dict = {}
    if "description" in params.model_fields_set:
        # Huly clears the description with an empty string, not null
        operations["description"] = params.description or ""
    if params.pinned is not None:
        operations["pinned"] = params.pinned

    if not operations:
        return {"attachment_id": attachment["_id"], "updated": False}

    await client.update_doc(classes.ATTACHMENT, attachment["space"], attachment["_id"], operations)
    return {"attachment_id": attachment["_id"], "updated": True}


async def pin_attachment(client: HulyClient, params: PinAttachmentParams) -> dict:
    attachment = await find_attachment(client, params.attachment_id)
    await client.update_doc(classes.ATTACHMENT, attachment["space"], attachment["_id"], {"pinned": params.pinned})
    return {"attachment_id": attachment["_id"], "pinned": params.pinned}


async def delete_attachment(client: HulyClient, params: DeleteAttachmentParams) -> dict:
    attachment = await find_attachment(client, params.attachment_id)
    await client.remove_doc(classes.ATTACHMENT, attachment["space"], attachment["_id"])
    return {"attachment_id": attachment["_id"], "deleted": True}


async def download_attachment(client: HulyClient, params: DownloadAttachmentParams) -> dict:
    attachment = await find_attachment(client, params.attachment_id)
    return {
        "attachment_id": attachment["_id"],
        "url": client.file_url(attachment.get("file") or ""),
        "name": attachment.get("name"),
        "type": attachment.get("type"),
        "size": attachment.get("size"),
    }
