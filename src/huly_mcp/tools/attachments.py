"""Attachment tools."""
from huly_client.operations import attachments
from huly_client.schemas import (
    AddAttachmentParams,
    AddDocumentAttachmentParams,
    AddIssueAttachmentParams,
    DeleteAttachmentParams,
    DownloadAttachmentParams,
    GetAttachmentParams,
    ListAttachmentsParams,
    PinAttachmentParams,
    UpdateAttachmentParams,
)

from .registry import define_tool

CATEGORY = "attachments"

_SOURCE = "Content comes from file_path (a local file) or data (base64), exactly one of them."

TOOLS = [
    define_tool(
        "list_attachments",
        "List attachments on an object, most recently modified first.",
        ListAttachmentsParams,
        attachments.list_attachments,
        CATEGORY,
    ),
    define_tool(
        "get_attachment",
        "Get an attachment's details including its download URL.",
        GetAttachmentParams,
        attachments.get_attachment,
        CATEGORY,
    ),
    define_tool(
        "add_attachment",
        f"Upload a file and attach it to any object. {_SOURCE}",
        AddAttachmentParams,
        attachments.add_attachment,
        CATEGORY,
    ),
    define_tool(
        "add_issue_attachment",
        f"Upload a file and attach it to an issue. {_SOURCE}",
        AddIssueAttachmentParams,
        attachments.add_issue_attachment,
        CATEGORY,
    ),
    define_tool(
        "add_document_attachment",
        f"Upload a file and attach it to a document. {_SOURCE}",
        AddDocumentAttachmentParams,
        attachments.add_document_attachment,
        CATEGORY,
    ),
    define_tool(
        "update_attachment",
        "Update an attachment's description or pinned flag. Pass null as description to clear it.",
        UpdateAttachmentParams,
        attachments.update_attachment,
        CATEGORY,
    ),
    define_tool(
        "pin_attachment",
        "Pin or unpin an attachment.",
        PinAttachmentParams,
        attachments.pin_attachment,
        CATEGORY,
    ),
    define_tool(
        "delete_attachment",
        "Delete an attachment.",
        DeleteAttachmentParams,
        attachments.delete_attachment,
        CATEGORY,
    ),
    define_tool(
        "download_attachment",
        "Get the download URL, name, type and size of an attachment.",
        DownloadAttachmentParams,
        attachments.download_attachment,
        CATEGORY,
    ),
]
