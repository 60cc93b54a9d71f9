"""Document tools."""
from huly_client.operations import documents
from huly_client.schemas import (
    CreateDocumentParams,
    DeleteDocumentParams,
    GetDocumentParams,
    ListDocumentsParams,
    ListTeamspacesParams,
    UpdateDocumentParams,
)

from .registry import define_tool

CATEGORY = "documents"

TOOLS = [
    define_tool(
        "list_teamspaces",
        "List document teamspaces.",
        ListTeamspacesParams,
        documents.list_teamspaces,
        CATEGORY,
    ),
    define_tool(
        "list_documents",
        "List documents in a teamspace, most recently modified first.",
        ListDocumentsParams,
        documents.list_documents,
        CATEGORY,
    ),
    define_tool(
        "get_document",
        "Get a document by title or id, including its content.",
        GetDocumentParams,
        documents.get_document,
        CATEGORY,
    ),
    define_tool(
        "create_document",
        "Create a document in a teamspace.",
        CreateDocumentParams,
        documents.create_document,
        CATEGORY,
    ),
    define_tool(
        "update_document",
        "Update the title or content of a document.",
        UpdateDocumentParams,
        documents.update_document,
        CATEGORY,
    ),
    define_tool(
        "delete_document",
        "Delete a document.",
        DeleteDocumentParams,
        documents.delete_document,
        CATEGORY,
    ),
]
