"""Search tools."""
from huly_client.operations import search
from huly_client.schemas import FulltextSearchParams

from .registry import define_tool

CATEGORY = "search"

TOOLS = [
    define_tool(
        "fulltext_search",
        "Search the whole workspace (issues, documents, messages) by text.",
        FulltextSearchParams,
        search.fulltext_search,
        CATEGORY,
    ),
]
