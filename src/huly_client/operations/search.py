"""Workspace fulltext search."""
from ..client import HulyClient
from ..schemas import FulltextSearchParams


async def fulltext_search(client: HulyClient, params: FulltextSearchParams) -> dict:
    docs = await client.search_fulltext(params.query, params.limit)
    return {
        "query": params.query,
        "results": [
            {
                "id": d.get("id") or d.get("_id"),
                "class": d.get("doc", {}).get("_class") if isinstance(d.get("doc"), dict) else d.get("_class"),
                "title": d.get("title"),
                "score": d.get("score"),
            }
            for d in docs
        ],
        "total": len(docs),
    }
