"""Async REST client for the Huly platform.

Wraps ``httpx.AsyncClient`` with the handful of calls the operations need:

- ``find_all`` / ``find_one`` query documents of a class
- ``create_doc`` / ``update_doc`` / ``remove_doc`` / ``add_collection``
  post transactions
- ``search_fulltext`` runs a workspace-wide fulltext query
- ``upload_file`` stores a blob and ``file_url`` points at one

All transport failures surface as ``HulyConnectionError`` and credential
rejections as ``HulyAuthError``; callers never see raw httpx exceptions.
"""
import asyncio
import json
import logging
import time
import uuid
from typing import Any, Optional

import httpx

from . import classes
from .errors import HulyAuthError, HulyConnectionError

logger = logging.getLogger("huly-client.client")

AUTH_STATUS_CODES = {401, 403}
MAX_RETRIES = 2


def generate_id() -> str:
    """Generate a new document id in Huly's 24 character hex format."""
    return uuid.uuid4().hex[:24]


def now_ms() -> int:
    return int(time.time() * 1000)


class HulyClient:
    """Workspace-scoped client for the Huly REST API."""

    def __init__(
        self,
        url: str,
        workspace: str,
        token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_delay: float = 0.5,
    ):
        self.url = url.rstrip("/")
        self.workspace = workspace
        self.retry_delay = retry_delay
        self._http = httpx.AsyncClient(
            base_url=self.url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
        )

    async def __aenter__(self) -> "HulyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ========================================================================
    # Transport
    # ========================================================================

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        attempt = 0
        while True:
            try:
                response = await self._http.request(method, path, **kwargs)
                response.raise_for_status()
                break
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.error(f"HTTP error from Huly: {method} {e.request.url} -> {status}")
                if status in AUTH_STATUS_CODES:
                    raise HulyAuthError(f"Huly rejected the request with HTTP {status}", e) from e
                raise HulyConnectionError(f"Huly returned HTTP {status}", e) from e
            except httpx.RequestError as e:
                if attempt >= MAX_RETRIES:
                    logger.error(f"Request error talking to Huly: {type(e).__name__}: {e}")
                    raise HulyConnectionError(f"Could not reach Huly at {self.url}: {e}", e) from e
                delay = self.retry_delay * (2 ** attempt)
                attempt += 1
                logger.warning(f"Request to Huly failed ({e}), retrying in {delay:.2f}s")
                await asyncio.sleep(delay)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HulyConnectionError("Huly returned a malformed response body", e) from e

    async def _tx(self, tx: dict) -> Any:
        return await self._request("POST", f"/api/v1/tx/{self.workspace}", json=tx)

    def _base_tx(self, tx_class: str, object_class: str, space: str, object_id: str) -> dict:
        return {
            "_id": generate_id(),
            "_class": tx_class,
            "space": classes.TX_SPACE,
            "objectId": object_id,
            "objectClass": object_class,
            "objectSpace": space,
            "modifiedOn": now_ms(),
        }

    # ========================================================================
    # Queries
    # ========================================================================

    async def find_all(
        self,
        _class: str,
        query: Optional[dict] = None,
        options: Optional[dict] = None,
    ) -> list[dict]:
        params = {
            "class": _class,
            "query": json.dumps(query or {}),
            "options": json.dumps(options or {}),
        }
        data = await self._request("GET", f"/api/v1/find-all/{self.workspace}", params=params)
        if data is None:
            return []
        if isinstance(data, dict):
            return list(data.get("value", []))
        return list(data)

    async def find_one(
        self,
        _class: str,
        query: Optional[dict] = None,
        options: Optional[dict] = None,
    ) -> Optional[dict]:
        options = dict(options or {})
        options["limit"] = 1
        docs = await self.find_all(_class, query, options)
        return docs[0] if docs else None

    async def search_fulltext(self, query: str, limit: int = 50) -> list[dict]:
        params = {"query": query, "options": json.dumps({"limit": limit})}
        data = await self._request("GET", f"/api/v1/search-fulltext/{self.workspace}", params=params)
        if isinstance(data, dict):
            return list(data.get("docs", []))
        return list(data or [])

    # ========================================================================
    # Transactions
    # ========================================================================

    async def create_doc(
        self,
        _class: str,
        space: str,
        attributes: dict,
        object_id: Optional[str] = None,
    ) -> str:
        object_id = object_id or generate_id()
        tx = self._base_tx(classes.TX_CREATE_DOC, _class, space, object_id)
        tx["attributes"] = attributes
        tx["createdOn"] = tx["modifiedOn"]
        await self._tx(tx)
        logger.info(f"Created {_class} {object_id}")
        return object_id

    async def add_collection(
        self,
        _class: str,
        space: str,
        attached_to: str,
        attached_to_class: str,
        collection: str,
        attributes: dict,
        object_id: Optional[str] = None,
    ) -> str:
        attributes = {
            **attributes,
            "attachedTo": attached_to,
            "attachedToClass": attached_to_class,
            "collection": collection,
        }
        return await self.create_doc(_class, space, attributes, object_id)

    async def update_doc(self, _class: str, space: str, object_id: str, operations: dict) -> None:
        tx = self._base_tx(classes.TX_UPDATE_DOC, _class, space, object_id)
        tx["operations"] = operations
        await self._tx(tx)
        logger.info(f"Updated {_class} {object_id}")

    async def remove_doc(self, _class: str, space: str, object_id: str) -> None:
        tx = self._base_tx(classes.TX_REMOVE_DOC, _class, space, object_id)
        await self._tx(tx)
        logger.info(f"Removed {_class} {object_id}")

    # ========================================================================
    # Storage
    # ========================================================================

    async def upload_file(self, filename: str, data: bytes, content_type: str) -> dict:
        """Store a blob in the workspace. Returns ``blob_id``, ``size`` and ``url``."""
        result = await self._request(
            "POST",
            "/files",
            params={"workspace": self.workspace},
            files={"file": (filename, data, content_type)},
        )
        entry = result[0] if isinstance(result, list) and result else result
        blob_id = entry.get("id") if isinstance(entry, dict) else None
        if not blob_id:
            raise HulyConnectionError(f"Huly did not return a blob id for '{filename}'")
        logger.info(f"Uploaded {filename} ({len(data)} bytes) as {blob_id}")
        return {"blob_id": blob_id, "size": len(data), "url": self.file_url(blob_id)}

    def file_url(self, blob_id: str) -> str:
        return str(httpx.URL(f"{self.url}/files", params={"workspace": self.workspace, "file": blob_id}))
