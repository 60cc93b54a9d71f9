"""Shared fixtures: recording telemetry, in-memory Huly client, memory stdio."""
import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Optional

import anyio
import pytest

from huly_mcp.server import reset_first_list_tools


class RecordingTelemetry:
    """Telemetry double that records every call."""

    def __init__(self):
        self.events = []
        self.shutdown_calls = 0

    def session_start(self, props):
        self.events.append(("session_start", props))

    def first_list_tools(self):
        self.events.append(("first_list_tools", None))

    def tool_called(self, props):
        self.events.append(("tool_called", props))

    async def shutdown(self):
        self.shutdown_calls += 1
        self.events.append(("shutdown", None))

    def of(self, name):
        return [props for event, props in self.events if event == name]


class ExplodingTelemetry:
    """Telemetry double that fails on every call."""

    def session_start(self, props):
        raise RuntimeError("sink down")

    def first_list_tools(self):
        raise RuntimeError("sink down")

    def tool_called(self, props):
        raise RuntimeError("sink down")

    async def shutdown(self):
        raise RuntimeError("sink down")


def _matches(doc: dict, query: dict) -> bool:
    for key, expected in query.items():
        actual = doc.get(key)
        if isinstance(expected, dict):
            if "$in" in expected and actual not in expected["$in"]:
                return False
            if "$like" in expected and expected["$like"].strip("%").lower() not in (actual or "").lower():
                return False
            if "$gte" in expected and (actual is None or actual < expected["$gte"]):
                return False
            if "$lt" in expected and (actual is None or actual >= expected["$lt"]):
                return False
        elif actual != expected:
            return False
    return True


class FakeHulyClient:
    """In-memory stand-in for HulyClient keyed by class reference."""

    def __init__(self, docs: Optional[dict] = None):
        self.docs = defaultdict(list)
        for _class, items in (docs or {}).items():
            self.docs[_class] = [dict(item) for item in items]
        self.txs = []
        self.search_results = []
        self.uploads = []

    async def find_all(self, _class, query=None, options=None):
        results = [d for d in self.docs[_class] if _matches(d, query or {})]
        options = options or {}
        for key, direction in reversed(list((options.get("sort") or {}).items())):
            results.sort(key=lambda d: (d.get(key) is None, d.get(key)), reverse=direction < 0)
        limit = options.get("limit")
        return results[:limit] if limit else results

    async def find_one(self, _class, query=None, options=None):
        results = await self.find_all(_class, query, {**(options or {}), "limit": 1})
        return results[0] if results else None

    async def create_doc(self, _class, space, attributes, object_id=None):
        object_id = object_id or f"doc-{len(self.txs) + 1}"
        self.docs[_class].append({"_id": object_id, "_class": _class, "space": space, **attributes})
        self.txs.append(("create", _class, object_id, attributes))
        return object_id

    async def add_collection(self, _class, space, attached_to, attached_to_class, collection, attributes, object_id=None):
        attributes = {
            **attributes,
            "attachedTo": attached_to,
            "attachedToClass": attached_to_class,
            "collection": collection,
        }
        return await self.create_doc(_class, space, attributes, object_id)

    async def update_doc(self, _class, space, object_id, operations):
        self.txs.append(("update", _class, object_id, operations))
        for doc in self.docs[_class]:
            if doc["_id"] == object_id:
                for key, value in operations.items():
                    if key == "$inc":
                        for field_name, amount in value.items():
                            doc[field_name] = doc.get(field_name, 0) + amount
                    else:
                        doc[key] = value

    async def remove_doc(self, _class, space, object_id):
        self.txs.append(("remove", _class, object_id, None))
        self.docs[_class] = [d for d in self.docs[_class] if d["_id"] != object_id]

    async def search_fulltext(self, query, limit=50):
        return self.search_results[:limit]

    async def upload_file(self, filename, data, content_type):
        blob_id = f"blob-{len(self.uploads) + 1}"
        self.uploads.append((filename, data, content_type))
        return {"blob_id": blob_id, "size": len(data), "url": self.file_url(blob_id)}

    def file_url(self, blob_id):
        return f"https://huly.test/files?workspace=ws&file={blob_id}"


class MemoryStdio:
    """Stdio stream factory backed by anyio memory streams."""

    def __init__(self):
        self.client_send, server_receive = anyio.create_memory_object_stream(10)
        server_send, self.client_receive = anyio.create_memory_object_stream(10)
        self._server_streams = (server_receive, server_send)
        self.opened = 0

    @asynccontextmanager
    async def __call__(self):
        self.opened += 1
        yield self._server_streams

    async def end_of_input(self):
        await self.client_send.aclose()


async def wait_until(predicate, timeout: float = 5.0) -> None:
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


@pytest.fixture(autouse=True)
def fresh_first_list_tools():
    reset_first_list_tools()
    yield
    reset_first_list_tools()


@pytest.fixture
def telemetry():
    return RecordingTelemetry()


@pytest.fixture
def huly_docs():
    """A small workspace: one project with statuses, issues and people."""
    return {
        "tracker:class:Project": [
            {
                "_id": "proj-1",
                "identifier": "HULY",
                "name": "Huly",
                "description": "",
                "archived": False,
                "type": "ptype-1",
                "sequence": 2,
                "defaultIssueStatus": "status-backlog",
            },
            {
                "_id": "proj-2",
                "identifier": "OLD",
                "name": "Old",
                "archived": True,
                "type": "ptype-1",
                "sequence": 0,
            },
        ],
        "task:class:ProjectType": [
            {
                "_id": "ptype-1",
                "statuses": [{"_id": "status-backlog"}, {"_id": "status-progress"}, {"_id": "status-done"}],
            },
        ],
        "core:class:Status": [
            {"_id": "status-backlog", "name": "Backlog", "category": "task:statusCategory:UnStarted"},
            {"_id": "status-progress", "name": "In Progress", "category": "task:statusCategory:Active"},
            {"_id": "status-done", "name": "Done", "category": "task:statusCategory:Won"},
        ],
        "tracker:class:Issue": [
            {
                "_id": "issue-1",
                "space": "proj-1",
                "identifier": "HULY-1",
                "number": 1,
                "title": "Set up CI",
                "status": "status-done",
                "priority": 2,
                "assignee": "person-1",
                "modifiedOn": 1000,
                "rank": "0|hzzzzz:",
                "remainingTime": 4,
                "reportedTime": 0,
                "reports": 0,
            },
            {
                "_id": "issue-2",
                "space": "proj-1",
                "identifier": "HULY-2",
                "number": 2,
                "title": "Write docs",
                "status": "status-backlog",
                "priority": 0,
                "assignee": None,
                "modifiedOn": 2000,
                "rank": "0|hzzzzzi:",
            },
        ],
        "contact:class:Person": [
            {"_id": "person-1", "name": "Lovelace,Ada"},
            {"_id": "person-2", "name": "Hopper,Grace"},
        ],
        "contact:class:Channel": [
            {"_id": "ch-1", "provider": "contact:channelProvider:Email", "value": "ada@example.com", "attachedTo": "person-1"},
        ],
    }


@pytest.fixture
def fake_client(huly_docs):
    return FakeHulyClient(huly_docs)
