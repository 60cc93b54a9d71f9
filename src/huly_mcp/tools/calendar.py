"""Calendar tools."""
from huly_client.operations import calendar
from huly_client.schemas import CreateEventParams, DeleteEventParams, GetEventParams, ListEventsParams

from .registry import define_tool

CATEGORY = "calendar"

TOOLS = [
    define_tool(
        "list_events",
        "List calendar events in start order, optionally within a date range (Unix ms).",
        ListEventsParams,
        calendar.list_events,
        CATEGORY,
    ),
    define_tool(
        "get_event",
        "Get a calendar event by id.",
        GetEventParams,
        calendar.get_event,
        CATEGORY,
    ),
    define_tool(
        "create_event",
        "Create a calendar event. Duration defaults to one hour.",
        CreateEventParams,
        calendar.create_event,
        CATEGORY,
    ),
    define_tool(
        "delete_event",
        "Delete a calendar event.",
        DeleteEventParams,
        calendar.delete_event,
        CATEGORY,
    ),
]
