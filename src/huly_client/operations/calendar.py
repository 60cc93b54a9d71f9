"""Calendar event operations."""
from .. import classes
from ..client import HulyClient, generate_id
from ..errors import EventNotFoundError
from ..schemas import CreateEventParams, DeleteEventParams, GetEventParams, ListEventsParams
from .shared import SORT_ASCENDING

ONE_HOUR_MS = 60 * 60 * 1000


def _event_summary(event: dict) -> dict:
    return {
        "event_id": event.get("eventId") or event["_id"],
        "title": event.get("title"),
        "date": event.get("date"),
        "due_date": event.get("dueDate"),
        "all_day": bool(event.get("allDay", False)),
        "location": event.get("location") or None,
    }


async def _find_event(client: HulyClient, event_id: str) -> dict:
    event = await client.find_one(classes.EVENT, {"eventId": event_id})
    if event is None:
        event = await client.find_one(classes.EVENT, {"_id": event_id})
    if event is None:
        raise EventNotFoundError(event_id)
    return event


async def list_events(client: HulyClient, params: ListEventsParams) -> dict:
    query: dict = {}
    date_range = {}
    if params.from_date is not None:
        date_range["$gte"] = params.from_date
    if params.to_date is not None:
        date_range["$lt"] = params.to_date
    if date_range:
        query["date"] = date_range
    events = await client.find_all(classes.EVENT, query, {"limit": params.limit, "sort": {"date": SORT_ASCENDING}})
    return {"events": [_event_summary(e) for e in events], "total": len(events)}


async def get_event(client: HulyClient, params: GetEventParams) -> dict:
    event = await _find_event(client, params.event_id)
    result = _event_summary(event)
    result["description"] = event.get("description") or None
    result["participants"] = event.get("participants", [])
    return result


async def create_event(client: HulyClient, params: CreateEventParams) -> dict:
    calendar = await client.find_one(classes.CALENDAR, {"hidden": False})
    due_date = params.due_date if params.due_date is not None else params.date + ONE_HOUR_MS
    event_id = generate_id()
    await client.add_collection(
        classes.EVENT,
        classes.SPACE_SPACE,
        classes.SPACE_SPACE,
        classes.SPACE,
        "events",
        {
            "eventId": event_id,
            "calendar": calendar["_id"] if calendar else None,
            "title": params.title,
            "description": params.description or "",
            "date": params.date,
            "dueDate": due_date,
            "allDay": params.all_day,
            "location": params.location,
            "participants": [],
            "access": "owner",
        },
    )
    return {"event_id": event_id, "title": params.title}


async def delete_event(client: HulyClient, params: DeleteEventParams) -> dict:
    event = await _find_event(client, params.event_id)
    await client.remove_doc(classes.EVENT, event.get("space", classes.SPACE_SPACE), event["_id"])
    return {"event_id": params.event_id, "deleted": True}
