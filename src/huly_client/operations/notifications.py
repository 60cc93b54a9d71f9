"""Inbox notification operations."""
from .. import classes
from ..client import HulyClient
from ..errors import NotificationNotFoundError
from ..schemas import (
    GetUnreadNotificationCountParams,
    ListNotificationsParams,
    MarkAllNotificationsReadParams,
    MarkNotificationReadParams,
)
from .shared import SORT_DESCENDING

# Upper bound for bulk updates in one call
BULK_LIMIT = 500


async def list_notifications(client: HulyClient, params: ListNotificationsParams) -> dict:
    query: dict = {}
    if not params.include_archived:
        query["archived"] = False
    if params.unread_only:
        query["isViewed"] = False
    notifications = await client.find_all(
        classes.INBOX_NOTIFICATION,
        query,
        {"limit": params.limit, "sort": {"createdOn": SORT_DESCENDING}},
    )
    return {
        "notifications": [
            {
                "id": n["_id"],
                "is_viewed": bool(n.get("isViewed", False)),
                "archived": bool(n.get("archived", False)),
                "title": n.get("title") or n.get("header") or None,
                "body": n.get("body") or None,
                "created_on": n.get("createdOn"),
            }
            for n in notifications
        ],
        "total": len(notifications),
    }


async def mark_notification_read(client: HulyClient, params: MarkNotificationReadParams) -> dict:
    notification = await client.find_one(classes.INBOX_NOTIFICATION, {"_id": params.notification_id})
    if notification is None:
        raise NotificationNotFoundError(params.notification_id)
    if notification.get("isViewed"):
        return {"id": params.notification_id, "marked": False}
    await client.update_doc(
        classes.INBOX_NOTIFICATION,
        notification.get("space", classes.SPACE_SPACE),
        notification["_id"],
        {"isViewed": True},
    )
    return {"id": params.notification_id, "marked": True}


async def mark_all_notifications_read(client: HulyClient, params: MarkAllNotificationsReadParams) -> dict:
    unread = await client.find_all(
        classes.INBOX_NOTIFICATION,
        {"isViewed": False, "archived": False},
        {"limit": BULK_LIMIT},
    )
    for notification in unread:
        await client.update_doc(
            classes.INBOX_NOTIFICATION,
            notification.get("space", classes.SPACE_SPACE),
            notification["_id"],
            {"isViewed": True},
        )
    return {"marked": len(unread)}


async def get_unread_notification_count(client: HulyClient, params: GetUnreadNotificationCountParams) -> dict:
    unread = await client.find_all(
        classes.INBOX_NOTIFICATION,
        {"isViewed": False, "archived": False},
        {"projection": {"_id": 1}},
    )
    return {"count": len(unread)}
