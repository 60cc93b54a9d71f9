"""Notification tools."""
from huly_client.operations import notifications
from huly_client.schemas import (
    GetUnreadNotificationCountParams,
    ListNotificationsParams,
    MarkAllNotificationsReadParams,
    MarkNotificationReadParams,
)

from .registry import define_tool

CATEGORY = "notifications"

TOOLS = [
    define_tool(
        "list_notifications",
        "List inbox notifications, newest first.",
        ListNotificationsParams,
        notifications.list_notifications,
        CATEGORY,
    ),
    define_tool(
        "mark_notification_read",
        "Mark one notification as read.",
        MarkNotificationReadParams,
        notifications.mark_notification_read,
        CATEGORY,
    ),
    define_tool(
        "mark_all_notifications_read",
        "Mark all unread inbox notifications as read.",
        MarkAllNotificationsReadParams,
        notifications.mark_all_notifications_read,
        CATEGORY,
    ),
    define_tool(
        "get_unread_notification_count",
        "Count unread inbox notifications.",
        GetUnreadNotificationCountParams,
        notifications.get_unread_notification_count,
        CATEGORY,
    ),
]
