"""Time tracking tools."""
from huly_client.operations import time_tracking
from huly_client.schemas import (
    GetTimeReportParams,
    ListTimeSpendReportsParams,
    LogTimeParams,
    StartTimerParams,
    StopTimerParams,
)

from .registry import define_tool

CATEGORY = "time"

TOOLS = [
    define_tool(
        "log_time",
        "Log time spent on an issue, in hours.",
        LogTimeParams,
        time_tracking.log_time,
        CATEGORY,
    ),
    define_tool(
        "get_time_report",
        "Get estimation, remaining and reported time for an issue with its time reports.",
        GetTimeReportParams,
        time_tracking.get_time_report,
        CATEGORY,
    ),
    define_tool(
        "list_time_spend_reports",
        "List time spend reports, newest first, optionally for one project.",
        ListTimeSpendReportsParams,
        time_tracking.list_time_spend_reports,
        CATEGORY,
    ),
    define_tool(
        "start_timer",
        "Start a client-side timer on an issue. Returns the start timestamp.",
        StartTimerParams,
        time_tracking.start_timer,
        CATEGORY,
    ),
    define_tool(
        "stop_timer",
        "Stop a client-side timer on an issue. Returns the stop timestamp; log the time with log_time.",
        StopTimerParams,
        time_tracking.stop_timer,
        CATEGORY,
    ),
]
