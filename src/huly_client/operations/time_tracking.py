"""Time tracking operations.

Timers are not persisted by Huly; ``start_timer`` and ``stop_timer`` only
validate the issue and return timestamps the caller can feed into ``log_time``.
"""
from .. import classes
from ..client import HulyClient, now_ms
from ..schemas import GetTimeReportParams, ListTimeSpendReportsParams, LogTimeParams, StartTimerParams, StopTimerParams
from .shared import SORT_DESCENDING, find_project, find_project_and_issue


async def log_time(client: HulyClient, params: LogTimeParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)
    report_id = await client.add_collection(
        classes.TIME_SPEND_REPORT,
        project["_id"],
        issue["_id"],
        classes.ISSUE,
        "reports",
        {
            "employee": None,
            "date": now_ms(),
            "value": params.value,
            "description": params.description or "",
        },
    )

    # Issue aggregates are not maintained server-side
    operations: dict = {"$inc": {"reportedTime": params.value, "reports": 1}}
    remaining = issue.get("remainingTime") or 0
    if remaining > 0:
        operations["remainingTime"] = max(0, remaining - params.value)
    await client.update_doc(classes.ISSUE, project["_id"], issue["_id"], operations)

    return {"report_id": report_id, "identifier": issue.get("identifier")}


async def get_time_report(client: HulyClient, params: GetTimeReportParams) -> dict:
    project, issue = await find_project_and_issue(client, params.project, params.identifier)
    reports = await client.find_all(
        classes.TIME_SPEND_REPORT,
        {"attachedTo": issue["_id"]},
        {"sort": {"date": SORT_DESCENDING}},
    )
    return {
        "identifier": issue.get("identifier"),
        "estimation": issue.get("estimation") or 0,
        "remaining_time": issue.get("remainingTime") or 0,
        "reported_time": issue.get("reportedTime") or 0,
        "reports": [
            {"id": r["_id"], "date": r.get("date"), "value": r.get("value"), "description": r.get("description") or None}
            for r in reports
        ],
    }


async def list_time_spend_reports(client: HulyClient, params: ListTimeSpendReportsParams) -> dict:
    query: dict = {}
    if params.project:
        project = await find_project(client, params.project)
        query["space"] = project["_id"]
    reports = await client.find_all(
        classes.TIME_SPEND_REPORT,
        query,
        {"limit": params.limit, "sort": {"date": SORT_DESCENDING}},
    )
    return {
        "reports": [
            {
                "id": r["_id"],
                "issue_id": r.get("attachedTo"),
                "date": r.get("date"),
                "value": r.get("value"),
                "description": r.get("description") or None,
            }
            for r in reports
        ],
        "total": len(reports),
    }


async def start_timer(client: HulyClient, params: StartTimerParams) -> dict:
    _, issue = await find_project_and_issue(client, params.project, params.identifier)
    return {"identifier": issue.get("identifier"), "started_at": now_ms()}


async def stop_timer(client: HulyClient, params: StopTimerParams) -> dict:
    _, issue = await find_project_and_issue(client, params.project, params.identifier)
    return {"identifier": issue.get("identifier"), "stopped_at": now_ms()}
