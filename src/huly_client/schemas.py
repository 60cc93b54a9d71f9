"""Pydantic schemas for tool parameter validation.

Each operation takes exactly one of these models. The MCP layer derives the
advertised JSON input schema from the model and validates raw tool arguments
against it before the operation runs.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


class ToolParams(BaseModel):
    """Base class for all tool parameter models."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


def limit_field():
    return Field(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description=f"Maximum results (default {DEFAULT_LIMIT}, max {MAX_LIMIT})")


def project_field():
    return Field(..., min_length=1, description="Project identifier (e.g. 'HULY')")


def issue_field():
    return Field(..., min_length=1, description="Issue identifier ('HULY-12') or number ('12')")


class IssuePriority(str, Enum):
    """Issue priority levels as exposed to callers."""

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NO_PRIORITY = "no-priority"


# Huly stores priority as an integer
PRIORITY_TO_HULY: dict[IssuePriority, int] = {
    IssuePriority.NO_PRIORITY: 0,
    IssuePriority.URGENT: 1,
    IssuePriority.HIGH: 2,
    IssuePriority.MEDIUM: 3,
    IssuePriority.LOW: 4,
}
PRIORITY_FROM_HULY: dict[int, IssuePriority] = {v: k for k, v in PRIORITY_TO_HULY.items()}


# ============================================================================
# Projects
# ============================================================================

class ListProjectsParams(ToolParams):
    include_archived: bool = Field(False, description="Include archived projects")
    limit: int = limit_field()


class GetProjectParams(ToolParams):
    project: str = project_field()


# ============================================================================
# Issues
# ============================================================================

class ListIssuesParams(ToolParams):
    project: str = project_field()
    status: Optional[str] = Field(None, description="Filter by status name")
    assignee: Optional[str] = Field(None, description="Filter by assignee name or email")
    limit: int = limit_field()


class GetIssueParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()


class CreateIssueParams(ToolParams):
    project: str = project_field()
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, description="Issue description (markdown)")
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(None, description="Assignee name or email")
    status: Optional[str] = Field(None, description="Initial status name (defaults to the project default)")


class UpdateIssueParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(None, description="Assignee name or email; empty string unassigns")
    status: Optional[str] = None


class DeleteIssueParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()


class AddIssueLabelParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()
    label: str = Field(..., min_length=1, description="Label title; created if it does not exist")
    color: Optional[int] = Field(None, ge=0, le=9, description="Color code used when creating the label")


# ============================================================================
# Comments
# ============================================================================

class ListCommentsParams(ToolParams):
    project: str = project_field()
    issue_identifier: str = issue_field()
    limit: int = limit_field()


class AddCommentParams(ToolParams):
    project: str = project_field()
    issue_identifier: str = issue_field()
    body: str = Field(..., min_length=1, description="Comment body (markdown)")


class UpdateCommentParams(ToolParams):
    project: str = project_field()
    issue_identifier: str = issue_field()
    comment_id: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class DeleteCommentParams(ToolParams):
    project: str = project_field()
    issue_identifier: str = issue_field()
    comment_id: str = Field(..., min_length=1)


# ============================================================================
# Milestones
# ============================================================================

class MilestoneStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


MILESTONE_STATUS_TO_HULY: dict[MilestoneStatus, int] = {
    MilestoneStatus.PLANNED: 0,
    MilestoneStatus.IN_PROGRESS: 1,
    MilestoneStatus.COMPLETED: 2,
    MilestoneStatus.CANCELED: 3,
}
MILESTONE_STATUS_FROM_HULY: dict[int, MilestoneStatus] = {v: k for k, v in MILESTONE_STATUS_TO_HULY.items()}


class ListMilestonesParams(ToolParams):
    project: str = project_field()
    limit: int = limit_field()


class GetMilestoneParams(ToolParams):
    project: str = project_field()
    milestone: str = Field(..., min_length=1, description="Milestone id or label")


class CreateMilestoneParams(ToolParams):
    project: str = project_field()
    label: str = Field(..., min_length=1)
    description: Optional[str] = None
    target_date: int = Field(..., ge=0, description="Target date as Unix timestamp in milliseconds")


class SetIssueMilestoneParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()
    milestone: Optional[str] = Field(None, description="Milestone id or label; null clears it")


class DeleteMilestoneParams(ToolParams):
    project: str = project_field()
    milestone: str = Field(..., min_length=1)


# ============================================================================
# Components
# ============================================================================

class ListComponentsParams(ToolParams):
    project: str = project_field()
    limit: int = limit_field()


class GetComponentParams(ToolParams):
    project: str = project_field()
    component: str = Field(..., min_length=1, description="Component id or label")


class CreateComponentParams(ToolParams):
    project: str = project_field()
    label: str = Field(..., min_length=1)
    description: Optional[str] = None
    lead: Optional[str] = Field(None, description="Lead person name or email")


class SetIssueComponentParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()
    component: Optional[str] = Field(None, description="Component id or label; null clears it")


class DeleteComponentParams(ToolParams):
    project: str = project_field()
    component: str = Field(..., min_length=1)


# ============================================================================
# Issue templates
# ============================================================================

def template_field():
    return Field(..., min_length=1, description="Template id or title")


class ListIssueTemplatesParams(ToolParams):
    project: str = project_field()
    limit: int = limit_field()


class GetIssueTemplateParams(ToolParams):
    project: str = project_field()
    template: str = template_field()


class CreateIssueTemplateParams(ToolParams):
    project: str = project_field()
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, description="Template description (markdown)")
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(None, description="Default assignee name or email")
    component: Optional[str] = Field(None, description="Default component id or label")
    estimation: Optional[float] = Field(None, ge=0, description="Estimated effort in hours")


class CreateIssueFromTemplateParams(ToolParams):
    project: str = project_field()
    template: str = template_field()
    title: Optional[str] = Field(None, min_length=1, max_length=500, description="Override the template title")
    description: Optional[str] = Field(None, description="Override the template description")
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(None, description="Override the template assignee")
    status: Optional[str] = Field(None, description="Initial status name")


class UpdateIssueTemplateParams(ToolParams):
    project: str = project_field()
    template: str = template_field()
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    priority: Optional[IssuePriority] = None
    assignee: Optional[str] = Field(None, description="Assignee name or email; null unassigns")
    component: Optional[str] = Field(None, description="Component id or label; null clears it")
    estimation: Optional[float] = Field(None, ge=0)


class DeleteIssueTemplateParams(ToolParams):
    project: str = project_field()
    template: str = template_field()


# ============================================================================
# Attachments
# ============================================================================

def attachment_field():
    return Field(..., min_length=1, description="Attachment id")


class FileSourceParams(ToolParams):
    """Attachment content comes from exactly one of ``file_path`` or ``data``."""

    filename: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1, description="MIME type, e.g. 'image/png'")
    file_path: Optional[str] = Field(None, min_length=1, description="Path of a local file to upload")
    data: Optional[str] = Field(None, min_length=1, description="Base64 encoded file content")
    description: Optional[str] = None
    pinned: bool = False

    @model_validator(mode="after")
    def exactly_one_source(self):
        if (self.file_path is None) == (self.data is None):
            raise ValueError("provide exactly one of file_path or data")
        return self


class ListAttachmentsParams(ToolParams):
    object_id: str = Field(..., min_length=1, description="Id of the object the attachments belong to")
    object_class: str = Field(..., min_length=1, description="Class of that object, e.g. 'tracker:class:Issue'")
    limit: int = limit_field()


class GetAttachmentParams(ToolParams):
    attachment_id: str = attachment_field()


class AddAttachmentParams(FileSourceParams):
    object_id: str = Field(..., min_length=1)
    object_class: str = Field(..., min_length=1)
    space: str = Field(..., min_length=1, description="Space id of the object")


class AddIssueAttachmentParams(FileSourceParams):
    project: str = project_field()
    identifier: str = issue_field()


class AddDocumentAttachmentParams(FileSourceParams):
    teamspace: str = Field(..., min_length=1, description="Teamspace name or id")
    document: str = Field(..., min_length=1, description="Document title or id")


class UpdateAttachmentParams(ToolParams):
    attachment_id: str = attachment_field()
    description: Optional[str] = Field(None, description="New description; null clears it")
    pinned: Optional[bool] = None


class PinAttachmentParams(ToolParams):
    attachment_id: str = attachment_field()
    pinned: bool = True


class DeleteAttachmentParams(ToolParams):
    attachment_id: str = attachment_field()


class DownloadAttachmentParams(ToolParams):
    attachment_id: str = attachment_field()


# ============================================================================
# Labels
# ============================================================================

class ListLabelsParams(ToolParams):
    limit: int = limit_field()


class CreateLabelParams(ToolParams):
    title: str = Field(..., min_length=1)
    color: Optional[int] = Field(None, ge=0, le=9)
    description: Optional[str] = None


class DeleteLabelParams(ToolParams):
    label: str = Field(..., min_length=1, description="Label id or title")


class RemoveIssueLabelParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()
    label: str = Field(..., min_length=1)


# ============================================================================
# Documents
# ============================================================================

class ListTeamspacesParams(ToolParams):
    include_archived: bool = False
    limit: int = limit_field()


class ListDocumentsParams(ToolParams):
    teamspace: str = Field(..., min_length=1, description="Teamspace name or id")
    limit: int = limit_field()


class GetDocumentParams(ToolParams):
    teamspace: str = Field(..., min_length=1)
    document: str = Field(..., min_length=1, description="Document title or id")


class CreateDocumentParams(ToolParams):
    teamspace: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: Optional[str] = Field(None, description="Document content (markdown)")


class UpdateDocumentParams(ToolParams):
    teamspace: str = Field(..., min_length=1)
    document: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None


class DeleteDocumentParams(ToolParams):
    teamspace: str = Field(..., min_length=1)
    document: str = Field(..., min_length=1)


# ============================================================================
# Contacts
# ============================================================================

class ListPersonsParams(ToolParams):
    name_search: Optional[str] = Field(None, description="Substring match on the person's name")
    limit: int = limit_field()


class GetPersonParams(ToolParams):
    person: str = Field(..., min_length=1, description="Person id, name or email")


class ListEmployeesParams(ToolParams):
    limit: int = limit_field()


# ============================================================================
# Calendar
# ============================================================================

class ListEventsParams(ToolParams):
    from_date: Optional[int] = Field(None, ge=0, description="Only events starting at or after (ms)")
    to_date: Optional[int] = Field(None, ge=0, description="Only events starting before (ms)")
    limit: int = limit_field()


class GetEventParams(ToolParams):
    event_id: str = Field(..., min_length=1)


class CreateEventParams(ToolParams):
    title: str = Field(..., min_length=1)
    date: int = Field(..., ge=0, description="Start as Unix timestamp in milliseconds")
    due_date: Optional[int] = Field(None, ge=0, description="End as Unix timestamp in milliseconds (default: one hour after start)")
    description: Optional[str] = None
    location: Optional[str] = None
    all_day: bool = False


class DeleteEventParams(ToolParams):
    event_id: str = Field(..., min_length=1)


# ============================================================================
# Notifications
# ============================================================================

class ListNotificationsParams(ToolParams):
    unread_only: bool = False
    include_archived: bool = False
    limit: int = limit_field()


class MarkNotificationReadParams(ToolParams):
    notification_id: str = Field(..., min_length=1)


class MarkAllNotificationsReadParams(ToolParams):
    pass


class GetUnreadNotificationCountParams(ToolParams):
    pass


# ============================================================================
# Time tracking
# ============================================================================

class LogTimeParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()
    value: float = Field(..., gt=0, description="Time spent in hours")
    description: Optional[str] = None


class GetTimeReportParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()


class ListTimeSpendReportsParams(ToolParams):
    project: Optional[str] = Field(None, description="Restrict to one project")
    limit: int = limit_field()


class StartTimerParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()


class StopTimerParams(ToolParams):
    project: str = project_field()
    identifier: str = issue_field()


# ============================================================================
# Search
# ============================================================================

class FulltextSearchParams(ToolParams):
    query: str = Field(..., min_length=1)
    limit: int = limit_field()
