"""Domain errors raised by the Huly client and operations.

Every error carries a ``tag`` equal to its class name. The MCP layer uses the
tag for telemetry and to decide how an error is presented to the caller:

- Not-found errors and invalid-value errors are expected (caller mistakes)
- Connection and authentication errors are unexpected (remote system trouble)
"""
from typing import Optional


class HulyError(Exception):
    """Base class for all Huly domain errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def tag(self) -> str:
        return type(self).__name__


class HulyConnectionError(HulyError):
    """Raised when the Huly server cannot be reached or fails the request."""


class HulyAuthError(HulyError):
    """Raised when the Huly server rejects the configured token."""


class NotFoundError(HulyError):
    """Base class for the "X not found" family."""


class ProjectNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__(f"Project '{identifier}' not found")
        self.identifier = identifier


class IssueNotFoundError(NotFoundError):
    def __init__(self, identifier: str, project: str):
        super().__init__(f"Issue '{identifier}' not found in project '{project}'")
        self.identifier = identifier
        self.project = project


class PersonNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__(f"Person '{identifier}' not found")
        self.identifier = identifier


class ComponentNotFoundError(NotFoundError):
    def __init__(self, identifier: str, project: str):
        super().__init__(f"Component '{identifier}' not found in project '{project}'")
        self.identifier = identifier
        self.project = project


class MilestoneNotFoundError(NotFoundError):
    def __init__(self, identifier: str, project: str):
        super().__init__(f"Milestone '{identifier}' not found in project '{project}'")
        self.identifier = identifier
        self.project = project


class LabelNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__(f"Label '{identifier}' not found")
        self.identifier = identifier


class CommentNotFoundError(NotFoundError):
    def __init__(self, comment_id: str, issue: str):
        super().__init__(f"Comment '{comment_id}' not found on issue '{issue}'")
        self.comment_id = comment_id
        self.issue = issue


class TeamspaceNotFoundError(NotFoundError):
    def __init__(self, identifier: str):
        super().__init__(f"Teamspace '{identifier}' not found")
        self.identifier = identifier


class DocumentNotFoundError(NotFoundError):
    def __init__(self, identifier: str, teamspace: str):
        super().__init__(f"Document '{identifier}' not found in teamspace '{teamspace}'")
        self.identifier = identifier
        self.teamspace = teamspace


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: str):
        super().__init__(f"Event '{event_id}' not found")
        self.event_id = event_id


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: str):
        super().__init__(f"Notification '{notification_id}' not found")
        self.notification_id = notification_id


class TimeSpendReportNotFoundError(NotFoundError):
    def __init__(self, report_id: str):
        super().__init__(f"Time spend report '{report_id}' not found")
        self.report_id = report_id


class InvalidStatusError(HulyError):
    def __init__(self, status: str, project: str):
        super().__init__(f"Invalid status '{status}' for project '{project}'")
        self.status = status
        self.project = project


class LabelExistsError(HulyError):
    def __init__(self, title: str):
        super().__init__(f"Label '{title}' already exists")
        self.title = title


class IssueTemplateNotFoundError(NotFoundError):
    def __init__(self, identifier: str, project: str):
        super().__init__(f"Issue template '{identifier}' not found in project '{project}'")
        self.identifier = identifier
        self.project = project


class AttachmentNotFoundError(NotFoundError):
    def __init__(self, attachment_id: str):
        super().__init__(f"Attachment '{attachment_id}' not found")
        self.attachment_id = attachment_id


class InvalidFileDataError(HulyError):
    """Raised when attachment content cannot be read or decoded."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Cannot read file data for '{filename}': {reason}")
        self.filename = filename
        self.reason = reason


class FileTooLargeError(HulyError):
    def __init__(self, filename: str, size: int, max_size: int):
        super().__init__(f"File '{filename}' is {size} bytes, larger than the {max_size} byte limit")
        self.filename = filename
        self.size = size
        self.max_size = max_size


class InvalidContentTypeError(HulyError):
    def __init__(self, filename: str, content_type: str):
        super().__init__(f"Content type '{content_type}' is not allowed for '{filename}'")
        self.filename = filename
        self.content_type = content_type
