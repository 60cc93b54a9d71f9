"""Huly platform class and space references used by the operations."""

# Core
STATUS = "core:class:Status"
SPACE = "core:class:Space"
SPACE_SPACE = "core:space:Space"
SPACE_WORKSPACE = "core:space:Workspace"
TX_CREATE_DOC = "core:class:TxCreateDoc"
TX_UPDATE_DOC = "core:class:TxUpdateDoc"
TX_REMOVE_DOC = "core:class:TxRemoveDoc"
TX_SPACE = "core:space:Tx"

STATUS_CATEGORY_WON = "task:statusCategory:Won"
STATUS_CATEGORY_LOST = "task:statusCategory:Lost"
PROJECT_TYPE = "task:class:ProjectType"

# Tracker
PROJECT = "tracker:class:Project"
ISSUE = "tracker:class:Issue"
COMPONENT = "tracker:class:Component"
MILESTONE = "tracker:class:Milestone"
TIME_SPEND_REPORT = "tracker:class:TimeSpendReport"
ISSUE_TEMPLATE = "tracker:class:IssueTemplate"
NO_PARENT = "tracker:ids:NoParent"
TASK_TYPE_ISSUE = "tracker:taskTypes:Issue"

# Chunter
CHAT_MESSAGE = "chunter:class:ChatMessage"

# Tags
TAG_ELEMENT = "tags:class:TagElement"
TAG_REFERENCE = "tags:class:TagReference"

# Attachments
ATTACHMENT = "attachment:class:Attachment"

# Documents
TEAMSPACE = "document:class:Teamspace"
DOCUMENT = "document:class:Document"
NO_PARENT_DOCUMENT = "document:ids:NoParent"

# Contacts
PERSON = "contact:class:Person"
EMPLOYEE = "contact:mixin:Employee"
CHANNEL = "contact:class:Channel"
EMAIL_PROVIDER = "contact:channelProvider:Email"

# Calendar
EVENT = "calendar:class:Event"
CALENDAR = "calendar:class:Calendar"

# Notifications
INBOX_NOTIFICATION = "notification:class:InboxNotification"

# Time
WORK_SLOT = "time:class:WorkSlot"
