"""Domain enums for tickets and their change history."""

from enum import Enum


class TicketStatus(str, Enum):
    """Ticket workflow status. Any status may move to any other."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class HistoryField(str, Enum):
    """Ticket fields whose changes are written to the audit trail."""

    TITLE = "title"
    DESCRIPTION = "description"
    STATUS = "status"
    PRIORITY = "priority"
    ASSIGNEE = "assignee"
    CATEGORY = "category"
