"""
Pydantic schemas for tickets, comments and history entries.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, Field

from ..enums import TicketPriority, TicketStatus
from .mixins import ApiModel, CoreEntityMixin


class TicketCreate(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    category_id: Optional[str] = None
    assignee_id: Optional[str] = None


class TicketUpdate(ApiModel):
    """
    PATCH-style partial update.

    A field omitted from the payload is absent from ``model_fields_set`` and
    left untouched; a field sent as null is present with value None.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    category_id: Optional[str] = None
    assignee_id: Optional[str] = None

    def provided(self, field_name: str) -> bool:
        return field_name in self.model_fields_set


class TicketRead(CoreEntityMixin):
    title: str
    description: Optional[str] = None
    status: TicketStatus
    priority: TicketPriority
    category_id: str
    category_name: Optional[str] = None
    assignee_id: Optional[str] = None
    assignee_label: Optional[str] = None


class TicketStatusCounts(ApiModel):
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    done: int = 0


class CommentCreate(ApiModel):
    body: Optional[str] = Field(default=None, validation_alias=AliasChoices("body", "text"))


class CommentRead(ApiModel):
    id: int
    ticket_id: str
    body: str
    created_at: datetime


class HistoryEntryRead(ApiModel):
    id: int
    ticket_id: str
    user_id: str
    user_label: Optional[str] = None
    field: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime
