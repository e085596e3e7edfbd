"""
Ticket service.

Owns the ticket lifecycle: creation, partial updates with change history,
filtering, per-status counters and comments. A ticket update and the history
entries it produces are committed together or not at all.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload

from ..config import get_config
from ..constants import RECENT_TICKET_DAYS, RECENT_TICKET_LIMIT
from ..context.operation_context import operation
from ..context.tenant_context import TenantScope, get_scoped_or_404, scoped_query
from ..db.db_base import utc_now
from ..db.db_category_models import Category
from ..db.db_tenant_models import User
from ..db.db_ticket_models import Comment, Ticket
from ..enums import HistoryField, TicketPriority, TicketStatus
from ..exceptions import ValidationError, validation_failed
from ..schemas.ticket_schema import (
    CommentCreate,
    CommentRead,
    TicketCreate,
    TicketRead,
    TicketStatusCounts,
    TicketUpdate,
)
from .base_service import SessionManagedService
from .history_service import FieldChange, HistoryService


def ticket_to_read(ticket: Ticket) -> TicketRead:
    """Convert a ticket row, adding its category name and assignee label."""
    return TicketRead.model_validate(ticket).model_copy(
        update={
            "category_name": ticket.category.name if ticket.category else None,
            "assignee_label": ticket.assignee.display_name if ticket.assignee else None,
        }
    )


def _required_text(field: str, value: Optional[str]) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        raise validation_failed(field, value, "is required")
    return trimmed


def _optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


class TicketService(SessionManagedService):
    """Service for tickets and their comments."""

    def _resolve_category(self, scope: TenantScope, category_id: Optional[str]) -> Category:
        if not category_id:
            raise validation_failed("category_id", category_id, "is required")
        category = (
            scoped_query(self.session, Category, scope).filter(Category.id == category_id).first()
        )
        if category is None:
            raise ValidationError(
                "category not found", field="category_id", category_id=category_id
            )
        return category

    def _resolve_assignee(self, scope: TenantScope, assignee_id: Optional[str]) -> Optional[User]:
        if not assignee_id:
            return None
        user = scoped_query(self.session, User, scope).filter(User.id == assignee_id).first()
        if user is None:
            raise ValidationError(
                "assignee not found", field="assignee_id", assignee_id=assignee_id
            )
        return user

    def _tickets(self, scope: TenantScope):
        return scoped_query(self.session, Ticket, scope).options(
            joinedload(Ticket.category), joinedload(Ticket.assignee)
        )

    @operation()
    def create_ticket(self, scope: TenantScope, data: TicketCreate) -> TicketRead:
        """
        File a new ticket under a category of the caller's tenant.

        Status defaults to TODO and priority to MEDIUM. Creation writes no
        history.

        Raises:
            ValidationError: On an empty title, or a category or assignee
                that does not resolve in the tenant
        """
        title = _required_text("title", data.title)
        category = self._resolve_category(scope, data.category_id)
        assignee = self._resolve_assignee(scope, data.assignee_id)
        try:
            with self.transaction():
                ticket = Ticket(
                    title=title,
                    description=_optional_text(data.description),
                    status=(data.status or TicketStatus.TODO).value,
                    priority=(data.priority or TicketPriority.MEDIUM).value,
                    category=category,
                    assignee=assignee,
                    tenant_id=scope.tenant_id,
                )
                self.session.add(ticket)
                self.session.flush()
            self.logger.info(
                "Created ticket",
                extra={"ticket_id": ticket.id, "category_id": category.id},
            )
            return ticket_to_read(ticket)
        except Exception as e:
            self._handle_service_exception("create_ticket", e)

    @operation()
    def get_ticket(self, scope: TenantScope, ticket_id: str) -> TicketRead:
        return ticket_to_read(get_scoped_or_404(self.session, Ticket, ticket_id, scope))

    @operation()
    def list_tickets(
        self,
        scope: TenantScope,
        category_id: Optional[str] = None,
        status: Optional[Union[TicketStatus, str]] = None,
        query: Optional[str] = None,
        newest_first: bool = False,
        created_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[TicketRead]:
        """
        List the tenant's tickets.

        Args:
            scope: Caller scope
            category_id: Only tickets filed directly under this category
            status: Only tickets in this status
            query: Case-insensitive match on title or description
            newest_first: Order by creation time descending instead of ascending
            created_since: Only tickets created at or after this instant
            limit: At most this many tickets, taken after ordering
        """
        if limit is not None and limit < 1:
            raise validation_failed("limit", limit, "must be at least 1")
        q = self._tickets(scope)
        if category_id:
            q = q.filter(Ticket.category_id == category_id)
        if status:
            q = q.filter(Ticket.status == self._parse_status(status).value)
        needle = (query or "").strip()
        if needle:
            pattern = f"%{needle}%"
            q = q.filter(or_(Ticket.title.ilike(pattern), Ticket.description.ilike(pattern)))
        if created_since is not None:
            q = q.filter(Ticket.created_at >= created_since)
        order = Ticket.created_at.desc() if newest_first else Ticket.created_at.asc()
        q = q.order_by(order)
        if limit is not None:
            q = q.limit(limit)
        return [ticket_to_read(t) for t in q.all()]

    def recent_tickets(
        self,
        scope: TenantScope,
        days: int = RECENT_TICKET_DAYS,
        status: Optional[Union[TicketStatus, str]] = None,
        limit: int = RECENT_TICKET_LIMIT,
        category_id: Optional[str] = None,
        query: Optional[str] = None,
    ) -> List[TicketRead]:
        """Tickets created within the last ``days`` days, newest first and capped at ``limit``."""
        if days < 0:
            raise validation_failed("recentDays", days, "must not be negative")
        return self.list_tickets(
            scope,
            category_id=category_id,
            status=status,
            query=query,
            newest_first=True,
            created_since=utc_now() - timedelta(days=days),
            limit=limit,
        )

    @staticmethod
    def _parse_status(status: Union[TicketStatus, str]) -> TicketStatus:
        try:
            return TicketStatus(status)
        except ValueError as e:
            raise validation_failed("status", status, "is not a valid status", cause=e) from e

    @operation()
    def update_ticket(self, scope: TenantScope, ticket_id: str, data: TicketUpdate) -> TicketRead:
        """
        Apply a partial update and record one history entry per changed field.

        Only fields present in the payload are considered. Explicit null clears
        ``description`` and ``assignee_id``; it is rejected for the required
        fields. The ticket change and its history are one transaction.

        Raises:
            NotFoundError: If the ticket is not in the caller's tenant
            ValidationError: On invalid field values
            ServiceError: If the change could not be stored; nothing is kept
        """
        ticket = get_scoped_or_404(self.session, Ticket, ticket_id, scope)
        updates: Dict[str, Any] = {}
        changes: List[FieldChange] = []
        features = get_config().features

        if data.provided("title"):
            title = _required_text("title", data.title)
            if title != ticket.title:
                updates["title"] = title
                changes.append((HistoryField.TITLE, ticket.title, title))

        if data.provided("description"):
            description = _optional_text(data.description)
            if description != ticket.description:
                updates["description"] = description
                changes.append((HistoryField.DESCRIPTION, ticket.description, description))

        if data.provided("status"):
            if data.status is None:
                raise validation_failed("status", None, "is required")
            if data.status.value != ticket.status:
                updates["status"] = data.status.value
                changes.append((HistoryField.STATUS, ticket.status, data.status.value))

        if data.provided("priority"):
            if data.priority is None:
                raise validation_failed("priority", None, "is required")
            if data.priority.value != ticket.priority:
                updates["priority"] = data.priority.value
                if features.track_priority_history:
                    changes.append((HistoryField.PRIORITY, ticket.priority, data.priority.value))

        if data.provided("category_id"):
            category = self._resolve_category(scope, data.category_id)
            if category.id != ticket.category_id:
                updates["category"] = category
                changes.append((HistoryField.CATEGORY, ticket.category_id, category.id))

        if data.provided("assignee_id"):
            assignee = self._resolve_assignee(scope, data.assignee_id)
            new_assignee_id = assignee.id if assignee else None
            if new_assignee_id != ticket.assignee_id:
                updates["assignee"] = assignee
                if features.track_assignee_history:
                    changes.append((HistoryField.ASSIGNEE, ticket.assignee_id, new_assignee_id))

        if not updates:
            return ticket_to_read(ticket)

        try:
            with self.transaction():
                for attr, value in updates.items():
                    setattr(ticket, attr, value)
                self.session.flush()
                history = HistoryService(session=self.session, logger=self.logger)
                history.record_changes(ticket.id, scope.user_id, changes)
            self.logger.info(
                "Updated ticket",
                extra={"ticket_id": ticket.id, "fields": ",".join(sorted(updates))},
            )
            return ticket_to_read(ticket)
        except Exception as e:
            self._handle_service_exception("update_ticket", e, ticket_id)

    @operation()
    def status_counts(
        self, scope: TenantScope, category_id: Optional[str] = None
    ) -> TicketStatusCounts:
        q = self.session.query(Ticket.status, func.count(Ticket.id)).filter(
            Ticket.tenant_id == scope.tenant_id
        )
        if category_id:
            q = q.filter(Ticket.category_id == category_id)
        by_status = {status: count for status, count in q.group_by(Ticket.status).all()}
        return TicketStatusCounts(
            total=sum(by_status.values()),
            todo=by_status.get(TicketStatus.TODO.value, 0),
            in_progress=by_status.get(TicketStatus.IN_PROGRESS.value, 0),
            done=by_status.get(TicketStatus.DONE.value, 0),
        )

    @operation()
    def add_comment(self, scope: TenantScope, ticket_id: str, data: CommentCreate) -> CommentRead:
        ticket = get_scoped_or_404(self.session, Ticket, ticket_id, scope)
        body = _required_text("text", data.body)
        try:
            with self.transaction():
                comment = Comment(ticket_id=ticket.id, body=body)
                self.session.add(comment)
                self.session.flush()
            return CommentRead.model_validate(comment)
        except Exception as e:
            self._handle_service_exception("add_comment", e, ticket_id)

    @operation()
    def list_comments(self, scope: TenantScope, ticket_id: str) -> List[CommentRead]:
        """Comments of a ticket, oldest first."""
        get_scoped_or_404(self.session, Ticket, ticket_id, scope)
        comments = (
            self.session.query(Comment)
            .filter(Comment.ticket_id == ticket_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )
        return [CommentRead.model_validate(c) for c in comments]
