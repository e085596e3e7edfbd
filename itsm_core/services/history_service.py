"""
Ticket history recorder.

History entries are append-only. Values are stored as plain strings; for the
assignee and category fields they are raw ids, turned into display labels
only when read back through ``resolve_labels``.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..context.operation_context import operation
from ..context.tenant_context import TenantScope, get_scoped_or_404
from ..db.db_category_models import Category
from ..db.db_tenant_models import User
from ..db.db_ticket_models import Ticket, TicketHistory
from ..enums import HistoryField
from ..schemas.ticket_schema import HistoryEntryRead
from .base_service import SessionManagedService

# (field, old value, new value)
FieldChange = Tuple[HistoryField, Any, Any]


def stringify(value: Any) -> Optional[str]:
    """Render a field value the way it is stored in history."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class HistoryService(SessionManagedService):
    """Writes and reads the per-field change trail of tickets."""

    @operation(name="history_service_record")
    def record(
        self,
        ticket_id: str,
        actor_id: str,
        field: HistoryField,
        old_value: Any,
        new_value: Any,
    ) -> TicketHistory:
        """
        Append one history entry.

        The entry is flushed but not committed; the enclosing transaction
        decides whether it is kept together with the ticket change.
        """
        try:
            entry = TicketHistory(
                ticket_id=ticket_id,
                user_id=actor_id,
                field=HistoryField(field).value,
                old_value=stringify(old_value),
                new_value=stringify(new_value),
            )
            self.session.add(entry)
            self.session.flush()
            return entry
        except Exception as e:
            self._handle_service_exception("record", e, ticket_id)

    def record_changes(
        self, ticket_id: str, actor_id: str, changes: Iterable[FieldChange]
    ) -> List[TicketHistory]:
        """Append one entry per (field, old, new) change, in the given order."""
        return [
            self.record(ticket_id, actor_id, field, old_value, new_value)
            for field, old_value, new_value in changes
        ]

    @operation(name="history_service_list")
    def list_history(
        self, scope: TenantScope, ticket_id: str, resolve: bool = False
    ) -> List[HistoryEntryRead]:
        """
        Return a ticket's history, oldest first.

        Raises:
            NotFoundError: If the ticket is not in the caller's tenant
        """
        get_scoped_or_404(self.session, Ticket, ticket_id, scope)
        rows = (
            self.session.query(TicketHistory)
            .filter(TicketHistory.ticket_id == ticket_id)
            .order_by(TicketHistory.created_at.asc(), TicketHistory.id.asc())
            .all()
        )
        entries = [HistoryEntryRead.model_validate(row) for row in rows]
        if resolve:
            entries = self.resolve_labels(scope, entries)
        return entries

    def resolve_labels(
        self, scope: TenantScope, entries: Sequence[HistoryEntryRead]
    ) -> List[HistoryEntryRead]:
        """
        Replace stored ids with display labels.

        Assignee values become the user's name, else email; category values
        become the category name. Ids that do not resolve inside the caller's
        tenant pass through unchanged. New objects are returned.
        """
        user_ids: Set[str] = {e.user_id for e in entries}
        category_ids: Set[str] = set()
        for entry in entries:
            if entry.field == HistoryField.ASSIGNEE.value:
                user_ids.update(v for v in (entry.old_value, entry.new_value) if v)
            elif entry.field == HistoryField.CATEGORY.value:
                category_ids.update(v for v in (entry.old_value, entry.new_value) if v)

        user_labels = self._user_labels(scope, user_ids)
        category_labels = self._category_labels(scope, category_ids)

        resolved = []
        for entry in entries:
            labels: Dict[str, str] = {}
            if entry.field == HistoryField.ASSIGNEE.value:
                labels = user_labels
            elif entry.field == HistoryField.CATEGORY.value:
                labels = category_labels
            resolved.append(
                entry.model_copy(
                    update={
                        "old_value": _label(labels, entry.old_value),
                        "new_value": _label(labels, entry.new_value),
                        "user_label": user_labels.get(entry.user_id, entry.user_id),
                    }
                )
            )
        return resolved

    def _user_labels(self, scope: TenantScope, ids: Set[str]) -> Dict[str, str]:
        if not ids:
            return {}
        users = (
            self.session.query(User)
            .filter(User.tenant_id == scope.tenant_id, User.id.in_(ids))
            .all()
        )
        return {user.id: user.display_name for user in users}

    def _category_labels(self, scope: TenantScope, ids: Set[str]) -> Dict[str, str]:
        if not ids:
            return {}
        categories = (
            self.session.query(Category)
            .filter(Category.tenant_id == scope.tenant_id, Category.id.in_(ids))
            .all()
        )
        return {category.id: category.name for category in categories}


def _label(labels: Dict[str, str], value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return labels.get(value, value)
