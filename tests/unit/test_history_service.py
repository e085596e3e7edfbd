"""
Tests for HistoryService: append-only recording, ordering and read-time
label resolution.
"""

import pytest

from itsm_core.db import TicketHistory
from itsm_core.enums import HistoryField, TicketStatus
from itsm_core.exceptions import NotFoundError
from itsm_core.schemas import HistoryEntryRead, TicketUpdate, UserCreate
from itsm_core.services import HistoryService
from itsm_core.services.history_service import stringify


class TestRecord:
    def test_record_is_flushed_not_committed(self, db_manager, scope_a, ticket):
        session = db_manager.new_session()
        try:
            service = HistoryService(session=session)
            entry = service.record(
                ticket.id, scope_a.user_id, HistoryField.STATUS, TicketStatus.TODO, "DONE"
            )

            assert entry.id is not None
            assert (entry.old_value, entry.new_value) == ("TODO", "DONE")
            session.rollback()
            assert session.query(TicketHistory).filter_by(ticket_id=ticket.id).count() == 0
        finally:
            session.close()

    def test_record_changes_keeps_order(self, db_manager, history_service, scope_a, ticket):
        session = db_manager.new_session()
        try:
            HistoryService(session=session).record_changes(
                ticket.id,
                scope_a.user_id,
                [
                    (HistoryField.TITLE, "a", "b"),
                    (HistoryField.DESCRIPTION, None, "text"),
                ],
            )
            session.commit()
        finally:
            session.close()

        history = history_service.list_history(scope_a, ticket.id)
        assert [h.field for h in history] == ["title", "description"]

    @pytest.mark.parametrize(
        "value,expected",
        [(None, None), (TicketStatus.DONE, "DONE"), ("x", "x"), (3, "3")],
    )
    def test_stringify(self, value, expected):
        assert stringify(value) == expected


class TestListHistory:
    def test_oldest_first(self, ticket_service, history_service, scope_a, ticket):
        for status in ("IN_PROGRESS", "DONE", "TODO"):
            ticket_service.update_ticket(scope_a, ticket.id, TicketUpdate(status=status))

        history = history_service.list_history(scope_a, ticket.id)

        assert [(h.old_value, h.new_value) for h in history] == [
            ("TODO", "IN_PROGRESS"),
            ("IN_PROGRESS", "DONE"),
            ("DONE", "TODO"),
        ]

    def test_other_tenant_is_not_found(self, history_service, scope_b, ticket):
        with pytest.raises(NotFoundError):
            history_service.list_history(scope_b, ticket.id)


class TestResolveLabels:
    """Stored raw ids become display labels only when read."""

    def test_assignee_ids_resolve_to_name_then_email(
        self, ticket_service, tenant_service, history_service, scope_a, ticket, carol
    ):
        nameless = tenant_service.create_user(
            scope_a, UserCreate(email="dave@acme.test", password="secret123")
        )
        ticket_service.update_ticket(scope_a, ticket.id, TicketUpdate(assignee_id=carol.id))
        ticket_service.update_ticket(scope_a, ticket.id, TicketUpdate(assignee_id=nameless.id))

        raw = history_service.list_history(scope_a, ticket.id)
        resolved = history_service.resolve_labels(scope_a, raw)

        assert [(h.old_value, h.new_value) for h in raw] == [
            (None, carol.id),
            (carol.id, nameless.id),
        ]
        assert [(h.old_value, h.new_value) for h in resolved] == [
            (None, "Carol"),
            ("Carol", "dave@acme.test"),
        ]
        assert resolved[0].user_label == "Alice"

    def test_category_ids_resolve_to_names(
        self, ticket_service, history_service, scope_a, ticket, bugs
    ):
        ticket_service.update_ticket(scope_a, ticket.id, TicketUpdate(category_id=bugs.id))

        resolved = history_service.list_history(scope_a, ticket.id, resolve=True)

        assert [(h.field, h.old_value, h.new_value) for h in resolved] == [
            ("category", "Critical", "Bugs")
        ]

    def test_unresolvable_and_foreign_ids_pass_through(
        self, history_service, scope_a, ticket, tenant_b
    ):
        entry = HistoryEntryRead(
            id=1,
            ticket_id=ticket.id,
            user_id="gone-user",
            field="assignee",
            old_value="deleted-user",
            new_value=tenant_b.user.id,
            created_at=ticket.created_at,
        )

        [resolved] = history_service.resolve_labels(scope_a, [entry])

        assert resolved.old_value == "deleted-user"
        assert resolved.new_value == tenant_b.user.id
        assert resolved.user_label == "gone-user"

    def test_other_fields_and_stored_rows_are_untouched(
        self, ticket_service, history_service, scope_a, ticket, db_session
    ):
        ticket_service.update_ticket(scope_a, ticket.id, TicketUpdate(status="DONE"))

        resolved = history_service.list_history(scope_a, ticket.id, resolve=True)

        assert (resolved[0].old_value, resolved[0].new_value) == ("TODO", "DONE")
        stored = db_session.query(TicketHistory).filter_by(ticket_id=ticket.id).one()
        assert stored.new_value == "DONE"

    def test_history_survives_user_deletion(
        self, ticket_service, tenant_service, history_service, scope_a, ticket, carol
    ):
        ticket_service.update_ticket(scope_a, ticket.id, TicketUpdate(assignee_id=carol.id))
        tenant_service.delete_user(scope_a, carol.id)

        resolved = history_service.list_history(scope_a, ticket.id, resolve=True)

        assert resolved[0].new_value == carol.id
