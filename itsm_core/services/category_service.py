"""
Category service.

CRUD for a tenant's category tree plus the derived views built on it:
nested tree, breadcrumb options, search and header stats. Ticket counts are
per category and non-recursive; subtree totals are computed on demand.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import func

from ..context.operation_context import operation
from ..context.tenant_context import TenantScope, get_scoped_or_404, scoped_query
from ..db.db_category_models import Category
from ..db.db_ticket_models import Ticket
from ..exceptions import ValidationError, validation_failed
from ..schemas.category_schema import (
    CategoryCreate,
    CategoryNode,
    CategoryOption,
    CategoryRead,
    CategoryStats,
    CategoryUpdate,
)
from ..schemas.ticket_schema import TicketRead, TicketStatusCounts
from ..utils.category_tree_utils import (
    build_tree,
    category_stats,
    find_descendant_ids,
    flatten_options,
    rollup_ticket_counts,
    search_categories,
)
from .base_service import SessionManagedService
from .ticket_service import TicketService

MIN_NAME_LENGTH = 2


class CategoryService(SessionManagedService):
    """Service for managing categories within a tenant."""

    def _validate_name(self, name: Optional[str]) -> str:
        trimmed = (name or "").strip()
        if len(trimmed) < MIN_NAME_LENGTH:
            raise validation_failed(
                "name", name, f"must be at least {MIN_NAME_LENGTH} characters"
            )
        return trimmed

    def _resolve_parent(self, scope: TenantScope, parent_id: Optional[str]) -> Optional[Category]:
        if not parent_id:
            return None
        parent = scoped_query(self.session, Category, scope).filter(Category.id == parent_id).first()
        if parent is None:
            raise ValidationError(
                "parent category not found", field="parent_id", parent_id=parent_id
            )
        return parent

    def _ticket_counts(self, scope: TenantScope) -> Dict[str, int]:
        rows = (
            self.session.query(Ticket.category_id, func.count(Ticket.id))
            .filter(Ticket.tenant_id == scope.tenant_id)
            .group_by(Ticket.category_id)
            .all()
        )
        return {category_id: count for category_id, count in rows}

    def _to_read(self, category: Category, tickets_count: int = 0) -> CategoryRead:
        return CategoryRead.model_validate(category).model_copy(
            update={"tickets_count": tickets_count}
        )

    @operation()
    def create_category(self, scope: TenantScope, data: CategoryCreate) -> CategoryRead:
        """
        Create a category, optionally under a parent of the same tenant.

        Raises:
            ValidationError: If the name is too short or the parent is unknown
        """
        name = self._validate_name(data.name)
        description = (data.description or "").strip() or None
        try:
            with self.transaction():
                parent = self._resolve_parent(scope, data.parent_id)
                category = Category(
                    name=name,
                    description=description,
                    parent_id=parent.id if parent else None,
                    tenant_id=scope.tenant_id,
                )
                self.session.add(category)
                self.session.flush()
            self.logger.info(
                "Created category",
                extra={"category_id": category.id, "tenant_id": scope.tenant_id},
            )
            return self._to_read(category)
        except Exception as e:
            self._handle_service_exception("create_category", e)

    @operation()
    def get_category(self, scope: TenantScope, category_id: str) -> CategoryRead:
        category = get_scoped_or_404(self.session, Category, category_id, scope)
        return self._to_read(category, self.aggregate_ticket_counts(scope, category_id))

    @operation()
    def get_category_detail(
        self, scope: TenantScope, category_id: str
    ) -> Tuple[CategoryRead, List[TicketRead], TicketStatusCounts]:
        """Return a category with its own tickets (newest first) and their status counts."""
        category = self.get_category(scope, category_id)
        tickets = TicketService(session=self.session, logger=self.logger)
        listed = tickets.list_tickets(scope, category_id=category_id, newest_first=True)
        counts = tickets.status_counts(scope, category_id=category_id)
        return category, listed, counts

    @operation()
    def list_categories(self, scope: TenantScope) -> List[CategoryRead]:
        """All categories of the tenant, oldest first, each with its own ticket count."""
        categories = (
            scoped_query(self.session, Category, scope)
            .order_by(Category.created_at.asc())
            .all()
        )
        counts = self._ticket_counts(scope)
        return [self._to_read(c, counts.get(c.id, 0)) for c in categories]

    @operation()
    def update_category(
        self, scope: TenantScope, category_id: str, data: CategoryUpdate
    ) -> CategoryRead:
        """
        Apply a partial update: rename, re-describe or move.

        An explicit null ``parent_id`` moves the category to the root.

        Raises:
            NotFoundError: If the category is not in the caller's tenant
            ValidationError: On a short name, an unknown parent, or a move that
                would put the category below itself
        """
        category = get_scoped_or_404(self.session, Category, category_id, scope)
        fields = data.model_fields_set
        try:
            with self.transaction():
                if "name" in fields:
                    category.name = self._validate_name(data.name)
                if "description" in fields:
                    category.description = (data.description or "").strip() or None
                if "parent_id" in fields:
                    parent = self._resolve_parent(scope, data.parent_id)
                    if parent is not None:
                        self._check_not_below_itself(scope, category, parent)
                    category.parent_id = parent.id if parent else None
            return self._to_read(category, self.aggregate_ticket_counts(scope, category_id))
        except Exception as e:
            self._handle_service_exception("update_category", e, category_id)

    def _check_not_below_itself(
        self, scope: TenantScope, category: Category, parent: Category
    ) -> None:
        if parent.id == category.id:
            raise ValidationError(
                "category cannot be its own parent", field="parent_id", category_id=category.id
            )
        flat = scoped_query(self.session, Category, scope).all()
        if parent.id in find_descendant_ids(flat, category.id):
            raise ValidationError(
                "category cannot be moved below its own descendant",
                field="parent_id",
                category_id=category.id,
                parent_id=parent.id,
            )

    @operation()
    def delete_category(self, scope: TenantScope, category_id: str) -> None:
        """
        Delete a category together with its tickets.

        Comments and history go with the tickets. Direct children are kept
        and become roots.
        """
        category = get_scoped_or_404(self.session, Category, category_id, scope)
        try:
            with self.transaction():
                tickets = scoped_query(self.session, Ticket, scope).filter(
                    Ticket.category_id == category_id
                )
                removed = 0
                for ticket in tickets.all():
                    self.session.delete(ticket)
                    removed += 1
                scoped_query(self.session, Category, scope).filter(
                    Category.parent_id == category_id
                ).update({Category.parent_id: None}, synchronize_session="fetch")
                self.session.delete(category)
            self.logger.info(
                "Deleted category",
                extra={"category_id": category_id, "tickets_removed": removed},
            )
        except Exception as e:
            self._handle_service_exception("delete_category", e, category_id)

    @operation()
    def aggregate_ticket_counts(self, scope: TenantScope, category_id: str) -> int:
        """Number of tickets filed directly under the category; descendants are not included."""
        return (
            scoped_query(self.session, Ticket, scope)
            .filter(Ticket.category_id == category_id)
            .count()
        )

    @operation()
    def get_tree(self, scope: TenantScope, include_rollup: bool = False) -> List[CategoryNode]:
        forest = build_tree(self.list_categories(scope))
        if include_rollup:
            rollup_ticket_counts(forest)
        return forest

    @operation()
    def get_options(self, scope: TenantScope) -> List[CategoryOption]:
        return flatten_options(build_tree(self.list_categories(scope)))

    @operation()
    def search(self, scope: TenantScope, query: Optional[str]) -> List[CategoryRead]:
        return search_categories(self.list_categories(scope), query)

    @operation()
    def get_stats(self, scope: TenantScope) -> CategoryStats:
        return category_stats(self.list_categories(scope))
