"""Service layer for business logic."""

from .base_service import SessionManagedService
from .category_service import CategoryService
from .history_service import HistoryService
from .tenant_service import TenantService
from .ticket_service import TicketService

__all__ = [
    "SessionManagedService",
    "CategoryService",
    "HistoryService",
    "TenantService",
    "TicketService",
]
