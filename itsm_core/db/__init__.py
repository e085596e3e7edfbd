"""
SQLAlchemy models and database management for the ITSM core.
"""

from .db_base import TimestampMixin, UUIDMixin, new_id, utc_now
from .db_category_models import Category
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    database_config_from_url,
    get_db_manager,
    import_all_models,
    initialize_db,
    is_db_initialized,
    set_db_manager,
)
from .db_tenant_models import Tenant, User
from .db_ticket_models import Comment, Ticket, TicketHistory

__all__ = [
    # Base definitions
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "new_id",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "close_db",
    "database_config_from_url",
    "get_db_manager",
    "import_all_models",
    "initialize_db",
    "is_db_initialized",
    "set_db_manager",
    # Models
    "Category",
    "Comment",
    "Tenant",
    "Ticket",
    "TicketHistory",
    "User",
]
