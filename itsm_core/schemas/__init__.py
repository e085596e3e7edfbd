"""Pydantic schemas used at every service boundary."""

from .category_schema import (
    CategoryCreate,
    CategoryNode,
    CategoryOption,
    CategoryRead,
    CategoryStats,
    CategoryUpdate,
)
from .mixins import ApiModel, CoreEntityMixin, IdMixin, TenantMixin, TimestampMixin
from .tenant_schema import (
    AuthUser,
    LoginRequest,
    SignupRequest,
    SignupResult,
    TenantRead,
    UserCreate,
    UserRead,
)
from .ticket_schema import (
    CommentCreate,
    CommentRead,
    HistoryEntryRead,
    TicketCreate,
    TicketRead,
    TicketStatusCounts,
    TicketUpdate,
)

__all__ = [
    "ApiModel",
    "CoreEntityMixin",
    "IdMixin",
    "TenantMixin",
    "TimestampMixin",
    "AuthUser",
    "LoginRequest",
    "SignupRequest",
    "SignupResult",
    "TenantRead",
    "UserCreate",
    "UserRead",
    "CategoryCreate",
    "CategoryNode",
    "CategoryOption",
    "CategoryRead",
    "CategoryStats",
    "CategoryUpdate",
    "CommentCreate",
    "CommentRead",
    "HistoryEntryRead",
    "TicketCreate",
    "TicketRead",
    "TicketStatusCounts",
    "TicketUpdate",
]
