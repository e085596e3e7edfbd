"""
Tenant scoping for the ITSM core.

Every service operation receives a TenantScope describing the authenticated
caller. The scope is built from stored user data (see
TenantService.resolve_scope), never from client-supplied input, and is
passed explicitly rather than looked up from ambient state.
"""

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Query, Session

from ..exceptions import ErrorCode, ValidationError, not_found

T = TypeVar("T")


class TenantScope(BaseModel):
    """The caller's tenant and identity for one request."""

    tenant_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def require_scope(scope: Any) -> TenantScope:
    """
    Validate that a usable scope was supplied.

    Raises:
        ValidationError: If the scope is missing or has an empty tenant id
    """
    if not isinstance(scope, TenantScope) or not scope.tenant_id.strip():
        raise ValidationError(
            "No tenant scope provided for tenant-aware operation",
            error_code=ErrorCode.MISSING_REQUIRED,
            field="tenant_id",
        )
    return scope


def scoped_query(session: Session, model_class: Type[T], scope: TenantScope) -> Query:
    """
    Start a query on ``model_class`` restricted to the scope's tenant.

    Args:
        session: Database session
        model_class: SQLAlchemy model with a ``tenant_id`` column
        scope: Caller scope

    Returns:
        Query filtered by tenant
    """
    require_scope(scope)
    return session.query(model_class).filter(model_class.tenant_id == scope.tenant_id)  # type: ignore[attr-defined]


def get_scoped_or_404(
    session: Session, model_class: Type[T], record_id: Optional[str], scope: TenantScope
) -> T:
    """
    Load one tenant-owned record by id.

    Rows belonging to another tenant are reported exactly like missing rows.

    Raises:
        NotFoundError: If no row with that id exists in the scope's tenant
    """
    record = None
    if record_id:
        record = (
            scoped_query(session, model_class, scope)
            .filter(model_class.id == record_id)  # type: ignore[attr-defined]
            .first()
        )
    if record is None:
        raise not_found(model_class.__name__, record_id=record_id, tenant_id=scope.tenant_id)
    return record
