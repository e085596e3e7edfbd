"""
FastAPI dependencies: credentials, caller scope and per-request services.

Every service built here owns its session and closes it when the request
ends. The caller's tenant always comes from the stored user row.
"""

from typing import Callable, Iterator, Optional, Type, TypeVar

from fastapi import Depends, Header, Request

from ..config import get_config
from ..context.tenant_context import TenantScope
from ..exceptions import AuthenticationError
from ..schemas.tenant_schema import AuthUser
from ..services import (
    CategoryService,
    HistoryService,
    SessionManagedService,
    TenantService,
    TicketService,
)
from ..utils.auth_utils import verify_token

S = TypeVar("S", bound=SessionManagedService)


def get_token(
    request: Request, authorization: Optional[str] = Header(default=None)
) -> Optional[str]:
    """Read the token from ``Authorization: Bearer`` or, failing that, the auth cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer ") :].strip()
        if token:
            return token
    return request.cookies.get(get_config().security.cookie_name)


def get_current_user(token: Optional[str] = Depends(get_token)) -> AuthUser:
    return verify_token(token)


def get_optional_user(token: Optional[str] = Depends(get_token)) -> Optional[AuthUser]:
    """Like get_current_user, but an absent or invalid token yields None."""
    if not token:
        return None
    try:
        return verify_token(token)
    except AuthenticationError:
        return None


def get_scope(user: AuthUser = Depends(get_current_user)) -> TenantScope:
    with TenantService() as tenants:
        return tenants.resolve_scope(user)


def _managed(service_class: Type[S]) -> Callable[[], Iterator[S]]:
    def dependency() -> Iterator[S]:
        service = service_class()
        try:
            yield service
        finally:
            service.close()

    dependency.__name__ = f"get_{service_class.__name__}"
    return dependency


get_category_service = _managed(CategoryService)
get_ticket_service = _managed(TicketService)
get_history_service = _managed(HistoryService)
get_tenant_service = _managed(TenantService)
