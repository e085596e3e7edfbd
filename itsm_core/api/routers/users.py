from typing import Optional

from fastapi import APIRouter, Depends, status

from ...context.tenant_context import TenantScope
from ...exceptions import AuthenticationError
from ...schemas.tenant_schema import AuthUser, SignupRequest
from ...services import TenantService
from ..dependencies import get_optional_user, get_scope, get_tenant_service
from ..responses import dump, dump_all

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
def list_users(
    scope: TenantScope = Depends(get_scope),
    service: TenantService = Depends(get_tenant_service),
):
    return {"users": dump_all(service.list_users(scope))}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    data: SignupRequest,
    user: Optional[AuthUser] = Depends(get_optional_user),
    service: TenantService = Depends(get_tenant_service),
):
    """
    Add a user to the caller's tenant.

    Without credentials, a body carrying ``organizationName`` signs up a new
    tenant with this user as its first member.
    """
    if user is None:
        if not data.organization_name:
            raise AuthenticationError()
        result = service.signup(data)
        return {"user": dump(result.user), "tenant": dump(result.tenant)}
    scope = service.resolve_scope(user)
    return {"user": dump(service.create_user(scope, data))}


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    scope: TenantScope = Depends(get_scope),
    service: TenantService = Depends(get_tenant_service),
):
    service.delete_user(scope, user_id)
    return {"ok": True}
