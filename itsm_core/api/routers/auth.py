from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...config import get_config
from ...schemas.tenant_schema import LoginRequest
from ...services import TenantService
from ..dependencies import get_tenant_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login")
def login(data: LoginRequest, service: TenantService = Depends(get_tenant_service)):
    """Exchange email and password for a token, also set as the auth cookie."""
    token = service.authenticate(data.email, data.password)
    security = get_config().security
    response = JSONResponse({"ok": True, "token": token})
    response.set_cookie(
        security.cookie_name,
        token,
        max_age=security.token_ttl_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=get_config().is_production,
        path="/",
    )
    return response


@router.post("/logout")
def logout():
    response = JSONResponse({"ok": True})
    response.delete_cookie(get_config().security.cookie_name, path="/")
    return response
