from typing import Optional

from fastapi import APIRouter, Depends, status

from ...context.tenant_context import TenantScope
from ...schemas.category_schema import CategoryCreate, CategoryUpdate
from ...services import CategoryService
from ..dependencies import get_category_service, get_scope
from ..responses import dump, dump_all

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("")
def list_categories(
    q: Optional[str] = None,
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    """All categories with their own ticket counts; ``q`` narrows to a name search."""
    categories = service.search(scope, q) if q and q.strip() else service.list_categories(scope)
    return {"categories": dump_all(categories)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(
    data: CategoryCreate,
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    return {"category": dump(service.create_category(scope, data))}


@router.get("/tree")
def category_tree(
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    return {"tree": dump_all(service.get_tree(scope, include_rollup=True))}


@router.get("/options")
def category_options(
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    return {"options": dump_all(service.get_options(scope))}


@router.get("/stats")
def category_stats(
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    return {"stats": dump(service.get_stats(scope))}


@router.get("/{category_id}")
def get_category(
    category_id: str,
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    category, tickets, counts = service.get_category_detail(scope, category_id)
    return {"category": dump(category), "tickets": dump_all(tickets), "counts": dump(counts)}


@router.patch("/{category_id}")
def update_category(
    category_id: str,
    data: CategoryUpdate,
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    return {"category": dump(service.update_category(scope, category_id, data))}


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    scope: TenantScope = Depends(get_scope),
    service: CategoryService = Depends(get_category_service),
):
    service.delete_category(scope, category_id)
    return {"ok": True}
