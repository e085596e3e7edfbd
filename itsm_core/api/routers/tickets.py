from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...constants import RECENT_TICKET_LIMIT
from ...context.tenant_context import TenantScope
from ...schemas.ticket_schema import CommentCreate, TicketCreate, TicketUpdate
from ...services import HistoryService, TicketService
from ..dependencies import get_history_service, get_scope, get_ticket_service
from ..responses import dump, dump_all

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("")
def list_tickets(
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    ticket_status: Optional[str] = Query(default=None, alias="status"),
    q: Optional[str] = None,
    recent_days: Optional[int] = Query(default=None, alias="recentDays", ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    scope: TenantScope = Depends(get_scope),
    service: TicketService = Depends(get_ticket_service),
):
    """All matching tickets; ``recentDays`` switches to the newest-first recent view."""
    if recent_days is not None:
        tickets = service.recent_tickets(
            scope,
            days=recent_days,
            status=ticket_status,
            limit=limit or RECENT_TICKET_LIMIT,
            category_id=category_id,
            query=q,
        )
    else:
        tickets = service.list_tickets(
            scope, category_id=category_id, status=ticket_status, query=q, limit=limit
        )
    return {"tickets": dump_all(tickets)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_ticket(
    data: TicketCreate,
    scope: TenantScope = Depends(get_scope),
    service: TicketService = Depends(get_ticket_service),
):
    return {"ticket": dump(service.create_ticket(scope, data))}


@router.get("/{ticket_id}")
def get_ticket(
    ticket_id: str,
    scope: TenantScope = Depends(get_scope),
    service: TicketService = Depends(get_ticket_service),
):
    return {"ticket": dump(service.get_ticket(scope, ticket_id))}


@router.patch("/{ticket_id}")
def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    scope: TenantScope = Depends(get_scope),
    service: TicketService = Depends(get_ticket_service),
):
    """Partial update; only keys present in the body are applied."""
    return {"ticket": dump(service.update_ticket(scope, ticket_id, data))}


@router.get("/{ticket_id}/comments")
def list_comments(
    ticket_id: str,
    scope: TenantScope = Depends(get_scope),
    service: TicketService = Depends(get_ticket_service),
):
    return {"comments": dump_all(service.list_comments(scope, ticket_id))}


@router.post("/{ticket_id}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    ticket_id: str,
    data: CommentCreate,
    scope: TenantScope = Depends(get_scope),
    service: TicketService = Depends(get_ticket_service),
):
    return {"comment": dump(service.add_comment(scope, ticket_id, data))}


@router.get("/{ticket_id}/history")
def ticket_history(
    ticket_id: str,
    scope: TenantScope = Depends(get_scope),
    service: HistoryService = Depends(get_history_service),
):
    return {"history": dump_all(service.list_history(scope, ticket_id, resolve=True))}
