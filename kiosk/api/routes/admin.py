from __future__ import annotations

from fastapi import APIRouter, HTTPException

from kiosk.api.schemas import (
    AdminRespondRequest,
    AdminTicketResponse,
    DashboardRowResponse,
    to_admin_response,
)
from kiosk.dependencies.tickets import TicketServiceDep
from kiosk.tickets.conversation import ticket_conversation
from kiosk.tickets.errors import InvalidTicketActionError, TicketNotFoundError
from kiosk.tickets.models import AdminReview

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/tickets", response_model=list[DashboardRowResponse])
async def dashboard(service: TicketServiceDep) -> list[DashboardRowResponse]:
    rows = await service.dashboard()
    return [
        DashboardRowResponse(
            id=row.ticket.id,
            name=row.ticket.requester.name,
            email=row.ticket.requester.email,
            phone=row.ticket.requester.phone,
            request=row.ticket.requester.request,
            status=row.ticket.status,
            has_unseen_activity=row.has_unseen_activity,
            created_at=row.ticket.created_at,
        )
        for row in rows
    ]


@router.get("/tickets/{ticket_id}", response_model=AdminTicketResponse)
async def review_ticket(ticket_id: str, service: TicketServiceDep) -> AdminTicketResponse:
    try:
        ticket = await service.review_ticket(ticket_id)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return to_admin_response(ticket, ticket_conversation(ticket))


@router.post("/tickets/{ticket_id}/respond", response_model=AdminTicketResponse)
async def respond(
    ticket_id: str,
    payload: AdminRespondRequest,
    service: TicketServiceDep,
) -> AdminTicketResponse:
    review = AdminReview(
        action=payload.action,
        message=payload.message,
        cited_url=payload.cited_url,
        decline_reason=payload.decline_reason,
    )
    try:
        ticket = await service.respond(ticket_id, review)
    except InvalidTicketActionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return to_admin_response(ticket, ticket_conversation(ticket))
