from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from kiosk.api.schemas import VisitorTicketResponse, to_visitor_response
from kiosk.dependencies.tickets import TicketServiceDep
from kiosk.tickets.conversation import ticket_conversation
from kiosk.tickets.errors import FollowUpForbiddenError, TicketNotFoundError
from kiosk.tickets.gate import evaluate_follow_up

router = APIRouter(tags=["visitor"])


@router.get("/status/{ticket_id}", response_model=VisitorTicketResponse)
async def ticket_status(ticket_id: str, service: TicketServiceDep) -> VisitorTicketResponse:
    try:
        ticket = await service.get_ticket(ticket_id)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return to_visitor_response(ticket, ticket_conversation(ticket), evaluate_follow_up(ticket))


@router.post("/followup/{ticket_id}", response_model=VisitorTicketResponse)
async def follow_up(
    ticket_id: str,
    service: TicketServiceDep,
    message: Annotated[str, Form(min_length=1, max_length=5000)],
    image: UploadFile | None = File(default=None),
) -> VisitorTicketResponse:
    data = await image.read() if image is not None else None
    try:
        ticket = await service.submit_follow_up(
            ticket_id,
            message=message,
            attachment=data or None,
            attachment_name=image.filename if image is not None else None,
        )
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except FollowUpForbiddenError as exc:
        raise HTTPException(
            status_code=403, detail="Wait for admin response before sending another message."
        ) from exc
    return to_visitor_response(ticket, ticket_conversation(ticket), evaluate_follow_up(ticket))
