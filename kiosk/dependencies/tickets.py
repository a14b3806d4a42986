from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from kiosk.core.config import Settings, get_settings
from kiosk.tickets.service import TicketService


async def get_ticket_service(request: Request) -> TicketService:
    service = getattr(request.app.state, "ticket_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Ticket service is not configured")
    return service


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def public_url(request: Request, settings: Settings, path: str) -> str:
    """Absolute URL for ``path``, preferring the configured public base URL."""

    if settings.public_base_url:
        return settings.public_base_url.rstrip("/") + path
    return str(request.base_url).rstrip("/") + path
