from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, Request, UploadFile, status

from kiosk.api.schemas import CheckinResponse
from kiosk.dependencies.tickets import SettingsDep, TicketServiceDep, public_url
from kiosk.qr import build_status_qr

router = APIRouter(tags=["kiosk"])


@router.post("/checkin", response_model=CheckinResponse, status_code=status.HTTP_201_CREATED)
async def checkin(
    request: Request,
    service: TicketServiceDep,
    settings: SettingsDep,
    name: Annotated[str, Form(min_length=1, max_length=255)],
    description: Annotated[str, Form(alias="request", min_length=1)],
    email: Annotated[str, Form(max_length=255)] = "",
    phone: Annotated[str, Form(max_length=64)] = "",
    image: UploadFile | None = File(default=None),
) -> CheckinResponse:
    data = await image.read() if image is not None else None
    ticket = await service.create_ticket(
        name=name,
        email=email,
        phone=phone,
        request=description,
        attachment=data or None,
        attachment_name=image.filename if image is not None else None,
    )
    status_url = public_url(request, settings, f"/status/{ticket.id}")
    return CheckinResponse(
        id=ticket.id,
        status=ticket.status,
        status_url=status_url,
        qr=build_status_qr(status_url, image_format=settings.qr_image_format),
    )
