from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from kiosk.tickets.gate import FollowUpDecision
from kiosk.tickets.models import ConversationEntry, MessageOrigin, Ticket
from kiosk.tickets.state import DECLINE_REASONS, TicketStatus


class ConversationEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    origin: MessageOrigin
    text: str
    cited_url: str | None = None
    attachment: str | None = None
    sent_at: datetime


class FollowUpDecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    allowed: bool
    allow_attachment: bool


class RequesterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str
    phone: str
    request: str
    attachment: str | None = None


class CheckinResponse(BaseModel):
    id: str
    status: TicketStatus
    status_url: str
    qr: str


class VisitorTicketResponse(BaseModel):
    """What the visitor sees on the status page behind the QR code."""

    id: str
    name: str
    status: TicketStatus
    decline_reason: str | None
    conversation: list[ConversationEntryResponse]
    follow_up: FollowUpDecisionResponse


class DashboardRowResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: str
    request: str
    status: TicketStatus
    has_unseen_activity: bool
    created_at: datetime


class AdminTicketResponse(BaseModel):
    """Admin review screen payload."""

    id: str
    status: TicketStatus
    requester: RequesterResponse
    decline_reason: str | None
    conversation: list[ConversationEntryResponse]
    decline_reasons: list[str] = Field(default_factory=lambda: list(DECLINE_REASONS))
    last_admin_seen_at: datetime | None
    created_at: datetime
    updated_at: datetime


class AdminRespondRequest(BaseModel):
    action: str = Field(..., min_length=1, max_length=32)
    message: str | None = Field(default=None)
    cited_url: str | None = Field(default=None, max_length=2048)
    decline_reason: str | None = Field(default=None, max_length=500)


def to_conversation(entries: list[ConversationEntry]) -> list[ConversationEntryResponse]:
    return [ConversationEntryResponse.model_validate(entry) for entry in entries]


def to_visitor_response(
    ticket: Ticket, conversation: list[ConversationEntry], decision: FollowUpDecision
) -> VisitorTicketResponse:
    return VisitorTicketResponse(
        id=ticket.id,
        name=ticket.requester.name,
        status=ticket.status,
        decline_reason=ticket.decline_reason,
        conversation=to_conversation(conversation),
        follow_up=FollowUpDecisionResponse.model_validate(decision),
    )


def to_admin_response(ticket: Ticket, conversation: list[ConversationEntry]) -> AdminTicketResponse:
    return AdminTicketResponse(
        id=ticket.id,
        status=ticket.status,
        requester=RequesterResponse.model_validate(ticket.requester),
        decline_reason=ticket.decline_reason,
        conversation=to_conversation(conversation),
        last_admin_seen_at=ticket.last_admin_seen_at,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
    )
