"""Decide whether a visitor may currently post a follow-up message."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from .models import Ticket, TicketMessage
from .state import LOCKED_STATUSES, TicketStatus


@dataclass(slots=True, frozen=True)
class FollowUpDecision:
    """Outcome of the follow-up gate."""

    allowed: bool
    allow_attachment: bool

    @classmethod
    def denied(cls) -> "FollowUpDecision":
        return cls(allowed=False, allow_attachment=False)


def _latest(messages: Sequence[TicketMessage]) -> datetime | None:
    if not messages:
        return None
    return max(message.sent_at for message in messages)


def admin_has_turn(ticket: Ticket) -> bool:
    """True when the newest admin message is strictly newer than the newest visitor one."""

    last_admin = _latest(ticket.admin_messages)
    if last_admin is None:
        return False
    last_visitor = _latest(ticket.visitor_messages)
    return last_visitor is None or last_admin > last_visitor


def evaluate_follow_up(ticket: Ticket) -> FollowUpDecision:
    """Apply the follow-up policy to ``ticket``.

    * ``declined`` / ``closed``: always allowed (an appeal that reopens the ticket),
      attachments are not accepted.
    * ``opened``: allowed only while the admin holds the turn; attachments accepted.
    * ``accepted``: never allowed.
    """

    if ticket.status in LOCKED_STATUSES:
        return FollowUpDecision(allowed=True, allow_attachment=False)
    if ticket.status is TicketStatus.OPENED and admin_has_turn(ticket):
        return FollowUpDecision(allowed=True, allow_attachment=True)
    return FollowUpDecision.denied()
