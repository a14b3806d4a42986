from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from .errors import FollowUpForbiddenError, InvalidTicketActionError
from .gate import evaluate_follow_up
from .models import AdminReview, Ticket, TicketMessage, VisitorFollowUp
from .state import DEFAULT_DECLINE_REASON, LOCKED_STATUSES, AdminAction, TicketStatus


class TicketStateMachine:
    """Apply admin review actions and visitor follow-ups to a ticket.

    Every transition returns a new :class:`Ticket` and leaves its input untouched.
    """

    _ADMIN_TARGETS: dict[AdminAction, TicketStatus] = {
        AdminAction.ACCEPT: TicketStatus.ACCEPTED,
        AdminAction.DECLINE: TicketStatus.DECLINED,
        AdminAction.CLOSE: TicketStatus.CLOSED,
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.OPENED

    @classmethod
    def parse_action(cls, action: AdminAction | str) -> AdminAction:
        try:
            return AdminAction(action)
        except ValueError as exc:
            raise InvalidTicketActionError(f"Unsupported admin action: {action!r}") from exc

    @classmethod
    def apply_admin_action(cls, ticket: Ticket, review: AdminReview, *, now: datetime) -> Ticket:
        action = cls.parse_action(review.action)
        status = cls._ADMIN_TARGETS[action]

        if action is AdminAction.ACCEPT:
            text = (review.message or "").strip()
            if not text:
                return replace(ticket, status=status, updated_at=now)
            message = TicketMessage.from_admin(text, cited_url=review.cited_url, sent_at=now)
            return ticket.with_message(message, status=status, updated_at=now)

        if action is AdminAction.DECLINE:
            reason = (review.decline_reason or "").strip() or DEFAULT_DECLINE_REASON
            message = TicketMessage.from_admin(f"Declined: {reason}", sent_at=now)
            return ticket.with_message(message, status=status, decline_reason=reason, updated_at=now)

        if ticket.status is status:
            return ticket
        return replace(ticket, status=status, updated_at=now)

    @classmethod
    def apply_follow_up(cls, ticket: Ticket, follow_up: VisitorFollowUp, *, now: datetime) -> Ticket:
        decision = evaluate_follow_up(ticket)
        if not decision.allowed:
            raise FollowUpForbiddenError(f"Ticket {ticket.id} is waiting for an admin response")

        attachment = follow_up.attachment if decision.allow_attachment else None
        message = TicketMessage.from_visitor(follow_up.message, attachment=attachment, sent_at=now)
        status = TicketStatus.OPENED if ticket.status in LOCKED_STATUSES else ticket.status
        return ticket.with_message(message, status=status, updated_at=now)
