from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from opentelemetry import trace

from kiosk.metrics import MetricsRegistry, metrics_registry
from kiosk.metrics.base import track_duration
from kiosk.metrics.definitions import ADMIN_ACTIONS, ATTACHMENTS_STORED, FOLLOW_UPS, REQUEST_DURATION, TICKETS_CREATED
from kiosk.storage import AttachmentStorage

from .errors import FollowUpForbiddenError, TicketNotFoundError
from .gate import evaluate_follow_up
from .models import AdminReview, RequesterInfo, Ticket, VisitorFollowUp
from .notifications import has_unseen_visitor_activity
from .repository import TicketRepository
from .state import LOCKED_STATUSES, TicketStatus
from .transitions import TicketStateMachine

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_timestamp(ticket: Ticket, now: datetime) -> datetime:
    """Keep message timestamps strictly increasing within one ticket."""

    if ticket.messages:
        latest = max(message.sent_at for message in ticket.messages)
        if now <= latest:
            return latest + timedelta(microseconds=1)
    return now


@dataclass(slots=True)
class DashboardRow:
    """Ticket plus the derived flag used to highlight it in the admin list."""

    ticket: Ticket
    has_unseen_activity: bool


class TicketService:
    """Request-scoped orchestration of the ticket lifecycle.

    Each write is one read-modify-write cycle through
    :meth:`TicketRepository.update_ticket`, with validation inside the cycle.
    """

    def __init__(
        self,
        repository: TicketRepository,
        *,
        attachments: AttachmentStorage | None = None,
        state_machine: type[TicketStateMachine] = TicketStateMachine,
        metrics: MetricsRegistry | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._repository = repository
        self._attachments = attachments
        self._state_machine = state_machine
        self._metrics = metrics or metrics_registry
        self._clock = clock or _utcnow

    async def ensure_schema(self) -> None:
        await self._repository.ensure_schema()

    async def create_ticket(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        request: str,
        attachment: bytes | None = None,
        attachment_name: str | None = None,
    ) -> Ticket:
        with tracer.start_as_current_span("tickets.create"), self._timed("create"):
            stored = await self._store_attachment(attachment, attachment_name) if attachment else None
            now = self._clock()
            ticket = Ticket(
                id=str(uuid.uuid4()),
                status=self._state_machine.initial_state(),
                requester=RequesterInfo(name=name, email=email, phone=phone, request=request, attachment=stored),
                created_at=now,
                updated_at=now,
            )
            try:
                created = await self._repository.create_ticket(ticket)
            except BaseException:
                await self._discard_attachment(stored)
                raise
        self._metrics.counter(TICKETS_CREATED).inc()
        logger.info("Created ticket %s", created.id)
        return created

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._repository.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        return ticket

    async def list_tickets(self) -> list[Ticket]:
        return await self._repository.list_tickets()

    async def dashboard(self) -> list[DashboardRow]:
        tickets = await self._repository.list_tickets()
        return [DashboardRow(ticket=ticket, has_unseen_activity=has_unseen_visitor_activity(ticket)) for ticket in tickets]

    async def review_ticket(self, ticket_id: str) -> Ticket:
        """Load a ticket for the admin review screen and record when it was seen."""

        ticket = await self._repository.touch_admin_seen(ticket_id, self._clock())
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        return ticket

    async def respond(self, ticket_id: str, review: AdminReview) -> Ticket:
        action = self._state_machine.parse_action(review.action)

        def mutation(current: Ticket) -> Ticket:
            return self._state_machine.apply_admin_action(
                current, review, now=_next_timestamp(current, self._clock())
            )

        with tracer.start_as_current_span("tickets.respond"), self._timed("respond"):
            updated = await self._repository.update_ticket(ticket_id, mutation)
        if updated is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")

        self._metrics.counter(ADMIN_ACTIONS, label_names=("action",)).inc(labels={"action": action.value})
        logger.info("Applied admin action %s to ticket %s -> %s", action.value, ticket_id, updated.status.value)
        return updated

    async def submit_follow_up(
        self,
        ticket_id: str,
        *,
        message: str,
        attachment: bytes | None = None,
        attachment_name: str | None = None,
    ) -> Ticket:
        ticket = await self.get_ticket(ticket_id)
        decision = evaluate_follow_up(ticket)
        if not decision.allowed:
            self._count_follow_up("forbidden")
            logger.info("Rejected follow-up on ticket %s in status %s", ticket_id, ticket.status.value)
            raise FollowUpForbiddenError(f"Ticket {ticket_id} is waiting for an admin response")

        stored: str | None = None
        if attachment and decision.allow_attachment:
            stored = await self._store_attachment(attachment, attachment_name)
        elif attachment:
            logger.info("Ignoring attachment on appeal for ticket %s", ticket_id)

        follow_up = VisitorFollowUp(message=message, attachment=stored)
        previous: list[TicketStatus] = []

        def mutation(current: Ticket) -> Ticket:
            previous.append(current.status)
            return self._state_machine.apply_follow_up(
                current, follow_up, now=_next_timestamp(current, self._clock())
            )

        try:
            with tracer.start_as_current_span("tickets.follow_up"), self._timed("follow_up"):
                updated = await self._repository.update_ticket(ticket_id, mutation)
        except FollowUpForbiddenError:
            self._count_follow_up("forbidden")
            await self._discard_attachment(stored)
            raise
        except BaseException:
            await self._discard_attachment(stored)
            raise
        if updated is None:
            await self._discard_attachment(stored)
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")

        if stored is not None and updated.messages[-1].attachment is None:
            await self._discard_attachment(stored)

        outcome = "reopened" if previous and previous[-1] in LOCKED_STATUSES else "accepted"
        self._count_follow_up(outcome)
        logger.info("Recorded visitor follow-up on ticket %s (%s)", ticket_id, outcome)
        return updated

    async def _store_attachment(self, data: bytes, filename: str | None) -> str:
        if self._attachments is None:
            raise RuntimeError("Attachment storage is not configured")
        path = await self._attachments.store(data, filename=filename)
        self._metrics.counter(ATTACHMENTS_STORED).inc()
        return path

    async def _discard_attachment(self, path: str | None) -> None:
        if path is not None and self._attachments is not None:
            await self._attachments.discard(path)

    def _count_follow_up(self, outcome: str) -> None:
        self._metrics.counter(FOLLOW_UPS, label_names=("outcome",)).inc(labels={"outcome": outcome})

    def _timed(self, operation: str):
        metric = self._metrics.distribution(REQUEST_DURATION, label_names=("operation",))
        return track_duration(metric, labels={"operation": operation})
