from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Callable, Sequence
from weakref import WeakValueDictionary

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from kiosk.db.models import TicketMessageTable, TicketTable

from .models import MessageOrigin, RequesterInfo, Ticket, TicketMessage
from .state import TicketStatus

TicketMutation = Callable[[Ticket], Ticket]


class TicketRepository:
    """Persistence helper wrapping the `tickets` and `ticket_messages` tables.

    After creation, writes go through :meth:`update_ticket`: one transaction per
    call, holding a per-id lock and the ticket row lock.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine: AsyncEngine | None = engine
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def create_ticket(self, ticket: Ticket) -> Ticket:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    TicketTable(
                        id=ticket.id,
                        status=ticket.status.value,
                        name=ticket.requester.name,
                        email=ticket.requester.email,
                        phone=ticket.requester.phone,
                        request=ticket.requester.request,
                        attachment=ticket.requester.attachment,
                        decline_reason=ticket.decline_reason,
                        last_admin_seen_at=ticket.last_admin_seen_at,
                        created_at=ticket.created_at,
                        updated_at=ticket.updated_at,
                    )
                )
                for position, message in enumerate(ticket.messages):
                    session.add(self._message_to_table(ticket.id, position, message))
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket | None:
        async with self._session_factory() as session:
            row = await session.get(TicketTable, ticket_id)
            if row is None:
                return None
            messages = await self._load_messages(session, ticket_id)
        return self._table_to_ticket(row, messages)

    async def list_tickets(self) -> list[Ticket]:
        async with self._session_factory() as session:
            result = await session.execute(select(TicketTable).order_by(TicketTable.created_at.desc()))
            rows = list(result.scalars().all())
            message_result = await session.execute(
                select(TicketMessageTable).order_by(
                    TicketMessageTable.ticket_id.asc(), TicketMessageTable.position.asc()
                )
            )
            grouped: dict[str, list[TicketMessage]] = {}
            for message_row in message_result.scalars().all():
                grouped.setdefault(message_row.ticket_id, []).append(self._table_to_message(message_row))
        return [self._table_to_ticket(row, grouped.get(row.id, [])) for row in rows]

    async def update_ticket(self, ticket_id: str, mutation: TicketMutation) -> Ticket | None:
        """Apply ``mutation`` to the stored ticket atomically.

        Returns ``None`` when the ticket does not exist. Exceptions raised by
        ``mutation`` roll the transaction back and propagate unchanged.
        """

        async with self._lock_for(ticket_id):
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(TicketTable, ticket_id, with_for_update=True)
                    if row is None:
                        return None
                    messages = await self._load_messages(session, ticket_id)
                    current = self._table_to_ticket(row, messages)
                    updated = mutation(current)
                    appended = _appended_messages(current, updated)

                    row.status = updated.status.value
                    row.decline_reason = updated.decline_reason
                    row.last_admin_seen_at = updated.last_admin_seen_at
                    row.updated_at = updated.updated_at
                    for offset, message in enumerate(appended):
                        session.add(self._message_to_table(ticket_id, len(current.messages) + offset, message))
        return updated

    async def touch_admin_seen(self, ticket_id: str, seen_at: datetime) -> Ticket | None:
        async with self._lock_for(ticket_id):
            async with self._session_factory() as session:
                async with session.begin():
                    row = await session.get(TicketTable, ticket_id, with_for_update=True)
                    if row is None:
                        return None
                    row.last_admin_seen_at = seen_at
                    messages = await self._load_messages(session, ticket_id)
                    ticket = self._table_to_ticket(row, messages)
        return ticket

    def _lock_for(self, ticket_id: str) -> asyncio.Lock:
        lock = self._locks.get(ticket_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[ticket_id] = lock
        return lock

    async def _load_messages(self, session: AsyncSession, ticket_id: str) -> list[TicketMessage]:
        result = await session.execute(
            select(TicketMessageTable)
            .where(TicketMessageTable.ticket_id == ticket_id)
            .order_by(TicketMessageTable.position.asc())
        )
        return [self._table_to_message(row) for row in result.scalars().all()]

    @staticmethod
    def _message_to_table(ticket_id: str, position: int, message: TicketMessage) -> TicketMessageTable:
        return TicketMessageTable(
            id=str(uuid.uuid4()),
            ticket_id=ticket_id,
            position=position,
            origin=message.origin.value,
            text=message.text,
            cited_url=message.cited_url,
            attachment=message.attachment,
            sent_at=message.sent_at,
        )

    @staticmethod
    def _table_to_ticket(row: TicketTable, messages: Sequence[TicketMessage]) -> Ticket:
        return Ticket(
            id=row.id,
            status=TicketStatus(row.status),
            requester=RequesterInfo(
                name=row.name,
                email=row.email,
                phone=row.phone,
                request=row.request,
                attachment=row.attachment,
            ),
            decline_reason=row.decline_reason,
            messages=tuple(messages),
            last_admin_seen_at=_ensure_optional_datetime(row.last_admin_seen_at),
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )

    @staticmethod
    def _table_to_message(row: TicketMessageTable) -> TicketMessage:
        return TicketMessage(
            origin=MessageOrigin(row.origin),
            text=row.text,
            cited_url=row.cited_url,
            attachment=row.attachment,
            sent_at=_ensure_datetime(row.sent_at),
        )


def _appended_messages(current: Ticket, updated: Ticket) -> tuple[TicketMessage, ...]:
    existing = len(current.messages)
    if updated.id != current.id or updated.requester != current.requester:
        raise ValueError(f"Ticket {current.id} identity and requester details are immutable")
    if updated.messages[:existing] != current.messages:
        raise ValueError(f"Ticket {current.id} messages are append-only")
    return updated.messages[existing:]


def _ensure_datetime(value: datetime | None) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    raise TypeError("Expected datetime value from database")


def _ensure_optional_datetime(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return _ensure_datetime(value)
