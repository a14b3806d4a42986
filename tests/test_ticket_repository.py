from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import timedelta

import pytest
from sqlalchemy import inspect as sa_inspect

from factories import T0, admin_at, make_ticket, visitor_at
from kiosk.tickets.models import MessageOrigin, TicketMessage
from kiosk.tickets.repository import TicketRepository
from kiosk.tickets.state import TicketStatus


@pytest.mark.asyncio
async def test_ensure_schema_creates_tables(repository: TicketRepository, engine):
    async with engine.begin() as conn:
        tables = await conn.run_sync(lambda sync_conn: set(sa_inspect(sync_conn).get_table_names()))

    assert {"tickets", "ticket_messages"} <= tables


@pytest.mark.asyncio
async def test_create_and_get_round_trip(repository: TicketRepository):
    ticket = make_ticket(messages=(admin_at(1, "hi"),))

    await repository.create_ticket(ticket)
    loaded = await repository.get_ticket(ticket.id)

    assert loaded is not None
    assert loaded.requester == ticket.requester
    assert loaded.status is TicketStatus.OPENED
    assert loaded.messages == ticket.messages
    assert loaded.created_at == T0


@pytest.mark.asyncio
async def test_get_missing_ticket_returns_none(repository: TicketRepository):
    assert await repository.get_ticket("missing") is None
    assert await repository.update_ticket("missing", lambda t: t) is None
    assert await repository.touch_admin_seen("missing", T0) is None


@pytest.mark.asyncio
async def test_update_persists_status_and_appended_messages(repository: TicketRepository):
    await repository.create_ticket(make_ticket())

    def decline(ticket):
        return ticket.with_message(admin_at(5, "Declined: Other"), status=TicketStatus.DECLINED, decline_reason="Other")

    updated = await repository.update_ticket("ticket-1", decline)
    loaded = await repository.get_ticket("ticket-1")

    assert updated is not None
    assert loaded is not None
    assert loaded.status is TicketStatus.DECLINED
    assert loaded.decline_reason == "Other"
    assert [m.text for m in loaded.messages] == ["Declined: Other"]


@pytest.mark.asyncio
async def test_update_keeps_message_order(repository: TicketRepository):
    await repository.create_ticket(make_ticket())
    for index in range(3):
        message = visitor_at(index, f"v{index}") if index % 2 else admin_at(index, f"a{index}")
        await repository.update_ticket("ticket-1", lambda t, m=message: t.with_message(m))

    loaded = await repository.get_ticket("ticket-1")

    assert [m.text for m in loaded.messages] == ["a0", "v1", "a2"]
    assert [m.origin for m in loaded.messages] == [MessageOrigin.ADMIN, MessageOrigin.VISITOR, MessageOrigin.ADMIN]


@pytest.mark.asyncio
async def test_update_rejects_rewriting_history(repository: TicketRepository):
    await repository.create_ticket(make_ticket(messages=(admin_at(1, "original"),)))

    def rewrite(ticket):
        edited = TicketMessage.from_admin("edited", sent_at=ticket.messages[0].sent_at)
        return replace(ticket, messages=(edited,))

    with pytest.raises(ValueError):
        await repository.update_ticket("ticket-1", rewrite)

    loaded = await repository.get_ticket("ticket-1")
    assert [m.text for m in loaded.messages] == ["original"]


@pytest.mark.asyncio
async def test_failed_mutation_leaves_ticket_unchanged(repository: TicketRepository):
    await repository.create_ticket(make_ticket())

    def explode(ticket):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await repository.update_ticket("ticket-1", explode)

    loaded = await repository.get_ticket("ticket-1")
    assert loaded.status is TicketStatus.OPENED
    assert loaded.messages == ()


@pytest.mark.asyncio
async def test_concurrent_updates_are_not_lost(repository: TicketRepository):
    await repository.create_ticket(make_ticket())

    async def append(message):
        await repository.update_ticket("ticket-1", lambda t: t.with_message(message))

    await asyncio.gather(*(append(visitor_at(i, f"m{i}")) for i in range(5)))

    loaded = await repository.get_ticket("ticket-1")
    assert sorted(m.text for m in loaded.messages) == [f"m{i}" for i in range(5)]


@pytest.mark.asyncio
async def test_list_tickets_newest_first_with_messages(repository: TicketRepository):
    older = make_ticket(ticket_id="older", messages=(visitor_at(1),))
    newer = replace(make_ticket(ticket_id="newer"), created_at=T0 + timedelta(hours=1))
    await repository.create_ticket(older)
    await repository.create_ticket(newer)

    tickets = await repository.list_tickets()

    assert [t.id for t in tickets] == ["newer", "older"]
    assert len(tickets[1].messages) == 1
    assert tickets[0].messages == ()


@pytest.mark.asyncio
async def test_touch_admin_seen_records_timestamp(repository: TicketRepository):
    await repository.create_ticket(make_ticket())
    seen = T0 + timedelta(minutes=30)

    ticket = await repository.touch_admin_seen("ticket-1", seen)
    loaded = await repository.get_ticket("ticket-1")

    assert ticket.last_admin_seen_at == seen
    assert loaded.last_admin_seen_at == seen
    assert loaded.updated_at == T0


@pytest.mark.asyncio
async def test_ticket_id_columns_match_uuid_length(repository: TicketRepository, engine):
    async with engine.connect() as conn:
        columns = await conn.run_sync(
            lambda sync_conn: {
                table: {column["name"]: column["type"] for column in sa_inspect(sync_conn).get_columns(table)}
                for table in ("tickets", "ticket_messages")
            }
        )

    assert columns["tickets"]["id"].length == 36
    assert columns["ticket_messages"]["ticket_id"].length == 36
