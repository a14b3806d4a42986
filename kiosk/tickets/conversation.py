from __future__ import annotations

from typing import Iterable

from .models import ConversationEntry, MessageOrigin, Ticket, TicketMessage

# Equal timestamps list the admin entry first.
_ORIGIN_RANK: dict[MessageOrigin, int] = {MessageOrigin.ADMIN: 0, MessageOrigin.VISITOR: 1}


def _to_entry(message: TicketMessage) -> ConversationEntry:
    return ConversationEntry(
        origin=message.origin,
        text=message.text,
        sent_at=message.sent_at,
        cited_url=message.cited_url,
        attachment=message.attachment,
    )


def merge_conversation(
    admin_messages: Iterable[TicketMessage],
    visitor_messages: Iterable[TicketMessage],
) -> list[ConversationEntry]:
    """Merge both message streams into one list ordered by ``sent_at``.

    The sort is stable, so messages of the same origin sharing a timestamp keep
    their append order.
    """

    entries = [_to_entry(message) for message in admin_messages]
    entries.extend(_to_entry(message) for message in visitor_messages)
    entries.sort(key=lambda entry: (entry.sent_at, _ORIGIN_RANK[entry.origin]))
    return entries


def ticket_conversation(ticket: Ticket) -> list[ConversationEntry]:
    return merge_conversation(ticket.admin_messages, ticket.visitor_messages)
