from __future__ import annotations

from .models import Ticket


def has_unseen_visitor_activity(ticket: Ticket) -> bool:
    """Return True when a visitor wrote after the admin's most recent message."""

    admin_times = [message.sent_at for message in ticket.admin_messages]
    last_admin = max(admin_times) if admin_times else None
    return any(
        last_admin is None or message.sent_at > last_admin for message in ticket.visitor_messages
    )
