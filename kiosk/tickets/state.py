from __future__ import annotations

from enum import Enum


class TicketStatus(str, Enum):
    """Supported states for a ticket's lifecycle."""

    OPENED = "opened"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CLOSED = "closed"


class AdminAction(str, Enum):
    """Review actions an admin may take on a ticket."""

    ACCEPT = "accept"
    DECLINE = "decline"
    CLOSE = "close"


# Locked tickets accept no turn-taking replies, but a visitor message reopens them.
LOCKED_STATUSES: frozenset[TicketStatus] = frozenset({TicketStatus.DECLINED, TicketStatus.CLOSED})

DEFAULT_DECLINE_REASON = "Declined"
DECLINE_REASONS: tuple[str, ...] = ("Incomplete info", "Not eligible", "Other")
