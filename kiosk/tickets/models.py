from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from .state import TicketStatus


class MessageOrigin(str, Enum):
    """Which party authored a message."""

    ADMIN = "admin"
    VISITOR = "visitor"


@dataclass(slots=True, frozen=True)
class RequesterInfo:
    """Details captured at the kiosk; never changed after submission."""

    name: str
    email: str
    phone: str
    request: str
    attachment: str | None = None


@dataclass(slots=True, frozen=True)
class TicketMessage:
    """Single entry of a ticket's append-only message log."""

    origin: MessageOrigin
    text: str
    sent_at: datetime
    cited_url: str | None = None
    attachment: str | None = None

    @classmethod
    def from_admin(cls, text: str, *, sent_at: datetime, cited_url: str | None = None) -> "TicketMessage":
        return cls(
            origin=MessageOrigin.ADMIN,
            text=text,
            sent_at=sent_at,
            cited_url=(cited_url or "").strip() or None,
        )

    @classmethod
    def from_visitor(cls, text: str, *, sent_at: datetime, attachment: str | None = None) -> "TicketMessage":
        return cls(origin=MessageOrigin.VISITOR, text=text, sent_at=sent_at, attachment=attachment)


@dataclass(slots=True)
class Ticket:
    """Aggregate representing one visitor request and its conversation."""

    id: str
    status: TicketStatus
    requester: RequesterInfo
    created_at: datetime
    updated_at: datetime
    decline_reason: str | None = None
    messages: tuple[TicketMessage, ...] = field(default_factory=tuple)
    last_admin_seen_at: datetime | None = None

    @property
    def admin_messages(self) -> tuple[TicketMessage, ...]:
        return tuple(message for message in self.messages if message.origin is MessageOrigin.ADMIN)

    @property
    def visitor_messages(self) -> tuple[TicketMessage, ...]:
        return tuple(message for message in self.messages if message.origin is MessageOrigin.VISITOR)

    def with_message(self, message: TicketMessage, **changes: Any) -> "Ticket":
        """Return a copy with ``message`` appended and ``changes`` applied."""

        return replace(self, messages=(*self.messages, message), **changes)


@dataclass(slots=True, frozen=True)
class AdminReview:
    """Admin review input: the action plus its optional payload."""

    action: str
    message: str | None = None
    cited_url: str | None = None
    decline_reason: str | None = None


@dataclass(slots=True, frozen=True)
class VisitorFollowUp:
    """Visitor follow-up input; ``attachment`` is a blob-storage path."""

    message: str
    attachment: str | None = None


@dataclass(slots=True, frozen=True)
class ConversationEntry:
    """One row of the merged conversation view."""

    origin: MessageOrigin
    text: str
    sent_at: datetime
    cited_url: str | None = None
    attachment: str | None = None
