"""SQLModel table definitions for the kiosk data layer."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


class TicketTable(SQLModel, table=True):
    """Visitor requests submitted at the kiosk."""

    __tablename__ = "tickets"

    id: str = Field(sa_column=Column(String(36), primary_key=True, index=True))
    status: str = Field(sa_column=Column(String(20), nullable=False))
    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: str = Field(sa_column=Column(String(255), nullable=False))
    phone: str = Field(sa_column=Column(String(64), nullable=False))
    request: str = Field(sa_column=Column(Text, nullable=False))
    attachment: str | None = Field(default=None, sa_column=Column(String(512), nullable=True))
    decline_reason: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    last_admin_seen_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class TicketMessageTable(SQLModel, table=True):
    """Append-only message log shared by the admin and the visitor."""

    __tablename__ = "ticket_messages"
    __table_args__ = (UniqueConstraint("ticket_id", "position", name="uq_ticket_messages_position"),)

    id: str = Field(primary_key=True, index=True)
    ticket_id: str = Field(
        sa_column=Column(String(36), ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    position: int = Field(sa_column=Column(Integer, nullable=False))
    origin: str = Field(sa_column=Column(String(20), nullable=False))
    text: str = Field(sa_column=Column(Text, nullable=False))
    cited_url: str | None = Field(default=None, sa_column=Column(String(2048), nullable=True))
    attachment: str | None = Field(default=None, sa_column=Column(String(512), nullable=True))
    sent_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
