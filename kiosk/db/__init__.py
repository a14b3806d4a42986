"""Database models and utilities."""

from .models import TicketMessageTable, TicketTable

__all__ = [
    "TicketMessageTable",
    "TicketTable",
]
