from __future__ import annotations


class TicketServiceError(RuntimeError):
    """Base error for ticket service issues."""


class TicketNotFoundError(TicketServiceError):
    """Raised when a ticket could not be located."""


class FollowUpForbiddenError(TicketServiceError):
    """Raised when the visitor is not allowed to send a message right now."""


class InvalidTicketActionError(TicketServiceError):
    """Raised when an admin submits an action outside the supported set."""
