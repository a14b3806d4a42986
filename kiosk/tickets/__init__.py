"""Ticket lifecycle domain models and services."""

from .conversation import merge_conversation, ticket_conversation
from .errors import FollowUpForbiddenError, InvalidTicketActionError, TicketNotFoundError, TicketServiceError
from .gate import FollowUpDecision, evaluate_follow_up
from .models import (
    AdminReview,
    ConversationEntry,
    MessageOrigin,
    RequesterInfo,
    Ticket,
    TicketMessage,
    VisitorFollowUp,
)
from .notifications import has_unseen_visitor_activity
from .service import DashboardRow, TicketService
from .state import DECLINE_REASONS, AdminAction, TicketStatus
from .transitions import TicketStateMachine

__all__ = [
    "AdminAction",
    "AdminReview",
    "ConversationEntry",
    "DECLINE_REASONS",
    "DashboardRow",
    "FollowUpDecision",
    "FollowUpForbiddenError",
    "InvalidTicketActionError",
    "MessageOrigin",
    "RequesterInfo",
    "Ticket",
    "TicketMessage",
    "TicketNotFoundError",
    "TicketService",
    "TicketServiceError",
    "TicketStateMachine",
    "TicketStatus",
    "VisitorFollowUp",
    "evaluate_follow_up",
    "has_unseen_visitor_activity",
    "merge_conversation",
    "ticket_conversation",
]
