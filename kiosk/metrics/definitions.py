"""Metric definitions used across the application."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

TICKETS_CREATED = "kiosk_tickets_created_total"
ADMIN_ACTIONS = "kiosk_admin_actions_total"
FOLLOW_UPS = "kiosk_follow_ups_total"
ATTACHMENTS_STORED = "kiosk_attachments_stored_total"
REQUEST_DURATION = "kiosk_ticket_operation_duration_seconds"


@dataclass(frozen=True)
class MetricDefinition:
    """Describe a metric that should exist in the registry."""

    name: str
    metric_type: str
    description: str
    label_names: Tuple[str, ...] = ()


DEFAULT_METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(
        name=TICKETS_CREATED,
        metric_type="counter",
        description="Tickets submitted at the kiosk.",
    ),
    MetricDefinition(
        name=ADMIN_ACTIONS,
        metric_type="counter",
        description="Admin review actions applied to tickets.",
        label_names=("action",),
    ),
    MetricDefinition(
        name=FOLLOW_UPS,
        metric_type="counter",
        description="Visitor follow-up attempts by outcome.",
        label_names=("outcome",),
    ),
    MetricDefinition(
        name=ATTACHMENTS_STORED,
        metric_type="counter",
        description="Attachments written to blob storage.",
    ),
    MetricDefinition(
        name=REQUEST_DURATION,
        metric_type="distribution",
        description="Duration of ticket service operations in seconds.",
        label_names=("operation",),
    ),
)
