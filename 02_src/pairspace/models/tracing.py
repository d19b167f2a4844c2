"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability event."""

    id: str
    event_type: str  # e.g. "event_processed", "fallback_sent"
    actor: str  # component that recorded it
    data: dict
    timestamp: datetime
