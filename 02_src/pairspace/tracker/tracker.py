"""Tracker implementation for creating TraceEvents."""

import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..logging_config import get_logger
from ..models import TraceEvent
from ..storage import IStorage

logger = get_logger(__name__)

EVENT_PROCESSED = "event_processed"
FALLBACK_SENT = "fallback_sent"
REPLY_FAILED = "reply_failed"


class ITracker(Protocol):
    """Records TraceEvents for server-side observability."""

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and save to Storage."""
        ...


class Tracker:
    """Creates TraceEvents via direct track() calls."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and save to Storage. Never raises."""
        trace_event = TraceEvent(
            id=str(uuid.uuid4()),
            event_type=event_type,
            actor=actor,
            data=data,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            await self._storage.save_trace_event(trace_event)
        except Exception as e:
            logger.error(f"Failed to save trace event {event_type}: {e}", exc_info=True)

    async def metrics(self) -> dict[str, int]:
        """Counters for degraded-behavior monitoring."""
        return {
            "events_processed": await self._storage.count_trace_events(EVENT_PROCESSED),
            "fallback_replies": await self._storage.count_trace_events(FALLBACK_SENT),
            "replies_failed": await self._storage.count_trace_events(REPLY_FAILED),
        }
