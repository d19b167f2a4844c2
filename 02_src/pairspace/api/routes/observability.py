"""Health and observability API routes."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...app import IApplication
from ...logging_config import get_logger

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str
    timestamp: str


class TraceEventResponse(BaseModel):
    """Response model for trace event."""

    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime


class MetricsResponse(BaseModel):
    """Counters for degraded-behavior monitoring."""

    events_processed: int
    fallback_replies: int
    replies_failed: int


def create_observability_router(app: IApplication) -> APIRouter:
    """Create observability router."""
    router = APIRouter(tags=["observability"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> dict:
        """Liveness check for monitoring."""
        logger.debug("Health check requested")
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @router.get("/api/trace-events", response_model=list[TraceEventResponse])
    async def get_trace_events(
        after: str | None = Query(None, description="ISO timestamp filter"),
        limit: int = Query(100, ge=1, le=1000),
        event_type: str | None = Query(None, description="Filter by event type"),
    ) -> list[dict]:
        """Get trace events with optional filters."""
        after_dt = None
        if after:
            try:
                after_dt = datetime.fromisoformat(after)
            except ValueError:
                raise HTTPException(status_code=400, detail="Invalid after timestamp format")

        try:
            events = await app.storage.get_trace_events(
                after=after_dt,
                event_types=[event_type] if event_type else None,
                limit=limit,
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        return [
            {
                "id": e.id,
                "event_type": e.event_type,
                "actor": e.actor,
                "data": e.data,
                "timestamp": e.timestamp.isoformat(),
            }
            for e in events
        ]

    @router.get("/api/metrics", response_model=MetricsResponse)
    async def get_metrics() -> dict:
        """Counts of processed events, fallback replies and failed sends."""
        try:
            return await app.tracker.metrics()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    return router
