from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from printdesk.analytics.recorder import TelemetryClient
from printdesk.analytics.store import EventStore
from printdesk.core.dependencies import get_event_store
from printdesk.core.security import get_optional_user

router = APIRouter(tags=["events"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class EventItem(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=100)
    event_data: dict | None = None
    session_id: str = Field(..., min_length=1, max_length=255)
    # Client clock; absent means "now" on the server.
    timestamp: datetime | None = None


class BatchEventsRequest(BaseModel):
    events: list[EventItem]


class BatchEventsResponse(BaseModel):
    accepted: int
    failed: int


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.post("/events", response_model=BatchEventsResponse)
async def ingest_events(
    body: BatchEventsRequest,
    request: Request,
    user=Depends(get_optional_user),
    store: EventStore = Depends(get_event_store),
) -> BatchEventsResponse:
    """Batch event ingestion from the site and the chatbot widget.

    Events from anonymous visitors are recorded without a user id. Storage
    or payload failures are counted in ``failed`` and never turn into an
    error response.
    """
    user_id = str(user.id) if user is not None else None
    user_agent = request.headers.get("user-agent")
    ip_address = request.client.host if request.client else None

    accepted = 0
    for item in body.events:
        client = TelemetryClient(
            store,
            session_id=item.session_id,
            clock=(lambda ts=item.timestamp: ts) if item.timestamp else None,
            user_agent=user_agent,
            ip_address=ip_address,
        )
        result = await client.track(item.event_type, item.event_data, user_id=user_id)
        if result.ok:
            accepted += 1

    return BatchEventsResponse(accepted=accepted, failed=len(body.events) - accepted)
