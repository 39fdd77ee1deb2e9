"""Telemetry client: turns application actions into analytics events.

A ``TelemetryClient`` is constructed explicitly and handed to whoever needs
it; it holds the browsing-session id and the store it writes to. Recording
is best-effort and at-most-once. Nothing here raises to the caller or
retries: a failed insert is logged and reported as a failed ``StoreResult``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from printdesk.analytics.events import (
    ChatbotMessagePayload,
    ContactFormPayload,
    EventPayload,
    EventType,
    ImageAnalyzedPayload,
    PageViewPayload,
    ProactiveMessagePayload,
    ServicePageVisitPayload,
    SuggestionClickedPayload,
    parse_payload,
    payload_to_dict,
)
from printdesk.analytics.store import EventFilter, EventStore
from printdesk.core.results import StoreResult

logger = logging.getLogger(__name__)

UserResolver = Callable[[], Awaitable[str | None]]
Clock = Callable[[], datetime]


def generate_session_id() -> str:
    return f"session_{uuid.uuid4().hex}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TelemetryClient:
    """Records events for one browsing session.

    Parameters
    ----------
    store : EventStore
        Where rows are appended.
    user_resolver : callable, optional
        Coroutine returning the current user id, or None when anonymous.
    session_id : str, optional
        Reuse an existing session id instead of generating one.
    clock : callable, optional
        Source of the event timestamp (UTC). Defaults to the system clock.
    user_agent, ip_address : str, optional
        Request metadata stored alongside every event.
    """

    def __init__(
        self,
        store: EventStore,
        user_resolver: UserResolver | None = None,
        session_id: str | None = None,
        clock: Clock | None = None,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> None:
        self.store = store
        self.user_resolver = user_resolver
        self.session_id = session_id or generate_session_id()
        self.clock = clock or utc_now
        self.user_agent = user_agent
        self.ip_address = ip_address

    def rotate_session(self) -> str:
        """Start a new session and return its id."""
        self.session_id = generate_session_id()
        return self.session_id

    # ------------------------------------------------------------------
    # Generic recording
    # ------------------------------------------------------------------

    async def track_event(
        self,
        event_type: EventType | str,
        event_data: EventPayload | dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> StoreResult[None]:
        event_type = getattr(event_type, "value", event_type)
        try:
            payload = payload_to_dict(event_data if event_data is not None else {})
            timestamp = self.clock().isoformat()
            if user_id is None:
                user_id = await self._resolve_user()
            row = {
                "event_type": event_type,
                "event_data": {**payload, "session_id": self.session_id, "timestamp": timestamp},
                "user_id": user_id,
                "session_id": self.session_id,
                "timestamp": timestamp,
                "user_agent": self.user_agent,
                "ip_address": self.ip_address,
            }
            result = await self.store.insert(row)
        except Exception as exc:
            logger.exception("Error in track_event for %s", event_type)
            return StoreResult.failure(exc, None)

        if not result.ok:
            logger.error("Error inserting analytics event %s: %s", event_type, result.error)
        return result

    async def track(
        self,
        event_type: EventType | str,
        data: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> StoreResult[None]:
        """Validate ``data`` against the type's payload model, then record it."""
        event_type = getattr(event_type, "value", event_type)
        try:
            payload = parse_payload(event_type, data)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.error("Invalid payload for %s event: %s", event_type, exc)
            return StoreResult.failure(exc, None)
        return await self.track_event(event_type, payload, user_id=user_id)

    async def _resolve_user(self) -> str | None:
        if self.user_resolver is None:
            return None
        try:
            user_id = await self.user_resolver()
        except Exception:
            logger.warning("Could not resolve current user, recording anonymously", exc_info=True)
            return None
        return str(user_id) if user_id else None

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    async def track_page_view(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.page_view, PageViewPayload, fields)

    async def track_chatbot_interaction(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.chatbot_message_sent, ChatbotMessagePayload, fields)

    async def track_image_upload_analysis(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.image_analyzed, ImageAnalyzedPayload, fields)

    async def track_suggestion_click(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.suggestion_clicked, SuggestionClickedPayload, fields)

    async def track_contact_form_submission(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.contact_form_submitted, ContactFormPayload, fields)

    async def track_service_page_visit(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.service_page_visited, ServicePageVisitPayload, fields)

    async def track_proactive_message(self, **fields: Any) -> StoreResult[None]:
        return await self._track_typed(EventType.proactive_message_shown, ProactiveMessagePayload, fields)

    async def _track_typed(
        self,
        event_type: EventType,
        model: type[EventPayload],
        fields: dict[str, Any],
    ) -> StoreResult[None]:
        user_id = fields.pop("user_id", None)
        try:
            payload = model(**fields)
        except ValidationError as exc:
            logger.error("Invalid payload for %s event: %s", event_type.value, exc)
            return StoreResult.failure(exc, None)
        return await self.track_event(event_type, payload, user_id=user_id)

    # ------------------------------------------------------------------
    # Session summary
    # ------------------------------------------------------------------

    async def get_session_summary(self) -> StoreResult[dict[str, Any] | None]:
        """All events of the current session, oldest first, with bounds."""
        return await session_summary(self.store, self.session_id)


async def session_summary(store: EventStore, session_id: str) -> StoreResult[dict[str, Any] | None]:
    result = await store.query(EventFilter(session_id=session_id, ascending=True))
    if not result.ok:
        logger.error("Error fetching session summary for %s: %s", session_id, result.error)
        return StoreResult.failure(result.error, None)

    events = result.value
    return StoreResult.success(
        {
            "sessionId": session_id,
            "events": events,
            "totalEvents": len(events),
            "sessionStart": events[0]["timestamp"] if events else None,
            "sessionEnd": events[-1]["timestamp"] if events else None,
        }
    )
