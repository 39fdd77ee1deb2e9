"""Event vocabulary: the closed set of event types and one payload model per type.

``event_data`` is stored as an open JSON map, but every known event type has
a pydantic model describing its payload. Unknown or future event types are
still accepted and keep their payload as a plain ``dict``.
"""

from __future__ import annotations

import enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class EventType(str, enum.Enum):
    page_view = "page_view"
    chatbot_message_sent = "chatbot_message_sent"
    image_analyzed = "image_analyzed"
    suggestion_clicked = "suggestion_clicked"
    contact_form_submitted = "contact_form_submitted"
    service_page_visited = "service_page_visited"
    proactive_message_shown = "proactive_message_shown"


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

class EventPayload(BaseModel):
    # Extra keys are kept so clients can send fields this server doesn't know yet.
    model_config = ConfigDict(extra="allow")

    language: str


class PageViewPayload(EventPayload):
    page_name: str
    page_url: str
    referrer: str | None = None
    device_info: dict[str, Any] | None = None


class ChatbotMessagePayload(EventPayload):
    message_type: Literal["text", "image"]
    user_message: str
    bot_response: str
    has_image_analysis: bool = False


class ImageAnalyzedPayload(EventPayload):
    file_name: str
    file_size: int
    file_type: str
    analysis_result: Any = None


class SuggestionClickedPayload(EventPayload):
    suggestion_text: str
    category: str


class ContactFormPayload(EventPayload):
    form_data: dict[str, Any]
    success: bool
    error_message: str | None = None


class ServicePageVisitPayload(EventPayload):
    service_name: str
    time_spent: float | None = None
    scroll_depth: float | None = None


class ProactiveMessagePayload(EventPayload):
    trigger_type: str
    page_name: str
    message_content: str


PAYLOAD_MODELS: dict[EventType, type[EventPayload]] = {
    EventType.page_view: PageViewPayload,
    EventType.chatbot_message_sent: ChatbotMessagePayload,
    EventType.image_analyzed: ImageAnalyzedPayload,
    EventType.suggestion_clicked: SuggestionClickedPayload,
    EventType.contact_form_submitted: ContactFormPayload,
    EventType.service_page_visited: ServicePageVisitPayload,
    EventType.proactive_message_shown: ProactiveMessagePayload,
}


def known_event_type(event_type: str) -> EventType | None:
    try:
        return EventType(event_type)
    except ValueError:
        return None


def parse_payload(event_type: str, data: dict[str, Any] | None) -> EventPayload | dict[str, Any]:
    """Validate ``data`` against the payload model for ``event_type``.

    Returns the model instance for known types and the untouched dict for
    unknown ones. Raises ``pydantic.ValidationError`` when a known type's
    payload is malformed, and ``TypeError`` or ``ValueError`` when an
    unknown type's data is not a mapping.
    """
    data = data or {}
    known = known_event_type(event_type)
    if known is None:
        return dict(data)
    return PAYLOAD_MODELS[known].model_validate(data)


def payload_to_dict(payload: EventPayload | dict[str, Any]) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_none=True)
    return dict(payload)
