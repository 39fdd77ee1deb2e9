"""PrintDesk analytics: event recording and time-bucketed metrics.

Public API:
- EventType / parse_payload: closed event vocabulary with typed payloads
- EventStore / SqlEventStore / EventFilter: query and insert boundary
- TelemetryClient: best-effort event recorder bound to one session
- bucket_daily / bucket_monthly / year_over_year_growth: pure aggregation
- daily_progress / mood_overview / goal_breakdown: dashboard derivations
- AnalyticsService: per-user summary and website traffic reads
"""

from printdesk.analytics.aggregation import (
    bucket_daily,
    bucket_monthly,
    daily_progress,
    goal_breakdown,
    growth_percentage,
    mood_overview,
    year_over_year_growth,
)
from printdesk.analytics.events import EventType, parse_payload
from printdesk.analytics.recorder import TelemetryClient
from printdesk.analytics.store import EventFilter, EventStore, SqlEventStore
from printdesk.analytics.summary import AnalyticsService

__all__ = [
    "EventType",
    "parse_payload",
    "EventFilter",
    "EventStore",
    "SqlEventStore",
    "TelemetryClient",
    "bucket_daily",
    "bucket_monthly",
    "year_over_year_growth",
    "growth_percentage",
    "daily_progress",
    "mood_overview",
    "goal_breakdown",
    "AnalyticsService",
]
