"""Dashboard-facing analytics reads.

``AnalyticsService`` fetches rows from the event store and feeds them to
the pure functions in ``aggregation``. Each public method returns a
``StoreResult`` whose value is the zero state when the store fails, so
dashboards render "no activity yet" instead of an error.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any

from printdesk.analytics.aggregation import bucket_daily, bucket_monthly, year_over_year_growth
from printdesk.analytics.events import EventType
from printdesk.analytics.store import EventFilter, EventStore
from printdesk.core.results import StoreResult

logger = logging.getLogger(__name__)


def empty_summary() -> dict[str, int]:
    return {"totalChatbotInteractions": 0, "totalServicePageViews": 0}


class AnalyticsService:
    """Read side of the analytics package.

    Parameters
    ----------
    store : EventStore
        Event store to read from.
    """

    def __init__(self, store: EventStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Per-user summary
    # ------------------------------------------------------------------

    async def get_dashboard_summary_for_user(
        self, user_id: str | uuid.UUID | None
    ) -> StoreResult[dict[str, int]]:
        """Chatbot interaction and service page view counts for one user.

        The two counts are independent reads, not a snapshot: an insert
        landing between them shows up in one count and not the other.
        """
        if not user_id:
            return StoreResult.success(empty_summary())

        chatbot = await self.store.count(
            EventFilter(event_type=EventType.chatbot_message_sent.value, user_id=user_id)
        )
        if not chatbot.ok:
            return self._summary_failure(chatbot.error)

        service_views = await self.store.count(
            EventFilter(event_type=EventType.service_page_visited.value, user_id=user_id)
        )
        if not service_views.ok:
            return self._summary_failure(service_views.error)

        return StoreResult.success(
            {
                "totalChatbotInteractions": chatbot.value or 0,
                "totalServicePageViews": service_views.value or 0,
            }
        )

    @staticmethod
    def _summary_failure(error: str | None) -> StoreResult[dict[str, int]]:
        logger.error("Error fetching dashboard analytics summary: %s", error)
        return StoreResult.failure(error or "count failed", empty_summary())

    # ------------------------------------------------------------------
    # Website traffic
    # ------------------------------------------------------------------

    async def _page_views(
        self, start: datetime | None, end: datetime | None
    ) -> StoreResult[list[dict[str, Any]]]:
        return await self.store.query(
            EventFilter(event_type=EventType.page_view.value, start=start, end=end, ascending=True)
        )

    async def get_monthly_website_traffic(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> StoreResult[list[dict[str, Any]]]:
        rows = await self._page_views(start, end)
        if not rows.ok:
            logger.error("Error fetching monthly website traffic: %s", rows.error)
            return StoreResult.failure(rows.error, [])
        return StoreResult.success(bucket_monthly(rows.value))

    async def get_daily_website_traffic(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> StoreResult[list[dict[str, Any]]]:
        rows = await self._page_views(start, end)
        if not rows.ok:
            logger.error("Error fetching daily website traffic: %s", rows.error)
            return StoreResult.failure(rows.error, [])
        return StoreResult.success(bucket_daily(rows.value))

    async def get_year_over_year_growth(self) -> StoreResult[list[dict[str, Any]]]:
        monthly = await self.get_monthly_website_traffic()
        if not monthly.ok:
            return StoreResult.failure(monthly.error, [])
        return StoreResult.success(year_over_year_growth(monthly.value))

    async def gather_traffic_overview(self) -> dict[str, StoreResult[list[dict[str, Any]]]]:
        """Monthly, daily and YoY traffic fetched concurrently.

        Each read sees the store at its own point in time; one failing does
        not affect the others.
        """
        monthly, daily, yoy = await asyncio.gather(
            self.get_monthly_website_traffic(),
            self.get_daily_website_traffic(),
            self.get_year_over_year_growth(),
        )
        return {"monthly": monthly, "daily": daily, "yoy": yoy}
