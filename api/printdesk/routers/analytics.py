"""Analytics router: dashboard summary, session summary and website traffic.

Every endpoint answers 200 with the zero state when the event store fails;
``ok`` is False in that case so clients can tell an empty period from an
outage.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from printdesk.analytics.recorder import session_summary
from printdesk.analytics.store import EventStore
from printdesk.analytics.summary import AnalyticsService
from printdesk.core.dependencies import get_analytics_service, get_event_store
from printdesk.core.security import get_current_user, require_admin

router = APIRouter(prefix="/analytics", tags=["analytics"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class DashboardSummaryOut(BaseModel):
    totalChatbotInteractions: int
    totalServicePageViews: int
    ok: bool = True


class DailyBucket(BaseModel):
    date: str
    count: int


class MonthlyBucket(BaseModel):
    month: str
    year: int
    count: int


class YoYGrowth(BaseModel):
    year: int
    month: str
    growth: float


class DailyTrafficOut(BaseModel):
    data: list[DailyBucket]
    ok: bool = True


class MonthlyTrafficOut(BaseModel):
    data: list[MonthlyBucket]
    ok: bool = True


class YoYGrowthOut(BaseModel):
    data: list[YoYGrowth]
    ok: bool = True


class TrafficOverviewOut(BaseModel):
    monthly: MonthlyTrafficOut
    daily: DailyTrafficOut
    yoy: YoYGrowthOut


class SessionSummaryOut(BaseModel):
    sessionId: str
    events: list[dict]
    totalEvents: int
    sessionStart: str | None = None
    sessionEnd: str | None = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/summary", response_model=DashboardSummaryOut)
async def get_dashboard_summary(
    user=Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
) -> DashboardSummaryOut:
    """Engagement counts for the signed-in user's dashboard."""
    result = await service.get_dashboard_summary_for_user(user.id)
    return DashboardSummaryOut(**result.value, ok=result.ok)


@router.get("/sessions/{session_id}", response_model=SessionSummaryOut | None)
async def get_session_summary(
    session_id: str,
    _admin=Depends(require_admin),
    store: EventStore = Depends(get_event_store),
) -> SessionSummaryOut | None:
    """Events of one browsing session, oldest first. Null if the store failed."""
    result = await session_summary(store, session_id)
    if result.value is None:
        return None
    return SessionSummaryOut(**result.value)


@router.get("/traffic/monthly", response_model=MonthlyTrafficOut)
async def get_monthly_traffic(
    start: datetime | None = None,
    end: datetime | None = None,
    _admin=Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> MonthlyTrafficOut:
    result = await service.get_monthly_website_traffic(start, end)
    return MonthlyTrafficOut(data=result.value, ok=result.ok)


@router.get("/traffic/daily", response_model=DailyTrafficOut)
async def get_daily_traffic(
    start: datetime | None = None,
    end: datetime | None = None,
    _admin=Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> DailyTrafficOut:
    result = await service.get_daily_website_traffic(start, end)
    return DailyTrafficOut(data=result.value, ok=result.ok)


@router.get("/traffic/yoy", response_model=YoYGrowthOut)
async def get_yoy_growth(
    _admin=Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> YoYGrowthOut:
    result = await service.get_year_over_year_growth()
    return YoYGrowthOut(data=result.value, ok=result.ok)


@router.get("/traffic", response_model=TrafficOverviewOut)
async def get_traffic_overview(
    _admin=Depends(require_admin),
    service: AnalyticsService = Depends(get_analytics_service),
) -> TrafficOverviewOut:
    """Monthly, daily and YoY traffic in one round trip, fetched concurrently."""
    overview = await service.gather_traffic_overview()
    return TrafficOverviewOut(
        monthly=MonthlyTrafficOut(data=overview["monthly"].value, ok=overview["monthly"].ok),
        daily=DailyTrafficOut(data=overview["daily"].value, ok=overview["daily"].ok),
        yoy=YoYGrowthOut(data=overview["yoy"].value, ok=overview["yoy"].ok),
    )
