from datetime import UTC, datetime, timedelta
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.analytics.aggregation import daily_progress, mood_overview
from printdesk.core.config import settings
from printdesk.core.database import get_db
from printdesk.core.security import get_current_user
from printdesk.models.activity import UserActivity
from printdesk.models.user import User

router = APIRouter(tags=["activities"])

RANGE_DAYS = {"7d": 7, "30d": 30, "90d": 90}


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ActivityCreate(BaseModel):
    activity_type: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    mood_score: int | None = Field(None, ge=1, le=6)


class ActivityOut(BaseModel):
    id: UUID
    user_id: UUID
    activity_type: str
    description: str | None
    mood_score: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProgressPoint(BaseModel):
    date: str
    activities: int
    mood_avg: float


class ProgressOut(BaseModel):
    range: str
    points: list[ProgressPoint]
    average_mood: float
    mood_trend: float


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/activities", response_model=list[ActivityOut])
async def list_activities(
    limit: int = Query(10, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ActivityOut]:
    """Most recent activities of the current user."""
    result = await db.execute(
        select(UserActivity)
        .where(UserActivity.user_id == user.id)
        .order_by(UserActivity.created_at.desc())
        .limit(limit)
    )
    return result.scalars().all()


@router.post("/activities", response_model=ActivityOut, status_code=status.HTTP_201_CREATED)
async def log_activity(
    body: ActivityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ActivityOut:
    activity = UserActivity(
        user_id=user.id,
        activity_type=body.activity_type,
        description=body.description,
        mood_score=body.mood_score,
    )
    db.add(activity)
    await db.flush()
    await db.refresh(activity)
    return activity


@router.get("/activities/progress", response_model=ProgressOut)
async def get_progress(
    range_: Literal["7d", "30d", "90d"] = Query(settings.PROGRESS_DEFAULT_RANGE, alias="range"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProgressOut:
    """Daily activity counts and mood averages over the chosen window."""
    days = RANGE_DAYS[range_]
    today = datetime.now(UTC).date()
    window_start = datetime.combine(today - timedelta(days=days - 1), datetime.min.time(), tzinfo=UTC)

    result = await db.execute(
        select(UserActivity.created_at, UserActivity.mood_score)
        .where(UserActivity.user_id == user.id, UserActivity.created_at >= window_start)
        .order_by(UserActivity.created_at.asc())
    )
    rows = [{"created_at": created_at, "mood_score": mood} for created_at, mood in result.all()]

    points = daily_progress(rows, days, today)
    return ProgressOut(range=range_, points=points, **mood_overview(points))
