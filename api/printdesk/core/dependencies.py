from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.analytics.store import EventStore, SqlEventStore
from printdesk.analytics.summary import AnalyticsService
from printdesk.core.config import settings
from printdesk.core.database import async_session
from printdesk.models.goal import UserGoal
from printdesk.models.user import User

_event_store = SqlEventStore(async_session, timeout=settings.ANALYTICS_STORE_TIMEOUT_SECONDS)


def get_event_store() -> EventStore:
    """Dependency: the shared event store. Overridden in tests."""
    return _event_store


def get_analytics_service(store: EventStore = Depends(get_event_store)) -> AnalyticsService:
    return AnalyticsService(store)


async def get_user_goal(goal_id: UUID, user: User, db: AsyncSession) -> UserGoal:
    """Verify a goal exists and belongs to the given user.

    Raises HTTP 404 if the goal is not found or does not belong to the user.
    """
    result = await db.execute(
        select(UserGoal).where(UserGoal.id == goal_id, UserGoal.user_id == user.id)
    )
    goal = result.scalar_one_or_none()
    if goal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal
