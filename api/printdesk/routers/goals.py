from datetime import date, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.analytics.aggregation import goal_breakdown
from printdesk.core.database import get_db
from printdesk.core.dependencies import get_user_goal
from printdesk.core.security import get_current_user
from printdesk.models.goal import GoalStatus, UserGoal
from printdesk.models.user import User

router = APIRouter(tags=["goals"])


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    target_date: date | None = None


class GoalUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    target_date: date | None = None
    status: GoalStatus | None = None


class GoalOut(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: str | None
    target_date: date | None
    status: GoalStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class GoalBreakdownOut(BaseModel):
    counts: dict[str, int]
    total: int
    completed: int
    active: int
    completion_rate: float


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/goals", response_model=list[GoalOut])
async def list_goals(
    status_filter: GoalStatus | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[GoalOut]:
    """List the current user's goals, newest first."""
    stmt = select(UserGoal).where(UserGoal.user_id == user.id)
    if status_filter is not None:
        stmt = stmt.where(UserGoal.status == status_filter)
    result = await db.execute(stmt.order_by(UserGoal.created_at.desc()))
    return result.scalars().all()


@router.get("/goals/breakdown", response_model=GoalBreakdownOut)
async def get_goal_breakdown(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GoalBreakdownOut:
    """Status counts and completion rate for the dashboard."""
    result = await db.execute(select(UserGoal.status).where(UserGoal.user_id == user.id))
    return GoalBreakdownOut(**goal_breakdown({"status": s} for s in result.scalars().all()))


@router.post("/goals", response_model=GoalOut, status_code=status.HTTP_201_CREATED)
async def create_goal(
    body: GoalCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GoalOut:
    goal = UserGoal(
        user_id=user.id,
        title=body.title,
        description=body.description,
        target_date=body.target_date,
    )
    db.add(goal)
    await db.flush()
    await db.refresh(goal)
    return goal


@router.patch("/goals/{goal_id}", response_model=GoalOut)
async def update_goal(
    goal_id: UUID,
    body: GoalUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GoalOut:
    """Edit a goal or move it to another status."""
    goal = await get_user_goal(goal_id, user, db)
    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(goal, field, value)
    await db.flush()
    await db.refresh(goal)
    return goal


@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    goal = await get_user_goal(goal_id, user, db)
    await db.delete(goal)
    await db.flush()
