from printdesk.models.activity import UserActivity
from printdesk.models.base import Base, TimestampMixin
from printdesk.models.event import AnalyticsEvent
from printdesk.models.goal import GoalStatus, UserGoal
from printdesk.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "AnalyticsEvent",
    "GoalStatus",
    "UserActivity",
    "UserGoal",
    "User",
]
