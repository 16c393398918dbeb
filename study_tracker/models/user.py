"""User-related Pydantic models"""
from typing import Optional
from pydantic import BaseModel, Field

from study_tracker.config import DEFAULT_DAILY_GOAL_HOURS


class User(BaseModel):
    """
    Study tracker user

    xp and level are display values recomputed from logs and achievements
    on every read; they are never the source of truth.
    """
    user_id: str
    name: Optional[str] = None
    daily_goal_hours: float = DEFAULT_DAILY_GOAL_HOURS
    xp: int = 0
    level: int = Field(default=1, ge=1, le=100)
