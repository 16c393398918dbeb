"""Achievement models for gamification"""
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AchievementType(str, Enum):
    """Achievement families"""
    CONSISTENCY = "consistency"
    GOAL = "goal"
    TOTAL_HOURS = "total_hours"


class ConsistencyCriteria(BaseModel):
    """Study (any hours > 0) on N consecutive days"""
    model_config = ConfigDict(frozen=True)

    type: Literal[AchievementType.CONSISTENCY] = AchievementType.CONSISTENCY
    required_days: int = Field(gt=0)


class GoalCriteria(BaseModel):
    """Meet the daily goal on N consecutive days"""
    model_config = ConfigDict(frozen=True)

    type: Literal[AchievementType.GOAL] = AchievementType.GOAL
    required_days: int = Field(gt=0)


class TotalHoursCriteria(BaseModel):
    """Accumulate H study hours in total"""
    model_config = ConfigDict(frozen=True)

    type: Literal[AchievementType.TOTAL_HOURS] = AchievementType.TOTAL_HOURS
    required_hours: float = Field(gt=0)


AchievementCriteria = Annotated[
    Union[ConsistencyCriteria, GoalCriteria, TotalHoursCriteria],
    Field(discriminator="type"),
]


class AchievementDefinition(BaseModel):
    """Achievement definition (immutable catalog entry)"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    criteria: AchievementCriteria

    @property
    def type(self) -> AchievementType:
        return self.criteria.type

    @property
    def required_days(self) -> Optional[int]:
        return getattr(self.criteria, "required_days", None)

    @property
    def required_hours(self) -> Optional[float]:
        return getattr(self.criteria, "required_hours", None)


class AchievementRecord(BaseModel):
    """User's unlocked achievement"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    achievement_id: str
    name: str = ""
    description: str = ""
    achieved: bool = True
    date_achieved: datetime
    notified: bool = False
    goal_value_on_achieved: Optional[float] = None
