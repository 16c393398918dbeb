"""
Centralized Pydantic Input Validation Layer

Validates study data at the edges (log submission, goal changes) so the
gamification engine only ever sees well-formed snapshots.

Validation Categories:
1. Study Log Submission - ISO date, hours within 0-24
2. Daily Goal - hours within the configured goal range
3. Log Snapshot Preconditions - ascending, unique, normalized day keys
"""

import logging
from datetime import datetime
from typing import Sequence
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from study_tracker.config import MAX_DAILY_GOAL_HOURS, MAX_HOURS_PER_DAY, MIN_DAILY_GOAL_HOURS
from study_tracker.exceptions import InvalidGoal, InvalidLogEntry
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.utils.datetime_helpers import is_day_key, to_day_key

logger = logging.getLogger(__name__)


# ============================================================================
# STUDY LOG SUBMISSION
# ============================================================================

class StudyLogInput(BaseModel):
    """
    Validate a study log submission

    Constraints:
    - date: ISO 8601 date (or date/datetime), normalized to its UTC day
    - hours: 0-24 inclusive
    """
    date: datetime
    hours: float = Field(..., ge=0, le=MAX_HOURS_PER_DAY, description="Hours studied that day")

    @field_validator('date', mode='before')
    @classmethod
    def normalize_date(cls, v):
        """Normalize to the UTC day key"""
        try:
            return to_day_key(v)
        except TypeError as e:
            raise ValueError(str(e))

    def to_entry(self) -> StudyLogEntry:
        return StudyLogEntry(date=self.date, hours=self.hours)


def _first_error(error: PydanticValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    loc = ".".join(str(part) for part in details[0].get("loc", ()))
    return f"{loc}: {details[0].get('msg')}" if loc else details[0].get("msg", str(error))


def validate_study_log(date, hours, user_id: str = None) -> StudyLogEntry:
    """
    Validate a log submission and build the entry

    Raises:
        InvalidLogEntry: If the date cannot be parsed or hours are out of range
    """
    try:
        return StudyLogInput(date=date, hours=hours).to_entry()
    except PydanticValidationError as e:
        raise InvalidLogEntry(
            f"Invalid study log: {_first_error(e)}",
            value={"date": str(date), "hours": hours},
            user_id=user_id,
            operation="validate_study_log",
            cause=e
        )


# ============================================================================
# DAILY GOAL
# ============================================================================

class GoalInput(BaseModel):
    """
    Validate a daily goal change

    Constraints:
    - daily_goal_hours: MIN_DAILY_GOAL_HOURS to MAX_DAILY_GOAL_HOURS
    """
    daily_goal_hours: float = Field(..., ge=MIN_DAILY_GOAL_HOURS, le=MAX_DAILY_GOAL_HOURS)


def validate_goal(daily_goal_hours, user_id: str = None) -> float:
    """
    Validate a daily goal submission

    Raises:
        InvalidGoal: If the goal is not a number within the allowed range
    """
    try:
        return GoalInput(daily_goal_hours=daily_goal_hours).daily_goal_hours
    except PydanticValidationError as e:
        raise InvalidGoal(
            f"Daily goal must be between {MIN_DAILY_GOAL_HOURS} and {MAX_DAILY_GOAL_HOURS} hours",
            value=daily_goal_hours,
            user_id=user_id,
            operation="validate_goal",
            cause=e
        )


# ============================================================================
# LOG SNAPSHOT PRECONDITIONS
# ============================================================================

def validate_log_entries(entries: Sequence[StudyLogEntry], user_id: str = None) -> None:
    """
    Check that a log snapshot meets the engine's input contract

    - every date is a normalized day key
    - dates are strictly ascending (which also rules out duplicates)
    - hours are within 0-24

    Raises:
        InvalidLogEntry: On the first violation found
    """
    previous = None
    for index, entry in enumerate(entries):
        if not is_day_key(entry.date):
            raise InvalidLogEntry(
                f"Entry {index} date is not normalized to a UTC day",
                value=entry.date.isoformat(),
                user_id=user_id
            )
        if not 0 <= entry.hours <= MAX_HOURS_PER_DAY:
            raise InvalidLogEntry(
                f"Entry {index} hours must be between 0 and {MAX_HOURS_PER_DAY:g}",
                value=entry.hours,
                user_id=user_id
            )
        if previous is not None:
            if entry.date == previous.date:
                raise InvalidLogEntry(
                    f"Duplicate study log for {entry.date.date().isoformat()}",
                    value=entry.date.isoformat(),
                    user_id=user_id
                )
            if entry.date < previous.date:
                raise InvalidLogEntry(
                    f"Entry {index} is out of ascending date order",
                    value=entry.date.isoformat(),
                    user_id=user_id
                )
        previous = entry
