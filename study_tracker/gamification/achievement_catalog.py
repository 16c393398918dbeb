"""
Achievement Catalog

The fixed, ordered list of achievements a user can unlock:
- Consistency: study on N consecutive days
- Goal: meet the daily goal on N consecutive days
- Total hours: accumulate H hours overall

ACHIEVEMENTS is built once at import time and never mutated. Qualification
is a pure function of (all logs for the user, the user's current goal), so
it can be re-evaluated at any time.
"""

from typing import Dict, Iterable, Optional, Sequence, Tuple
import logging
import math

from study_tracker.gamification.streak_system import (
    consistency_days,
    goal_days,
    has_streak_of_at_least,
)
from study_tracker.models.achievement import (
    AchievementDefinition,
    AchievementType,
    ConsistencyCriteria,
    GoalCriteria,
    TotalHoursCriteria,
)
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User

logger = logging.getLogger(__name__)

STREAK_THRESHOLDS: Tuple[int, ...] = (7, 21, 50, 100, 300)
HOURS_THRESHOLDS: Tuple[int, ...] = (100, 500, 1000, 1500, 2000, 3000, 5000)


def _consistency(days: int, name: str, icon: str) -> AchievementDefinition:
    return AchievementDefinition(
        id=f"consistency-{days}",
        name=name,
        description=f"Study for {days} days in a row.",
        icon=icon,
        criteria=ConsistencyCriteria(required_days=days),
    )


def _goal(days: int, name: str, icon: str) -> AchievementDefinition:
    return AchievementDefinition(
        id=f"goal-{days}",
        name=name,
        description=f"Meet your daily goal for {days} days in a row.",
        icon=icon,
        criteria=GoalCriteria(required_days=days),
    )


def _hours(hours: int, name: str, icon: str) -> AchievementDefinition:
    return AchievementDefinition(
        id=f"hours-{hours}",
        name=name,
        description=f"Study for {hours:,} hours in total.",
        icon=icon,
        criteria=TotalHoursCriteria(required_hours=hours),
    )


ACHIEVEMENTS: Tuple[AchievementDefinition, ...] = (
    # Consistency
    _consistency(7, "7-Day Streak", "bi-fire"),
    _consistency(21, "21-Day Habit", "bi-calendar2-check"),
    _consistency(50, "50-Day Commitment", "bi-award"),
    _consistency(100, "100-Day Club", "bi-trophy"),
    _consistency(300, "300-Day Milestone", "bi-gem"),

    # Goal
    _goal(7, "Goal Setter", "bi-flag"),
    _goal(21, "Goal Achiever", "bi-bullseye"),
    _goal(50, "Goal Master", "bi-shield-check"),
    _goal(100, "Goal Legend", "bi-star-fill"),
    _goal(300, "Goal Demigod", "bi-stars"),

    # Total hours
    _hours(100, "Century Scholar", "bi-hourglass-bottom"),
    _hours(500, "Dedicated Learner", "bi-hourglass-split"),
    _hours(1000, "Master of Time", "bi-hourglass-top"),
    _hours(1500, "Productivity Pro", "bi-clock-history"),
    _hours(2000, "Focused Mind", "bi-speedometer2"),
    _hours(3000, "Scholar Elite", "bi-rocket-takeoff"),
    _hours(5000, "Legendary Sage", "bi-infinity"),
)

_ACHIEVEMENTS_BY_ID: Dict[str, AchievementDefinition] = {ach.id: ach for ach in ACHIEVEMENTS}


def get_definition(achievement_id: str) -> Optional[AchievementDefinition]:
    """Look up a catalog entry by id (None if unknown)"""
    return _ACHIEVEMENTS_BY_ID.get(achievement_id)


def get_definitions_by_type(achievement_type: AchievementType) -> Tuple[AchievementDefinition, ...]:
    """Catalog entries of one family, in catalog order"""
    return tuple(ach for ach in ACHIEVEMENTS if ach.type == achievement_type)


def total_hours(logs: Iterable[StudyLogEntry]) -> float:
    """Sum of logged hours (negative entries are ignored)"""
    return math.fsum(log.hours for log in logs if log.hours > 0)


def is_qualified(
    definition: AchievementDefinition,
    logs: Sequence[StudyLogEntry],
    user: User
) -> bool:
    """
    Check whether the user currently qualifies for an achievement

    Args:
        definition: Catalog entry to evaluate
        logs: All of the user's logs, ascending by date
        user: Provides daily_goal_hours for goal achievements

    Returns:
        True if the criteria are met
    """
    criteria = definition.criteria

    if criteria.type == AchievementType.CONSISTENCY:
        return has_streak_of_at_least(consistency_days(logs), criteria.required_days)

    elif criteria.type == AchievementType.GOAL:
        return has_streak_of_at_least(
            goal_days(logs, user.daily_goal_hours),
            criteria.required_days
        )

    elif criteria.type == AchievementType.TOTAL_HOURS:
        return total_hours(logs) >= criteria.required_hours

    raise ValueError(f"Unknown achievement criteria type: {criteria.type}")
