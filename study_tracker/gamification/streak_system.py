"""
Study Streak Tracking

Streaks are derived from the log history on every call; nothing is stored.
Two kinds of qualifying day feed the same calculator:
- consistency: any day with hours > 0
- goal: any day with hours >= the user's daily goal

Input to longest_streak/has_streak_of_at_least must be ascending by date
with unique day keys (the log store guarantees both). current_streak works
on day-key membership, so its input may be in any order.
"""

from typing import Iterable, List, Optional, Sequence
from datetime import datetime, timedelta
import logging

from study_tracker.models.study_log import StudyLogEntry
from study_tracker.utils.datetime_helpers import diff_in_days, to_day_key, today_utc

logger = logging.getLogger(__name__)


def consistency_days(logs: Iterable[StudyLogEntry]) -> List[StudyLogEntry]:
    """Days with any study time logged"""
    return [log for log in logs if log.hours > 0]


def goal_days(logs: Iterable[StudyLogEntry], daily_goal_hours: float) -> List[StudyLogEntry]:
    """
    Days on which the daily goal was met

    With a goal <= 0 every logged day with non-negative hours qualifies,
    including zero-hour entries. Negative hours never qualify.
    """
    return [log for log in logs if log.hours >= 0 and log.hours >= daily_goal_hours]


def longest_streak(entries: Sequence[StudyLogEntry]) -> int:
    """
    Longest run of consecutive calendar days in an ascending sequence

    A gap of exactly one day extends the running streak, any larger gap
    resets it to 1.

    Returns:
        0 for no entries, otherwise the longest run length (>= 1)
    """
    if not entries:
        return 0

    max_streak = 1
    current = 1

    for prev, entry in zip(entries, entries[1:]):
        gap = diff_in_days(prev.date, entry.date)
        if gap == 1:
            current += 1
        elif gap > 1:
            current = 1
        max_streak = max(max_streak, current)

    return max_streak


def has_streak_of_at_least(entries: Sequence[StudyLogEntry], required_days: int) -> bool:
    """
    True once any run of consecutive days reaches `required_days`

    Same answer as longest_streak(entries) >= required_days, but stops at
    the first run long enough.
    """
    if required_days <= 0:
        return True
    if len(entries) < required_days:
        return False

    current = 1
    if current >= required_days:
        return True

    for prev, entry in zip(entries, entries[1:]):
        gap = diff_in_days(prev.date, entry.date)
        if gap == 1:
            current += 1
        elif gap > 1:
            current = 1
        if current >= required_days:
            return True

    return False


def current_streak(
    entries: Iterable[StudyLogEntry],
    today: Optional[datetime] = None
) -> int:
    """
    Consecutive qualifying days counted backward from today

    A streak that has not been extended today is still alive: if today is
    missing the walk starts at yesterday. Missing both today and yesterday
    means the streak is broken (0).

    Args:
        entries: Qualifying entries, any order
        today: Day to count back from (defaults to today in UTC)
    """
    day_keys = {entry.date for entry in entries}
    if not day_keys:
        return 0

    cursor = to_day_key(today) if today is not None else today_utc()
    if cursor not in day_keys:
        cursor -= timedelta(days=1)

    streak = 0
    while cursor in day_keys:
        streak += 1
        cursor -= timedelta(days=1)

    return streak


def get_streak_summary(
    logs: Sequence[StudyLogEntry],
    daily_goal_hours: float,
    today: Optional[datetime] = None
) -> dict:
    """
    Current and longest consistency/goal streaks for dashboard display

    Returns:
        {
            'current_consistency_streak': int,
            'current_goal_streak': int,
            'max_consistency_streak': int,
            'max_goal_streak': int
        }
    """
    consistency = consistency_days(logs)
    goal_met = goal_days(logs, daily_goal_hours)

    summary = {
        "current_consistency_streak": current_streak(consistency, today),
        "current_goal_streak": current_streak(goal_met, today),
        "max_consistency_streak": longest_streak(consistency),
        "max_goal_streak": longest_streak(goal_met),
    }

    logger.debug(f"Streak summary over {len(logs)} logs: {summary}")
    return summary


def format_streak_display(summary: dict) -> str:
    """
    Format a streak summary for display

    Args:
        summary: Output from get_streak_summary()
    """
    if summary["max_consistency_streak"] == 0:
        return "No study streaks yet. Log your first session to start one! 💪"

    lines = ["🔥 YOUR STREAKS\n"]

    line = f"📚 Study: {summary['current_consistency_streak']} days"
    if summary["max_consistency_streak"] > summary["current_consistency_streak"]:
        line += f" (best: {summary['max_consistency_streak']})"
    lines.append(line)

    line = f"🎯 Daily goal: {summary['current_goal_streak']} days"
    if summary["max_goal_streak"] > summary["current_goal_streak"]:
        line += f" (best: {summary['max_goal_streak']})"
    lines.append(line)

    return "\n".join(lines)
