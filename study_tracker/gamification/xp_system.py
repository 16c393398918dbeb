"""
XP and Leveling System

XP and level are derived from the log history and unlocked achievements
every time they are displayed; nothing here reads or writes a store.

XP Award Rules:
- Study time: 10 XP per hour logged
- Daily goal met: 50 XP per day with hours >= daily goal
- Achievement unlocked: 100 XP per achieved record

Leveling Curve:
- Flat 1000 XP per level, starting at level 1
- Level is capped at 100, total XP is not
"""

from decimal import Decimal, ROUND_HALF_UP
import math
from typing import Dict, Iterable, List, Sequence
import logging

from study_tracker.models.achievement import AchievementRecord
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User
from study_tracker.utils.datetime_helpers import format_day

logger = logging.getLogger(__name__)

XP_PER_HOUR = 10
XP_FOR_GOAL = 50
XP_FOR_ACHIEVEMENT = 100
XP_PER_LEVEL = 1000
MAX_LEVEL = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero"""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_level_from_xp(total_xp: int) -> Dict:
    """
    Calculate level and progress from total XP

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int (0 at max level),
            'total_xp_for_next_level': int (None at max level),
            'is_max_level': bool
        }
    """
    level = min(total_xp // XP_PER_LEVEL + 1, MAX_LEVEL)
    is_max_level = level == MAX_LEVEL

    if is_max_level:
        return {
            "current_level": level,
            "xp_in_current_level": total_xp - (MAX_LEVEL - 1) * XP_PER_LEVEL,
            "xp_to_next_level": 0,
            "total_xp_for_next_level": None,
            "is_max_level": True,
        }

    xp_in_current_level = total_xp - (level - 1) * XP_PER_LEVEL
    return {
        "current_level": level,
        "xp_in_current_level": xp_in_current_level,
        "xp_to_next_level": XP_PER_LEVEL - xp_in_current_level,
        "total_xp_for_next_level": level * XP_PER_LEVEL,
        "is_max_level": False,
    }


def _log_xp(log: StudyLogEntry, daily_goal_hours: float) -> float:
    """Unrounded XP for one study log (negative hours earn nothing)"""
    if log.hours < 0:
        return 0.0

    xp = log.hours * XP_PER_HOUR
    if log.hours >= daily_goal_hours:
        xp += XP_FOR_GOAL
    return xp


def compute_xp(
    user: User,
    logs: Iterable[StudyLogEntry],
    achieved_records: Iterable[AchievementRecord]
) -> Dict[str, int]:
    """
    Derive total XP and level from plain data

    Args:
        user: Provides daily_goal_hours
        logs: All of the user's study logs
        achieved_records: The user's achievement records (only achieved=True count)

    Returns:
        {'xp': int, 'level': int}
    """
    xp_from_logs = math.fsum(_log_xp(log, user.daily_goal_hours) for log in logs)
    achievement_count = sum(1 for record in achieved_records if record.achieved)
    xp_from_achievements = achievement_count * XP_FOR_ACHIEVEMENT

    total_xp = round_half_up(xp_from_logs + xp_from_achievements)
    level = calculate_level_from_xp(total_xp)["current_level"]

    logger.debug(
        f"Computed XP for user {user.user_id}: {total_xp} "
        f"({xp_from_logs:.2f} from logs, {xp_from_achievements} from {achievement_count} achievements), "
        f"level {level}"
    )

    return {"xp": total_xp, "level": level}


def get_xp_history(
    user: User,
    logs: Sequence[StudyLogEntry],
    achieved_records: Sequence[AchievementRecord]
) -> Dict[str, List[str]]:
    """
    Human-readable breakdown of where a user's XP came from

    Returns:
        {
            'achievements': ['+100 XP: Achievement unlocked - "7-Day Streak"', ...],
            'logs': ['+25 XP: Studied for 2.5 hours on 3/14/2024', ...]
        }
        Both lists newest first.
    """
    records = sorted(
        (r for r in achieved_records if r.achieved),
        key=lambda r: r.date_achieved,
        reverse=True
    )
    achievement_history = [
        f'+{XP_FOR_ACHIEVEMENT} XP: Achievement unlocked - "{record.name}"'
        for record in records
    ]

    log_history = []
    for log in sorted(logs, key=lambda entry: entry.date, reverse=True):
        if log.hours < 0:
            continue
        day = format_day(log.date)
        log_history.append(f"+{round_half_up(log.hours * XP_PER_HOUR)} XP: Studied for {log.hours:g} hours on {day}")
        if log.hours >= user.daily_goal_hours:
            log_history.append(f"+{XP_FOR_GOAL} XP: Daily goal met on {day}")

    return {"achievements": achievement_history, "logs": log_history}


def format_xp_display(xp_data: Dict[str, int]) -> str:
    """
    Format XP and level for display

    Args:
        xp_data: Output from compute_xp()
    """
    level_info = calculate_level_from_xp(xp_data["xp"])

    if level_info["is_max_level"]:
        return f"⭐ Level {level_info['current_level']} (max) - {xp_data['xp']} XP"

    return (
        f"⭐ Level {level_info['current_level']} - {xp_data['xp']} XP "
        f"({level_info['xp_to_next_level']} XP to level {level_info['current_level'] + 1})"
    )
