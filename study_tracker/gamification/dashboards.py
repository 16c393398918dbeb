"""
Gamification Dashboards and Analytics

Builds the data behind the dashboard, achievements and analytics views
from a user's logs and achievement records. All functions are pure; the
service layer loads the snapshot and passes it in.
"""

import logging
import math
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from study_tracker.config import RECENT_LOGS_DAYS
from study_tracker.gamification.achievement_catalog import ACHIEVEMENTS, total_hours
from study_tracker.gamification.achievement_system import achieved_records, get_unnotified
from study_tracker.gamification.streak_system import (
    consistency_days,
    get_streak_summary,
    goal_days,
    longest_streak,
)
from study_tracker.gamification.xp_system import compute_xp
from study_tracker.models.achievement import AchievementDefinition, AchievementRecord, AchievementType
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User
from study_tracker.utils.datetime_helpers import add_days, add_months, month_bounds, to_day_key, today_utc

logger = logging.getLogger(__name__)

TOTAL_HOURS_RANGES = ("alltime", "7days", "30days", "1month", "6months")


def _range_start(total_hours_range: str, today: datetime) -> Optional[datetime]:
    """First day key included in a total-hours range (None for all time)"""
    if total_hours_range == "alltime":
        return None
    elif total_hours_range == "7days":
        return add_days(today, -7)
    elif total_hours_range == "30days":
        return add_days(today, -30)
    elif total_hours_range == "1month":
        return add_months(today, -1)
    elif total_hours_range == "6months":
        return add_months(today, -6)
    raise ValueError(f"Unknown total hours range: '{total_hours_range}'")


def hours_in_range(
    logs: Sequence[StudyLogEntry],
    total_hours_range: str = "alltime",
    today: Optional[datetime] = None
) -> float:
    """
    Total hours logged within a range ending today

    Args:
        logs: User's study logs
        total_hours_range: One of TOTAL_HOURS_RANGES
        today: Reference day (defaults to today in UTC)
    """
    today = to_day_key(today) if today is not None else today_utc()
    start = _range_start(total_hours_range, today)
    if start is None:
        return total_hours(logs)
    return total_hours(log for log in logs if log.date >= start)


def build_dashboard(
    user: User,
    logs: Sequence[StudyLogEntry],
    records: Sequence[AchievementRecord],
    today: Optional[datetime] = None,
    total_hours_range: str = "alltime"
) -> Dict:
    """
    Dashboard snapshot for a user

    Returns:
        {
            'xp': int,
            'level': int,
            'daily_goal_hours': float,
            'today_hours': float,
            'recent_logs': [StudyLogEntry, ...] (last RECENT_LOGS_DAYS days, newest first),
            'total_hours': float,
            'total_hours_range': str,
            'achievement_count': int (unlocked but not yet shown),
            'current_consistency_streak': int,
            'current_goal_streak': int,
            'max_consistency_streak': int,
            'max_goal_streak': int
        }
    """
    today = to_day_key(today) if today is not None else today_utc()

    xp_data = compute_xp(user, logs, achieved_records(records))
    today_log = next((log for log in logs if log.date == today), None)

    cutoff = add_days(today, -RECENT_LOGS_DAYS)
    recent_logs = sorted(
        (log for log in logs if log.date >= cutoff),
        key=lambda log: log.date,
        reverse=True
    )

    dashboard = {
        "xp": xp_data["xp"],
        "level": xp_data["level"],
        "daily_goal_hours": user.daily_goal_hours,
        "today_hours": today_log.hours if today_log else 0,
        "recent_logs": recent_logs,
        "total_hours": hours_in_range(logs, total_hours_range, today),
        "total_hours_range": total_hours_range,
        "achievement_count": len(get_unnotified(records)),
    }
    dashboard.update(get_streak_summary(logs, user.daily_goal_hours, today))

    return dashboard


def achievement_progress(
    definition: AchievementDefinition,
    logs: Sequence[StudyLogEntry],
    user: User
) -> Dict:
    """
    Progress toward an achievement

    Streak achievements measure the longest qualifying streak so far,
    hours achievements the cumulative hours.

    Returns:
        {
            'current': int | float,
            'required': int | float,
            'percentage': int (0-100),
            'description': str
        }
    """
    if definition.type == AchievementType.CONSISTENCY:
        current = longest_streak(consistency_days(logs))
        required = definition.required_days
    elif definition.type == AchievementType.GOAL:
        current = longest_streak(goal_days(logs, user.daily_goal_hours))
        required = definition.required_days
    else:
        current = round(total_hours(logs), 2)
        required = definition.required_hours

    percentage = min(100, int(current / required * 100)) if required > 0 else 0

    return {
        "current": current,
        "required": required,
        "percentage": percentage,
        "description": f"{current:g}/{required:g}",
    }


def build_achievements_overview(
    user: User,
    logs: Sequence[StudyLogEntry],
    records: Sequence[AchievementRecord]
) -> Dict:
    """
    Every catalog achievement with the user's status

    `records` should already be reconciled against `logs`.

    Returns:
        {
            'achievements': [{id, name, description, icon, type, achieved,
                              goal_value_on_achieved, progress}, ...] (catalog order),
            'completed': [...],
            'yet_to_complete_consistency': [...],
            'yet_to_complete_goal': [...],
            'yet_to_complete_hours': [...],
            'longest_consistency_streak': int,
            'longest_goal_streak': int,
            'xp': int,
            'level': int
        }
    """
    records_by_id = {r.achievement_id: r for r in records if r.achieved}

    achievements = []
    for definition in ACHIEVEMENTS:
        record = records_by_id.get(definition.id)
        achievements.append({
            "id": definition.id,
            "name": definition.name,
            "description": definition.description,
            "icon": definition.icon,
            "type": definition.type.value,
            "achieved": record is not None,
            "goal_value_on_achieved": record.goal_value_on_achieved if record else None,
            "progress": achievement_progress(definition, logs, user),
        })

    def pending(achievement_type: AchievementType) -> List[Dict]:
        return [a for a in achievements if not a["achieved"] and a["type"] == achievement_type.value]

    xp_data = compute_xp(user, logs, records_by_id.values())

    return {
        "achievements": achievements,
        "completed": [a for a in achievements if a["achieved"]],
        "yet_to_complete_consistency": pending(AchievementType.CONSISTENCY),
        "yet_to_complete_goal": pending(AchievementType.GOAL),
        "yet_to_complete_hours": pending(AchievementType.TOTAL_HOURS),
        "longest_consistency_streak": longest_streak(consistency_days(logs)),
        "longest_goal_streak": longest_streak(goal_days(logs, user.daily_goal_hours)),
        "xp": xp_data["xp"],
        "level": xp_data["level"],
    }


def monthly_summary(
    logs: Sequence[StudyLogEntry],
    year: int,
    month: int,
    daily_goal_hours: float
) -> Dict:
    """
    Study totals for one calendar month

    Returns:
        {
            'total_hours': float,
            'days_logged': int,
            'average_hours': float (per logged day),
            'goal_met': int,
            'goal_not_met': int
        }
    """
    start, end = month_bounds(year, month)
    month_logs = [log for log in logs if start <= log.date < end]

    total = total_hours(month_logs)
    days_logged = len(month_logs)
    goal_met = len(goal_days(month_logs, daily_goal_hours))

    return {
        "total_hours": round(total, 2),
        "days_logged": days_logged,
        "average_hours": round(total / days_logged, 2) if days_logged else 0.0,
        "goal_met": goal_met,
        "goal_not_met": days_logged - goal_met,
    }


WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

# distribution range -> (hours range, per-logged-day average?, label)
DISTRIBUTION_RANGES = {
    "past_7_days": ("7days", False, "Total (7 Days)"),
    "average_7_days": ("7days", True, "Avg (7 Days)"),
    "recent_30_days": ("30days", False, "Total (30 Days)"),
    "average_30_days": ("30days", True, "Avg (30 Days)"),
    "past_6_months": ("6months", False, "Total (6 Months)"),
    "all_time_hours": ("alltime", False, "Total (All Time)"),
    "average_all_time": ("alltime", True, "Avg (All Time)"),
}


def _counted(logs: Iterable[StudyLogEntry]) -> List[StudyLogEntry]:
    """Logs that count as logged days (negative hours never do)"""
    return [log for log in logs if log.hours >= 0]


def day_of_week_averages(logs: Sequence[StudyLogEntry], year: int, month: int) -> List[Dict]:
    """
    Average hours per weekday within one calendar month

    Only weekdays with at least one log are listed.

    Returns:
        [{'day_of_week': int (1 = Sunday ... 7 = Saturday),
          'name': str, 'average_hours': float}, ...] ordered Sunday first
    """
    start, end = month_bounds(year, month)

    by_weekday: Dict[int, List[float]] = {}
    for log in _counted(logs):
        if start <= log.date < end:
            # isoweekday: Monday=1 .. Sunday=7
            weekday = log.date.isoweekday() % 7 + 1
            by_weekday.setdefault(weekday, []).append(log.hours)

    return [
        {
            "day_of_week": weekday,
            "name": WEEKDAY_NAMES[weekday - 1],
            "average_hours": round(math.fsum(hours) / len(hours), 2),
        }
        for weekday, hours in sorted(by_weekday.items())
    ]


def hours_distribution(
    logs: Sequence[StudyLogEntry],
    distribution_range: str,
    today: Optional[datetime] = None
) -> Dict:
    """
    Total hours, or average hours per logged day, over a window ending today

    Args:
        logs: User's study logs
        distribution_range: One of DISTRIBUTION_RANGES
        today: Reference day (defaults to today in UTC)

    Returns:
        {'label': str, 'value': float (2 decimals, 0 when no logs)}
    """
    if distribution_range not in DISTRIBUTION_RANGES:
        raise ValueError(f"Unknown distribution range: '{distribution_range}'")
    total_hours_range, is_average, label = DISTRIBUTION_RANGES[distribution_range]

    today = to_day_key(today) if today is not None else today_utc()
    start = _range_start(total_hours_range, today)
    window = [log for log in _counted(logs) if start is None or log.date >= start]

    value = total_hours(window)
    if is_average:
        value = value / len(window) if window else 0.0

    return {"label": label, "value": round(value, 2)}


def monthly_history(logs: Sequence[StudyLogEntry]) -> List[Dict]:
    """
    Total hours for every calendar month that has logs

    Returns:
        [{'year': int, 'month': int, 'total_hours': float}, ...] oldest first
    """
    by_month: Dict[tuple, List[StudyLogEntry]] = {}
    for log in _counted(logs):
        by_month.setdefault((log.date.year, log.date.month), []).append(log)

    return [
        {"year": year, "month": month, "total_hours": round(total_hours(month_logs), 2)}
        for (year, month), month_logs in sorted(by_month.items())
    ]


def logs_in_date_range(logs: Sequence[StudyLogEntry], start_date, end_date) -> List[StudyLogEntry]:
    """
    Logs from start_date through end_date (both days inclusive), ascending

    Bounds may be anything to_day_key() accepts. An inverted range is empty.
    """
    start = to_day_key(start_date)
    end = to_day_key(end_date)
    return sorted((log for log in logs if start <= log.date <= end), key=lambda log: log.date)


def format_achievement_display(overview: Dict) -> str:
    """
    Format an achievements overview for display

    Args:
        overview: Output from build_achievements_overview()
    """
    completed = overview["completed"]
    if not completed:
        return "🏆 No achievements unlocked yet. Keep logging your study time! 💪"

    lines = [f"🏆 YOUR ACHIEVEMENTS ({len(completed)}/{len(overview['achievements'])})\n"]
    for ach in completed:
        lines.append(f"✅ {ach['name']} - {ach['description']}")

    upcoming = sorted(
        (a for a in overview["achievements"] if not a["achieved"]),
        key=lambda a: a["progress"]["percentage"],
        reverse=True
    )[:3]
    if upcoming:
        lines.append("\n🎯 CLOSEST NEXT")
        for ach in upcoming:
            lines.append(f"{ach['name']}: {ach['progress']['description']} ({ach['progress']['percentage']}%)")

    return "\n".join(lines)
