"""
Gamification engine for Study Tracker

Pure functions over a user's study log history:
- Streak calculation (consistency and daily-goal streaks)
- Achievement catalog and reconcile (unlock and revoke)
- XP and level derivation
- Dashboard and analytics read models
"""

from study_tracker.gamification.streak_system import longest_streak, current_streak, has_streak_of_at_least
from study_tracker.gamification.achievement_catalog import ACHIEVEMENTS, get_definition, is_qualified
from study_tracker.gamification.achievement_system import reconcile, apply_reconcile, mark_notified
from study_tracker.gamification.xp_system import compute_xp, calculate_level_from_xp

__all__ = [
    "longest_streak",
    "current_streak",
    "has_streak_of_at_least",
    "ACHIEVEMENTS",
    "get_definition",
    "is_qualified",
    "reconcile",
    "apply_reconcile",
    "mark_notified",
    "compute_xp",
    "calculate_level_from_xp",
]
