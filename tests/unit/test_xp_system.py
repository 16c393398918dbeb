"""Unit tests for XP and Leveling System (study_tracker/gamification/xp_system.py)"""
from datetime import datetime, timezone

from study_tracker.gamification.xp_system import (
    MAX_LEVEL,
    XP_PER_LEVEL,
    calculate_level_from_xp,
    compute_xp,
    format_xp_display,
    get_xp_history,
    round_half_up,
)
from study_tracker.models.achievement import AchievementRecord
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User
from tests.helpers import day, make_logs


def _achieved(achievement_id: str, achieved: bool = True, when=None) -> AchievementRecord:
    return AchievementRecord(
        user_id="u1",
        achievement_id=achievement_id,
        name=achievement_id,
        achieved=achieved,
        date_achieved=when or datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


# ============================================================================
# Level Calculation Tests
# ============================================================================

def test_calculate_level_from_xp_zero():
    """Test level 1 with 0 XP"""
    result = calculate_level_from_xp(0)

    assert result["current_level"] == 1
    assert result["xp_in_current_level"] == 0
    assert result["xp_to_next_level"] == 1000
    assert result["total_xp_for_next_level"] == 1000
    assert result["is_max_level"] is False


def test_calculate_level_from_xp_boundaries():
    """Test level changes exactly at multiples of 1000"""
    assert calculate_level_from_xp(999)["current_level"] == 1
    assert calculate_level_from_xp(1000)["current_level"] == 2

    result = calculate_level_from_xp(2500)
    assert result["current_level"] == 3
    assert result["xp_in_current_level"] == 500
    assert result["xp_to_next_level"] == 500


def test_calculate_level_from_xp_capped_at_max():
    """Test level stops at 100 while XP keeps growing"""
    threshold = (MAX_LEVEL - 1) * XP_PER_LEVEL

    assert calculate_level_from_xp(threshold - 1)["current_level"] == 99

    result = calculate_level_from_xp(threshold + 250_000)
    assert result["current_level"] == MAX_LEVEL
    assert result["is_max_level"] is True
    assert result["xp_to_next_level"] == 0
    assert result["total_xp_for_next_level"] is None


# ============================================================================
# XP Computation Tests
# ============================================================================

def test_compute_xp_single_log_meeting_goal():
    """Test 5 hours against a 4 hour goal gives 100 XP, level 1"""
    user = User(user_id="u1", daily_goal_hours=4)
    logs = [StudyLogEntry(date=day(0), hours=5)]

    assert compute_xp(user, logs, []) == {"xp": 100, "level": 1}


def test_compute_xp_ten_days_reaches_level_two():
    """Test ten such days give exactly 1000 XP and level 2"""
    user = User(user_id="u1", daily_goal_hours=4)
    logs = make_logs(range(10), hours=5)

    assert compute_xp(user, logs, []) == {"xp": 1000, "level": 2}


def test_compute_xp_below_goal_no_bonus():
    """Test days under the goal earn only hourly XP"""
    user = User(user_id="u1", daily_goal_hours=4)
    logs = [StudyLogEntry(date=day(0), hours=3.9)]

    assert compute_xp(user, logs, [])["xp"] == 39


def test_compute_xp_counts_only_achieved_records():
    """Test each achieved record adds 100 XP, others add nothing"""
    user = User(user_id="u1", daily_goal_hours=4)
    records = [
        _achieved("consistency-7"),
        _achieved("goal-7"),
        _achieved("hours-100", achieved=False),
    ]

    assert compute_xp(user, [], records) == {"xp": 200, "level": 1}


def test_compute_xp_rounds_half_up():
    """Test the total is rounded half-up once, not per entry"""
    user = User(user_id="u1", daily_goal_hours=24)

    # 0.25h -> 2.5 XP rounds up to 3
    assert compute_xp(user, [StudyLogEntry(date=day(0), hours=0.25)], [])["xp"] == 3

    # 0.15h + 0.1h -> 1.5 + 1.0 = 2.5 -> 3
    logs = [
        StudyLogEntry(date=day(0), hours=0.15),
        StudyLogEntry(date=day(1), hours=0.1),
    ]
    assert compute_xp(user, logs, [])["xp"] == 3


def test_compute_xp_negative_hours_earn_nothing():
    """Test negative hours are non-qualifying instead of subtracting XP"""
    user = User(user_id="u1", daily_goal_hours=-1)
    logs = [
        StudyLogEntry(date=day(0), hours=-3),
        StudyLogEntry(date=day(1), hours=2),
    ]

    # Only the 2h day counts; goal <= 0 means it also earns the goal bonus
    assert compute_xp(user, logs, [])["xp"] == 70


def test_compute_xp_xp_uncapped_level_capped():
    """Test displayed XP keeps growing past the level cap"""
    user = User(user_id="u1", daily_goal_hours=24)
    records = [_achieved(f"a-{i}") for i in range(1200)]

    result = compute_xp(user, [], records)

    assert result == {"xp": 120_000, "level": MAX_LEVEL}


def test_compute_xp_is_deterministic():
    """Test identical inputs give identical output"""
    user = User(user_id="u1", daily_goal_hours=1.5)
    logs = make_logs(range(30), hours=1.7)
    records = [_achieved("consistency-21")]

    assert compute_xp(user, logs, records) == compute_xp(user, logs, records)


def test_round_half_up():
    """Test halves round away from zero"""
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(10.0) == 10


# ============================================================================
# XP History Tests
# ============================================================================

def test_get_xp_history_lines():
    """Test ledger lines for logs and achievements, newest first"""
    user = User(user_id="u1", daily_goal_hours=2)
    logs = [
        StudyLogEntry(date="2024-03-01", hours=1.5),
        StudyLogEntry(date="2024-03-02", hours=2.5),
    ]
    records = [
        _achieved("consistency-7", when=datetime(2024, 3, 1, tzinfo=timezone.utc)),
        _achieved("goal-7", when=datetime(2024, 3, 5, tzinfo=timezone.utc)),
        _achieved("hours-100", achieved=False),
    ]

    history = get_xp_history(user, logs, records)

    assert history["achievements"] == [
        '+100 XP: Achievement unlocked - "goal-7"',
        '+100 XP: Achievement unlocked - "consistency-7"',
    ]
    assert history["logs"] == [
        "+25 XP: Studied for 2.5 hours on 3/2/2024",
        "+50 XP: Daily goal met on 3/2/2024",
        "+15 XP: Studied for 1.5 hours on 3/1/2024",
    ]


def test_format_xp_display():
    """Test XP display text"""
    assert format_xp_display({"xp": 1250, "level": 2}) == "⭐ Level 2 - 1250 XP (750 XP to level 3)"
    assert "(max)" in format_xp_display({"xp": 99_000, "level": 100})


def test_compute_xp_sums_many_fractional_logs_exactly():
    """Test a long run of fractional logs lands exactly on the half and rounds up"""
    user = User(user_id="u1", daily_goal_hours=24)
    # 1000 x 0.1 XP + 0.5 XP = 100.5 XP
    logs = make_logs(range(1000), hours=0.01) + [StudyLogEntry(date=day(1000), hours=0.05)]

    assert compute_xp(user, logs, [])["xp"] == 101
    assert compute_xp(user, list(reversed(logs)), [])["xp"] == 101
