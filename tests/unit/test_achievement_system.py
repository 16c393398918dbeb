"""Unit tests for Achievement System (study_tracker/gamification/achievement_system.py)"""
from datetime import datetime, timezone

from study_tracker.gamification.achievement_system import (
    achieved_records,
    apply_reconcile,
    format_achievement_revoked_message,
    format_achievement_unlock_message,
    get_unnotified,
    mark_notified,
    reconcile,
)
from study_tracker.models.achievement import AchievementRecord
from study_tracker.models.user import User
from tests.helpers import make_logs

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _ids(records):
    return sorted(r.achievement_id for r in records)


def _record(achievement_id: str, user_id: str = "u1", **kwargs) -> AchievementRecord:
    return AchievementRecord(
        user_id=user_id,
        achievement_id=achievement_id,
        date_achieved=NOW,
        **kwargs
    )


# ============================================================================
# Unlocking
# ============================================================================

def test_reconcile_no_logs_no_changes():
    """Test a new user has nothing to unlock or revoke"""
    user = User(user_id="u1", daily_goal_hours=2)

    result = reconcile(user, [], [], now=NOW)

    assert result == {"unlocked": [], "revoked": []}


def test_reconcile_seven_days_unlocks_consistency_and_goal():
    """Test 7 consecutive days above goal unlock consistency-7 and goal-7 together"""
    user = User(user_id="u1", daily_goal_hours=0.5)
    logs = make_logs(range(7), hours=1)

    result = reconcile(user, logs, [], now=NOW)

    assert _ids(result["unlocked"]) == ["consistency-7", "goal-7"]
    assert result["revoked"] == []


def test_reconcile_new_record_fields():
    """Test unlocked records start achieved and unnotified"""
    user = User(user_id="u1", daily_goal_hours=0.5)
    logs = make_logs(range(7), hours=1)

    unlocked = {r.achievement_id: r for r in reconcile(user, logs, [], now=NOW)["unlocked"]}

    consistency = unlocked["consistency-7"]
    assert consistency.user_id == "u1"
    assert consistency.achieved is True
    assert consistency.notified is False
    assert consistency.date_achieved == NOW
    assert consistency.name == "7-Day Streak"
    assert consistency.goal_value_on_achieved is None

    # Goal achievements snapshot the goal at unlock time
    assert unlocked["goal-7"].goal_value_on_achieved == 0.5


def test_reconcile_existing_record_unchanged():
    """Test a record that still qualifies is neither unlocked nor revoked"""
    user = User(user_id="u1", daily_goal_hours=0.5)
    logs = make_logs(range(7), hours=1)
    existing = [_record("consistency-7")]

    result = reconcile(user, logs, existing, now=NOW)

    assert _ids(result["unlocked"]) == ["goal-7"]
    assert result["revoked"] == []


def test_reconcile_hours_achievement():
    """Test cumulative hours unlock hours-100 and hours-500 is still locked"""
    user = User(user_id="u1", daily_goal_hours=24)
    logs = make_logs(range(0, 40, 2), hours=5)  # 20 non-consecutive days, 100 hours

    result = reconcile(user, logs, [], now=NOW)

    assert _ids(result["unlocked"]) == ["hours-100"]


# ============================================================================
# Revocation
# ============================================================================

def test_reconcile_revokes_when_streak_broken():
    """Test removing the 4th day of a 7-day run revokes both streak achievements"""
    user = User(user_id="u1", daily_goal_hours=0.5)
    logs = make_logs(range(7), hours=1)

    first = reconcile(user, logs, [], now=NOW)
    records = apply_reconcile([], first)
    assert _ids(records) == ["consistency-7", "goal-7"]

    broken_logs = logs[:3] + logs[4:]
    second = reconcile(user, broken_logs, records, now=NOW)

    assert second["unlocked"] == []
    assert _ids(second["revoked"]) == ["consistency-7", "goal-7"]
    assert apply_reconcile(records, second) == []


def test_reconcile_revokes_goal_streak_after_goal_change():
    """Test a goal change that breaks the goal streak revokes goal-7 only"""
    logs = make_logs(range(7), hours=3)
    user = User(user_id="u1", daily_goal_hours=3)

    records = apply_reconcile([], reconcile(user, logs, [], now=NOW))
    assert _ids(records) == ["consistency-7", "goal-7"]

    stricter = user.model_copy(update={"daily_goal_hours": 4})
    result = reconcile(stricter, logs, records, now=NOW)

    assert result["unlocked"] == []
    assert _ids(result["revoked"]) == ["goal-7"]


def test_reconcile_lowering_goal_keeps_goal_streak():
    """Test lowering the goal can only add goal days, never revoke"""
    logs = make_logs(range(7), hours=3)
    user = User(user_id="u1", daily_goal_hours=3)
    records = apply_reconcile([], reconcile(user, logs, [], now=NOW))

    easier = user.model_copy(update={"daily_goal_hours": 1})
    result = reconcile(easier, logs, records, now=NOW)

    assert result == {"unlocked": [], "revoked": []}


def test_reconcile_clearing_history_revokes_everything():
    """Test cleared logs revoke all previously unlocked achievements"""
    user = User(user_id="u1", daily_goal_hours=1)
    logs = make_logs(range(21), hours=5)
    records = apply_reconcile([], reconcile(user, logs, [], now=NOW))
    assert _ids(records) == ["consistency-21", "consistency-7", "goal-21", "goal-7", "hours-100"]

    result = reconcile(user, [], records, now=NOW)

    assert _ids(result["revoked"]) == _ids(records)


def test_reconcile_ignores_unknown_records():
    """Test records for ids outside the catalog are left alone"""
    user = User(user_id="u1", daily_goal_hours=1)
    existing = [_record("retired-achievement")]

    result = reconcile(user, [], existing, now=NOW)

    assert result == {"unlocked": [], "revoked": []}


# ============================================================================
# Idempotence & Determinism
# ============================================================================

def test_reconcile_is_idempotent():
    """Test a second reconcile with unchanged inputs reports nothing"""
    user = User(user_id="u1", daily_goal_hours=2)
    logs = make_logs(list(range(25)) + list(range(30, 40)), hours=4)

    first = reconcile(user, logs, [], now=NOW)
    records = apply_reconcile([], first)
    second = reconcile(user, logs, records, now=NOW)

    assert first["unlocked"]
    assert second == {"unlocked": [], "revoked": []}


def test_reconcile_does_not_mutate_inputs():
    """Test reconcile is pure over its inputs"""
    user = User(user_id="u1", daily_goal_hours=2)
    logs = make_logs(range(7), hours=1)
    existing = [_record("goal-7")]
    logs_before = list(logs)
    existing_before = list(existing)

    reconcile(user, logs, existing, now=NOW)

    assert logs == logs_before
    assert existing == existing_before


def test_reconcile_defaults_now_to_utc():
    """Test unlock time defaults to an aware current timestamp"""
    user = User(user_id="u1", daily_goal_hours=0.5)

    unlocked = reconcile(user, make_logs(range(7)), [])["unlocked"]

    assert all(r.date_achieved.tzinfo is not None for r in unlocked)


# ============================================================================
# Notification Tracking
# ============================================================================

def test_mark_notified_flags_only_given_ids():
    """Test mark_notified updates the selected records"""
    first = _record("consistency-7")
    second = _record("goal-7")

    updated = mark_notified([first, second], [first.id])

    assert updated[0].notified is True
    assert updated[1].notified is False
    assert first.notified is False  # original untouched


def test_get_unnotified_and_achieved_records():
    """Test helpers filter by achieved and notified flags"""
    fresh = _record("consistency-7")
    seen = _record("goal-7", notified=True)
    not_achieved = _record("hours-100", achieved=False)

    assert get_unnotified([fresh, seen, not_achieved]) == [fresh]
    assert achieved_records([fresh, seen, not_achieved]) == [fresh, seen]


# ============================================================================
# Display
# ============================================================================

def test_format_achievement_unlock_message_goal_snapshot():
    """Test unlock message includes the goal snapshot for goal achievements"""
    record = _record("goal-7", name="Goal Setter", goal_value_on_achieved=2.5)

    message = format_achievement_unlock_message(record)

    assert "ACHIEVEMENT UNLOCKED" in message
    assert "Goal Setter" in message
    assert "Meet your daily goal for 7 days in a row." in message
    assert "2.5 hours" in message


def test_format_achievement_revoked_message():
    """Test revoke notice"""
    record = _record("consistency-7", name="7-Day Streak")

    assert "7-Day Streak is locked again" in format_achievement_revoked_message(record)
