"""
Achievement System

Reconciles a user's stored achievement records against fresh qualification
from the catalog. Achievements are derived state, not permanent trophies:
if a user stops qualifying (goal changed so a streak no longer meets it, history
cleared, a log edited down) the record is revoked and deleted.

For every catalog entry:
1. qualifies, no record    -> create record, report as unlocked
2. qualifies, record       -> no change
3. not qualified, record   -> delete record, report as revoked
4. not qualified, no record -> no change

reconcile() is pure over its inputs. The caller persists the whole batch
(insert unlocked, delete revoked) and can safely call it again after a
failure: once applied, a second call with unchanged inputs returns nothing.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from datetime import datetime
import logging

from study_tracker.gamification.achievement_catalog import ACHIEVEMENTS, get_definition, is_qualified
from study_tracker.models.achievement import AchievementRecord, AchievementType
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User
from study_tracker.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


def reconcile(
    user: User,
    logs: Sequence[StudyLogEntry],
    existing_records: Iterable[AchievementRecord],
    now: Optional[datetime] = None
) -> Dict[str, List[AchievementRecord]]:
    """
    Diff catalog qualification against the user's stored records

    Args:
        user: User being evaluated (daily_goal_hours is read)
        logs: All of the user's logs, ascending by date
        existing_records: Every stored record for the user
        now: Unlock timestamp for new records (defaults to current UTC time)

    Returns:
        {
            'unlocked': [new AchievementRecord, ...],
            'revoked': [existing AchievementRecord to delete, ...]
        }
    """
    if now is None:
        now = now_utc()

    records_by_id = {record.achievement_id: record for record in existing_records}
    unlocked: List[AchievementRecord] = []
    revoked: List[AchievementRecord] = []

    for achievement in ACHIEVEMENTS:
        existing = records_by_id.get(achievement.id)
        qualifies = is_qualified(achievement, logs, user)

        if qualifies and existing is None:
            unlocked.append(AchievementRecord(
                user_id=user.user_id,
                achievement_id=achievement.id,
                name=achievement.name,
                description=achievement.description,
                achieved=True,
                date_achieved=now,
                notified=False,
                goal_value_on_achieved=(
                    user.daily_goal_hours if achievement.type == AchievementType.GOAL else None
                ),
            ))
            logger.info(f"User {user.user_id} unlocked achievement: {achievement.id} ({achievement.name})")

        elif not qualifies and existing is not None:
            revoked.append(existing)
            logger.info(f"User {user.user_id} no longer qualifies for {achievement.id}, revoking")

    logger.debug(
        f"Reconciled achievements for user {user.user_id}: "
        f"{len(unlocked)} unlocked, {len(revoked)} revoked"
    )

    return {"unlocked": unlocked, "revoked": revoked}


def apply_reconcile(
    existing_records: Iterable[AchievementRecord],
    result: Dict[str, List[AchievementRecord]]
) -> List[AchievementRecord]:
    """
    Record set after persisting a reconcile() result

    Revoked records are dropped by achievement id, unlocked records appended.
    """
    revoked_ids = {record.achievement_id for record in result["revoked"]}
    remaining = [r for r in existing_records if r.achievement_id not in revoked_ids]
    return remaining + list(result["unlocked"])


def mark_notified(
    records: Iterable[AchievementRecord],
    record_ids: Iterable[str]
) -> List[AchievementRecord]:
    """Return records with notified=True for the given record ids"""
    ids = set(record_ids)
    return [
        record.model_copy(update={"notified": True}) if record.id in ids else record
        for record in records
    ]


def get_unnotified(records: Iterable[AchievementRecord]) -> List[AchievementRecord]:
    """Achieved records the client has not been shown yet"""
    return [r for r in records if r.achieved and not r.notified]


def achieved_records(records: Iterable[AchievementRecord]) -> List[AchievementRecord]:
    """Records that count toward XP"""
    return [r for r in records if r.achieved]


def format_achievement_unlock_message(record: AchievementRecord) -> str:
    """
    Format achievement unlock message for celebration

    Args:
        record: Newly unlocked record from reconcile()
    """
    definition = get_definition(record.achievement_id)
    description = definition.description if definition else record.description

    message = f"""🎉 ACHIEVEMENT UNLOCKED! 🎉

🏆 {record.name}

{description}"""

    if record.goal_value_on_achieved is not None:
        message += f"\n\n🎯 Daily goal at unlock: {record.goal_value_on_achieved:g} hours"

    return message + "\n\nKeep up the amazing work! 💪"


def format_achievement_revoked_message(record: AchievementRecord) -> str:
    """Format notice for an achievement the user no longer qualifies for"""
    return f"⚠️ {record.name} is locked again: you no longer meet its requirements."
