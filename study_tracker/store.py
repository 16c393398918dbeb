"""
In-Memory Study Store

Async in-memory implementation of the user, study log and achievement
stores the service layer depends on. A database-backed store only has to
provide the same coroutine methods.

Data is NOT persisted across process restarts.
"""

import logging
from typing import Dict, Iterable, List, Optional

from study_tracker.models.achievement import AchievementRecord
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User

logger = logging.getLogger(__name__)


class InMemoryStudyStore:
    """In-memory store for users, study logs and achievement records"""

    def __init__(self):
        self._users: Dict[str, User] = {}
        # user_id -> {day key -> entry}; one entry per day
        self._logs: Dict[str, Dict] = {}
        # user_id -> {achievement_id -> record}; one record per achievement
        self._achievements: Dict[str, Dict[str, AchievementRecord]] = {}

    # ==========================================
    # Users
    # ==========================================

    async def get_user(self, user_id: str) -> Optional[User]:
        """Get user (None if unknown)"""
        return self._users.get(user_id)

    async def save_user(self, user: User) -> None:
        """Insert or replace a user"""
        self._users[user.user_id] = user
        logger.debug(f"Saved user {user.user_id}")

    # ==========================================
    # Study logs
    # ==========================================

    async def get_logs(self, user_id: str) -> List[StudyLogEntry]:
        """All study logs for a user, ascending by date"""
        logs = self._logs.get(user_id, {})
        return [logs[day] for day in sorted(logs)]

    async def upsert_log(self, user_id: str, entry: StudyLogEntry) -> None:
        """Insert the day's log or replace the existing one"""
        self._logs.setdefault(user_id, {})[entry.date] = entry
        logger.debug(f"Upserted study log for user {user_id} on {entry.date.date().isoformat()}")

    async def delete_logs(self, user_id: str) -> int:
        """Delete every study log for a user, returns the number removed"""
        return len(self._logs.pop(user_id, {}))

    # ==========================================
    # Achievements
    # ==========================================

    async def get_achievements(self, user_id: str) -> List[AchievementRecord]:
        """All achievement records for a user"""
        return list(self._achievements.get(user_id, {}).values())

    async def insert_achievements(self, user_id: str, records: Iterable[AchievementRecord]) -> None:
        """Bulk insert new achievement records"""
        user_records = self._achievements.setdefault(user_id, {})
        for record in records:
            if record.achievement_id in user_records:
                raise ValueError(
                    f"Achievement {record.achievement_id} already recorded for user {user_id}"
                )
            user_records[record.achievement_id] = record

    async def delete_achievement(self, user_id: str, achievement_id: str) -> bool:
        """Delete a record by (user_id, achievement_id), True if one existed"""
        return self._achievements.get(user_id, {}).pop(achievement_id, None) is not None

    async def mark_notified(self, user_id: str, record_ids: Iterable[str]) -> int:
        """Flag records as shown to the client, returns the number updated"""
        ids = set(record_ids)
        user_records = self._achievements.get(user_id, {})
        updated = 0
        for achievement_id, record in user_records.items():
            if record.id in ids and not record.notified:
                user_records[achievement_id] = record.model_copy(update={"notified": True})
                updated += 1
        return updated

    async def delete_achievements(self, user_id: str) -> int:
        """Delete every achievement record for a user"""
        return len(self._achievements.pop(user_id, {}))
