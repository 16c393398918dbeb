"""
StudyTrackerService - Study Tracking Business Logic

Orchestrates log submission, goal changes and the gamification engine
over an injected store. Every mutation is followed by an achievement
reconcile whose batch (inserts + deletes) is persisted while the user's
lock is held, so two reconciles for the same user never interleave.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List

from study_tracker import config
from study_tracker.config import DEFAULT_DAILY_GOAL_HOURS
from study_tracker.exceptions import (
    InvalidLogEntry,
    RecordNotFoundError,
    ValidationError,
    wrap_store_exception,
)
from study_tracker.gamification.achievement_catalog import get_definition
from study_tracker.gamification.achievement_system import (
    achieved_records,
    apply_reconcile,
    get_unnotified,
    reconcile,
)
from study_tracker.gamification.dashboards import (
    build_achievements_overview,
    build_dashboard,
    day_of_week_averages,
    hours_distribution,
    logs_in_date_range,
    monthly_history,
    monthly_summary,
)
from study_tracker.gamification.xp_system import compute_xp, get_xp_history
from study_tracker.models.achievement import AchievementRecord
from study_tracker.models.study_log import StudyLogEntry
from study_tracker.models.user import User
from study_tracker.observability import metrics
from study_tracker.validators import validate_goal, validate_study_log

logger = logging.getLogger(__name__)


class StudyTrackerService:
    """
    Service for study logging and gamification.

    Responsibilities:
    - Study log submission (validated, one entry per day)
    - Daily goal changes
    - Achievement reconcile and persistence
    - Exactly-once delivery of unlock notifications
    - Dashboard, achievements, XP history and analytics data
    """

    def __init__(self, store):
        """
        Initialize StudyTrackerService.

        Args:
            store: Store providing the user, study log and achievement
                coroutines of InMemoryStudyStore

        Raises:
            ConfigurationError: If the environment configuration is invalid
        """
        config.validate_config()
        self.store = store
        self._user_locks: Dict[str, asyncio.Lock] = {}
        logger.debug("StudyTrackerService initialized")

    # ==========================================
    # Users
    # ==========================================

    async def create_user(
        self,
        user_id: str,
        daily_goal_hours: float = DEFAULT_DAILY_GOAL_HOURS,
        name: str = None
    ) -> User:
        """Register a user with a validated daily goal"""
        goal = validate_goal(daily_goal_hours, user_id=user_id)
        user = User(user_id=user_id, name=name, daily_goal_hours=goal)
        await self._call_store("create_user", user_id, self.store.save_user(user))
        logger.info(f"Created user {user_id} with daily goal {goal}h")
        return user

    async def _get_user(self, user_id: str) -> User:
        user = await self._call_store("get_user", user_id, self.store.get_user(user_id))
        if user is None:
            raise RecordNotFoundError(
                f"User {user_id} not found",
                record_type="User",
                record_id=user_id,
                user_id=user_id
            )
        return user

    # ==========================================
    # Mutations
    # ==========================================

    async def log_study(self, user_id: str, date, hours) -> Dict[str, Any]:
        """
        Record hours for a day (replacing any earlier entry) and reconcile.

        Args:
            user_id: User ID
            date: ISO date string, date or datetime of the study day
            hours: Hours studied (0-24)

        Returns:
            {
                'entry': StudyLogEntry,
                'unlocked': [AchievementRecord, ...],
                'revoked': [AchievementRecord, ...],
                'xp': int,
                'level': int
            }
        """
        try:
            entry = validate_study_log(date, hours, user_id=user_id)
        except InvalidLogEntry:
            self._track(metrics.track_study_log, "invalid")
            raise

        async with await self._lock_for(user_id):
            user = await self._get_user(user_id)
            await self._call_store("upsert_log", user_id, self.store.upsert_log(user_id, entry))
            result = await self._reconcile_locked(user)

        self._track(metrics.track_study_log, "success")
        logger.info(
            f"Logged {entry.hours}h for user {user_id} on {entry.date.date().isoformat()}: "
            f"{len(result['unlocked'])} unlocked, {len(result['revoked'])} revoked"
        )

        return {"entry": entry, **result}

    async def update_goal(self, user_id: str, daily_goal_hours) -> Dict[str, Any]:
        """
        Change the daily goal and reconcile.

        Goal achievements are re-evaluated against the new goal, so a
        change can revoke goal streaks that no longer hold.

        Returns:
            {'unlocked': [...], 'revoked': [...], 'xp': int, 'level': int}
        """
        goal = validate_goal(daily_goal_hours, user_id=user_id)

        async with await self._lock_for(user_id):
            user = await self._get_user(user_id)
            user = user.model_copy(update={"daily_goal_hours": goal})
            await self._call_store("save_user", user_id, self.store.save_user(user))
            result = await self._reconcile_locked(user)

        logger.info(f"Updated daily goal for user {user_id} to {goal}h")
        return result

    async def refresh_achievements(self, user_id: str) -> Dict[str, Any]:
        """Reconcile and persist achievements without any other change"""
        async with await self._lock_for(user_id):
            user = await self._get_user(user_id)
            return await self._reconcile_locked(user)

    async def clear_data(self, user_id: str) -> Dict[str, int]:
        """
        Delete all study logs and achievement records for a user.

        Returns:
            {'logs_deleted': int, 'achievements_deleted': int}
        """
        async with await self._lock_for(user_id):
            await self._get_user(user_id)
            logs_deleted = await self._call_store(
                "delete_logs", user_id, self.store.delete_logs(user_id)
            )
            achievements_deleted = await self._call_store(
                "delete_achievements", user_id, self.store.delete_achievements(user_id)
            )

        logger.info(
            f"Cleared data for user {user_id}: {logs_deleted} logs, "
            f"{achievements_deleted} achievements"
        )
        return {"logs_deleted": logs_deleted, "achievements_deleted": achievements_deleted}

    async def check_new_achievements(self, user_id: str) -> List[AchievementRecord]:
        """
        Return unlocked achievements the client has not seen yet and flag
        them as notified, so each unlock is delivered exactly once.
        """
        async with await self._lock_for(user_id):
            await self._get_user(user_id)
            records = await self._call_store(
                "get_achievements", user_id, self.store.get_achievements(user_id)
            )
            new_records = get_unnotified(records)
            if new_records:
                await self._call_store(
                    "mark_notified",
                    user_id,
                    self.store.mark_notified(user_id, [r.id for r in new_records])
                )
                self._track(metrics.achievements_notified_total.inc, len(new_records))

        return [r.model_copy(update={"notified": True}) for r in new_records]

    # ==========================================
    # Read models
    # ==========================================

    async def get_user_state(self, user_id: str, total_hours_range: str = "alltime") -> Dict[str, Any]:
        """Dashboard data with freshly computed XP and level"""
        user, logs, records = await self._load_snapshot(user_id)
        return build_dashboard(user, logs, records, total_hours_range=total_hours_range)

    async def get_achievements_overview(self, user_id: str) -> Dict[str, Any]:
        """Reconcile, then list every achievement with status and progress"""
        await self.refresh_achievements(user_id)
        user, logs, records = await self._load_snapshot(user_id)
        return build_achievements_overview(user, logs, records)

    async def get_xp_history(self, user_id: str) -> Dict[str, List[str]]:
        """Human-readable XP ledger"""
        user, logs, records = await self._load_snapshot(user_id)
        return get_xp_history(user, logs, achieved_records(records))

    async def get_monthly_summary(self, user_id: str, year: int, month: int) -> Dict[str, Any]:
        """Totals, average and goal adherence for one month"""
        user, logs, _ = await self._load_snapshot(user_id)
        return monthly_summary(logs, year, month, user.daily_goal_hours)

    async def get_day_of_week_averages(self, user_id: str, year: int, month: int) -> List[Dict[str, Any]]:
        """Average hours per weekday within one month"""
        _, logs, _ = await self._load_snapshot(user_id)
        return day_of_week_averages(logs, year, month)

    async def get_hours_distribution(self, user_id: str, distribution_range: str) -> Dict[str, Any]:
        """Total or per-day average hours for a distribution range"""
        _, logs, _ = await self._load_snapshot(user_id)
        return hours_distribution(logs, distribution_range)

    async def get_monthly_history(self, user_id: str) -> List[Dict[str, Any]]:
        """Total hours for every month with logs"""
        _, logs, _ = await self._load_snapshot(user_id)
        return monthly_history(logs)

    async def get_logs_in_range(self, user_id: str, start_date, end_date) -> List[StudyLogEntry]:
        """
        Study logs between two days, both inclusive

        Raises:
            ValidationError: If either bound is not a date
        """
        _, logs, _ = await self._load_snapshot(user_id)
        try:
            return logs_in_date_range(logs, start_date, end_date)
        except (TypeError, ValueError) as e:
            raise ValidationError(
                f"Invalid date range: {e}",
                field="date_range",
                value={"start_date": str(start_date), "end_date": str(end_date)},
                user_id=user_id,
                operation="get_logs_in_range",
                cause=e
            )

    # ==========================================
    # Helpers
    # ==========================================

    async def _lock_for(self, user_id: str) -> asyncio.Lock:
        """Per-user lock, only ever created for registered users"""
        lock = self._user_locks.get(user_id)
        if lock is None:
            await self._get_user(user_id)
            lock = self._user_locks.setdefault(user_id, asyncio.Lock())
        return lock

    async def _load_snapshot(self, user_id: str):
        async with await self._lock_for(user_id):
            user = await self._get_user(user_id)
            logs = await self._call_store("get_logs", user_id, self.store.get_logs(user_id))
            records = await self._call_store(
                "get_achievements", user_id, self.store.get_achievements(user_id)
            )
        return user, logs, records

    async def _reconcile_locked(self, user: User) -> Dict[str, Any]:
        """Reconcile and persist; caller must hold the user's lock"""
        started = time.perf_counter()
        user_id = user.user_id

        logs = await self._call_store("get_logs", user_id, self.store.get_logs(user_id))
        records = await self._call_store(
            "get_achievements", user_id, self.store.get_achievements(user_id)
        )

        result = reconcile(user, logs, records)

        if result["unlocked"]:
            await self._call_store(
                "insert_achievements",
                user_id,
                self.store.insert_achievements(user_id, result["unlocked"])
            )
        for record in result["revoked"]:
            await self._call_store(
                "delete_achievement",
                user_id,
                self.store.delete_achievement(user_id, record.achievement_id)
            )

        xp_data = compute_xp(user, logs, achieved_records(apply_reconcile(records, result)))

        self._track(metrics.reconcile_duration_seconds.observe, time.perf_counter() - started)
        self._track(
            metrics.track_achievement_changes,
            [self._type_label(r) for r in result["unlocked"]],
            [self._type_label(r) for r in result["revoked"]],
        )

        return {**result, **xp_data}

    async def _call_store(self, operation: str, user_id: str, awaitable):
        """Await a store call, wrapping backend failures in StoreError"""
        try:
            return await awaitable
        except Exception as e:
            raise wrap_store_exception(e, operation=operation, user_id=user_id)

    @staticmethod
    def _type_label(record: AchievementRecord) -> str:
        definition = get_definition(record.achievement_id)
        return definition.type.value if definition else "unknown"

    @staticmethod
    def _track(func, *args) -> None:
        if config.ENABLE_METRICS:
            func(*args)
