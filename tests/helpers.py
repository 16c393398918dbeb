"""Shared builders for study-tracker tests"""
from datetime import datetime, timedelta, timezone

from study_tracker.models.study_log import StudyLogEntry

BASE_DAY = datetime(2024, 1, 1, tzinfo=timezone.utc)


def day(offset: int, base: datetime = BASE_DAY) -> datetime:
    """Day key `offset` days after base"""
    return base + timedelta(days=offset)


def make_logs(offsets, hours: float = 1.0, base: datetime = BASE_DAY):
    """Ascending study logs on the given day offsets"""
    return [StudyLogEntry(date=day(o, base), hours=hours) for o in sorted(offsets)]
