"""
Prometheus metrics definitions for study-tracker.

Organized by category:
- Study log metrics: submissions
- Achievement metrics: unlocks, revocations, notifications
- Engine metrics: reconcile latency

An embedding application exposes them through its own /metrics endpoint.
"""

import logging
from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# Study Log Metrics
# =============================================================================

study_logs_submitted_total = Counter(
    "study_logs_submitted_total",
    "Total study log submissions",
    ["status"],  # status: success/invalid
)

# =============================================================================
# Achievement Metrics
# =============================================================================

achievements_unlocked_total = Counter(
    "achievements_unlocked_total",
    "Total achievements unlocked",
    ["achievement_type"],  # consistency/goal/total_hours
)

achievements_revoked_total = Counter(
    "achievements_revoked_total",
    "Total achievements revoked after the user stopped qualifying",
    ["achievement_type"],
)

achievements_notified_total = Counter(
    "achievements_notified_total",
    "Total unlocked achievements surfaced to clients",
)

# =============================================================================
# Engine Metrics
# =============================================================================

reconcile_duration_seconds = Histogram(
    "reconcile_duration_seconds",
    "Achievement reconcile time (evaluation and persistence) in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)


def track_study_log(status: str) -> None:
    """Record a study log submission outcome"""
    study_logs_submitted_total.labels(status=status).inc()


def track_achievement_changes(unlocked_types: list, revoked_types: list) -> None:
    """Record unlocked and revoked achievements by type"""
    for achievement_type in unlocked_types:
        achievements_unlocked_total.labels(achievement_type=achievement_type).inc()
    for achievement_type in revoked_types:
        achievements_revoked_total.labels(achievement_type=achievement_type).inc()
