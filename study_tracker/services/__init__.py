"""
Service Layer Package

Business logic services that sit between the presentation layer (HTTP
handlers, bots) and the data access layer (stores).

Core Services:
- StudyTrackerService: study logs, daily goals, achievements, XP and dashboards
"""

from study_tracker.services.study_service import StudyTrackerService

__all__ = [
    "StudyTrackerService",
]
