"""
Logging setup for applications embedding the study tracker

Call setup_logging() once at application startup, before creating a
StudyTrackerService. The library itself only logs through module loggers.
"""
import logging

from study_tracker.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging with the standard format"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, level.upper(), logging.INFO)
    )
