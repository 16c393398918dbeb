"""Study Tracker: study-hour logging with streaks, achievements and XP"""

__version__ = "1.0.0"
