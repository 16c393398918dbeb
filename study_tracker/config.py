"""
Configuration management

Values come from the environment (and a .env file). validate_config() runs
whenever a StudyTrackerService is created.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Study goals
DEFAULT_DAILY_GOAL_HOURS: float = float(os.getenv("DEFAULT_DAILY_GOAL_HOURS", "2"))
MIN_DAILY_GOAL_HOURS: float = float(os.getenv("MIN_DAILY_GOAL_HOURS", "0.5"))
MAX_DAILY_GOAL_HOURS: float = float(os.getenv("MAX_DAILY_GOAL_HOURS", "24"))

# Study logs
MAX_HOURS_PER_DAY: float = 24.0
RECENT_LOGS_DAYS: int = int(os.getenv("RECENT_LOGS_DAYS", "30"))

# Metrics
ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    from study_tracker.exceptions import ConfigurationError

    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unknown LOG_LEVEL '{LOG_LEVEL}'", config_key="LOG_LEVEL")
    if MIN_DAILY_GOAL_HOURS <= 0:
        raise ConfigurationError(
            "MIN_DAILY_GOAL_HOURS must be positive",
            config_key="MIN_DAILY_GOAL_HOURS"
        )
    if MAX_DAILY_GOAL_HOURS > MAX_HOURS_PER_DAY or MAX_DAILY_GOAL_HOURS < MIN_DAILY_GOAL_HOURS:
        raise ConfigurationError(
            f"MAX_DAILY_GOAL_HOURS must be between {MIN_DAILY_GOAL_HOURS} and {MAX_HOURS_PER_DAY}",
            config_key="MAX_DAILY_GOAL_HOURS"
        )
    if not MIN_DAILY_GOAL_HOURS <= DEFAULT_DAILY_GOAL_HOURS <= MAX_DAILY_GOAL_HOURS:
        raise ConfigurationError(
            "DEFAULT_DAILY_GOAL_HOURS is outside the allowed goal range",
            config_key="DEFAULT_DAILY_GOAL_HOURS"
        )
    if RECENT_LOGS_DAYS <= 0:
        raise ConfigurationError("RECENT_LOGS_DAYS must be positive", config_key="RECENT_LOGS_DAYS")
