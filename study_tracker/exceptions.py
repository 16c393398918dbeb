"""
Standardized exception hierarchy for study-tracker
Provides rich context, consistent logging, and user-friendly error messages

Errors raised from the gamification engine are precondition failures
(bad input reaching a pure computation). They are never transient: callers
should treat them as logic bugs, not retry them.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class StudyTrackerError(Exception):
    """
    Base exception for all study-tracker errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise StudyTrackerError(
            message="Failed to persist achievements",
            user_id="42",
            operation="reconcile_achievements",
            context={"unlocked": 2}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Engine Preconditions)
# ==========================================

class ValidationError(StudyTrackerError):
    """
    Raised when input fails validation before reaching the engine

    Example:
        raise ValidationError(
            message="Hours must be between 0 and 24",
            field="hours",
            value=25,
            user_id="42"
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        user_message: Optional[str] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        context = {"field": field, "value": value}
        context.update(kwargs.pop("context", None) or {})
        super().__init__(
            message=message,
            user_message=user_message or (f"Invalid {field}: {message}" if field else message),
            context=context,
            **kwargs
        )


class InvalidLogEntry(ValidationError):
    """
    Study log entry violates the engine's input contract

    Examples:
    - Hours outside [0, 24]
    - Date that cannot be parsed or is not normalized to a UTC day
    - Two entries for the same day
    - Entries out of ascending date order
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("field", "study_log")
        super().__init__(message=message, **kwargs)


class InvalidGoal(ValidationError):
    """
    Daily goal is not a usable positive number of hours

    The engine itself accepts a goal <= 0 (goal streaks then count every
    logged day); this error is raised where goals are submitted.
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("field", "daily_goal_hours")
        super().__init__(message=message, **kwargs)


# ==========================================
# Store Errors
# ==========================================

class StoreError(StudyTrackerError):
    """
    Base class for failures raised by a log/achievement/user store
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault(
            "user_message",
            "We encountered an issue saving your study data. Please try again."
        )
        super().__init__(message=message, **kwargs)


class RecordNotFoundError(StoreError):
    """Requested record does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(StudyTrackerError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_store_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> StudyTrackerError:
    """
    Wrap exceptions raised by a store backend into our exception hierarchy

    Errors that already belong to the hierarchy are returned unchanged.

    Example:
        try:
            await store.insert_achievements(user_id, unlocked)
        except Exception as e:
            raise wrap_store_exception(e, operation="persist_unlocks", user_id=user_id)
    """
    if isinstance(error, StudyTrackerError):
        return error

    return StoreError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error
    )
