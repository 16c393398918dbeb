"""Global test fixtures and utilities for study-tracker tests"""
import pytest
from datetime import datetime, timezone

from study_tracker.models.user import User
from study_tracker.store import InMemoryStudyStore
from study_tracker.services.study_service import StudyTrackerService


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def test_user(test_user_id):
    """User with a 2-hour daily goal"""
    return User(user_id=test_user_id, name="Test Student", daily_goal_hours=2.0)


# ============================================================================
# Date Fixtures
# ============================================================================

@pytest.fixture
def fixed_today():
    """Fixed 'today' for current-streak tests"""
    return datetime(2024, 3, 15, tzinfo=timezone.utc)


# ============================================================================
# Store & Service Fixtures
# ============================================================================

@pytest.fixture
def store():
    """Fresh in-memory store"""
    return InMemoryStudyStore()


@pytest.fixture
def service(store):
    """Service over the in-memory store"""
    return StudyTrackerService(store)
