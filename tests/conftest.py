"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from skillcoach.core.models import ResponseRecord, SelectedSkill  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (real storage backends)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock():
    """Provide a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def sample_roster():
    """Provide a two-skill roster (1 min then 2 min waits)."""
    return [
        SelectedSkill(skill_id="s1", order=1, duration_minutes=1, skill_name="Raise hand"),
        SelectedSkill(skill_id="s2", order=2, duration_minutes=2, skill_name="Eye contact"),
    ]


@pytest.fixture
def make_record():
    """Factory for response records on a fixed date."""

    def _make(skill_id, response, timestamp_ms=100, user_id="u1", session_date="2024-01-15"):
        return ResponseRecord.from_dict(
            {
                "userId": user_id,
                "sessionDate": session_date,
                "skillId": skill_id,
                "skillName": skill_id.upper(),
                "response": response,
                "timestamp": timestamp_ms,
            }
        )

    return _make
