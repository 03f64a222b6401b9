"""
Pytest fixtures for the legal workflow test suite.

Provides:
- Principals for the usual cast (submitter, attorney, admin)
- A snapshot factory with sensible defaults
- A deterministic clock
- Clean structured-logging state per test

Naive datetimes in tests are wall-clock time in the default reference
timezone (America/Los_Angeles).  2024-01-01 is a Monday.
"""

from datetime import datetime

import pytest

from legal_kernel.domain.clock import DeterministicClock
from legal_kernel.domain.request import (
    Principal,
    RequestSnapshot,
    RequestStatus,
    ReviewAudience,
)
from legal_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _clean_log_state():
    """Keep logger configuration from leaking between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def submitter() -> Principal:
    return Principal(id="u-100", display_name="Sam Submitter", email="sam@example.com")


@pytest.fixture
def attorney() -> Principal:
    return Principal(id="u-200", display_name="Alex Attorney", email="alex@example.com")


@pytest.fixture
def admin_user() -> Principal:
    return Principal(id="u-900", display_name="Ada Admin", email="ada@example.com")


@pytest.fixture
def make_snapshot(submitter):
    """Factory for RequestSnapshot with a submitted-by principal set."""

    def _make(**overrides) -> RequestSnapshot:
        fields = {
            "id": 1,
            "request_id": "CRR-24-001",
            "status": RequestStatus.DRAFT,
            "review_audience": ReviewAudience.LEGAL,
            "created": datetime(2024, 1, 1, 9, 0),
            "created_by": submitter,
            "submitted_by": submitter,
        }
        fields.update(overrides)
        return RequestSnapshot(**fields)

    return _make


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime.fromisoformat("2024-01-10T20:00:00+00:00"))
