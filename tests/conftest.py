"""
Pytest configuration for lab request metrics.

Provides fixtures for:
- Raw record factories for both families (camelCase storage rows)
- A fixed reference "now" so results are reproducible
- Settings isolation for tests that patch environment variables
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Callable, Dict, Generator, Optional

import pytest

from lab_metrics.config import Settings, get_settings
from lab_metrics.domain.models import RequestRecords

FIXED_NOW = datetime(2025, 12, 31, 23, 59, 59, tzinfo=UTC)

RecordFactory = Callable[..., Dict[str, Any]]


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)
def isolated_settings() -> Generator[None, None, None]:
    """
    Drop the cached Settings around each test so env patches take effect and
    never leak between tests.
    """
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """The CLI reconfigures root logging; put the previous handlers back."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with test-specific overrides."""
    return Settings(log_level="DEBUG", results_dir="test-results")


@pytest.fixture
def make_solution() -> RecordFactory:
    counter = {"n": 0}

    def _make(
        created_at: Optional[str] = "2025-01-05T10:00:00Z",
        amount: Any = 1000,
        status: str = "Solution Pending",
        **overrides: Any,
    ) -> Dict[str, Any]:
        counter["n"] += 1
        record: Dict[str, Any] = {
            "id": f"sol-{counter['n']}",
            "createdAt": created_at,
            "totalAmountForTraining": amount,
            "status": status,
            "labName": "Kubernetes",
            "client": "Globex",
            "cloud": "AWS",
            "agentName": "Asha",
            "userCount": 10,
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def make_delivery() -> RecordFactory:
    counter = {"n": 0}

    def _make(
        created_at: Optional[str] = "2025-01-05T10:00:00Z",
        amount: Any = 500,
        status: str = "Pending",
        **overrides: Any,
    ) -> Dict[str, Any]:
        counter["n"] += 1
        record: Dict[str, Any] = {
            "id": f"del-{counter['n']}",
            "createdAt": created_at,
            "totalAmount": amount,
            "labStatus": status,
            "trainingName": "Terraform",
            "client": "Initech",
            "labType": "Cloud",
            "agentName": "Ravi",
            "numberOfUsers": 20,
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
def mixed_records(make_solution: RecordFactory, make_delivery: RecordFactory) -> RequestRecords:
    """Ten records across both families, one with a bad timestamp and one negative amount."""
    return RequestRecords(
        solutions=[
            make_solution("2025-01-05T10:00:00Z", 1000),
            make_solution("2025-01-20T08:00:00Z", 2000, status="Solution Sent"),
            make_solution("2025-02-03T09:00:00Z", 500),
            make_solution("not-a-date", 750),
            make_solution("2025-03-15T12:30:00+05:30", -40, status="Solution Sent"),
        ],
        deliveries=[
            make_delivery("2025-01-06T00:00:00Z", 300.10),
            make_delivery("2025-01-06T23:59:59Z", 199.90, status="Delivered"),
            make_delivery("2025-03-31T23:00:00Z", "1250.50", status="Work-in-Progress"),
            make_delivery("2025-04-01T00:00:00Z", 0, status="Cancelled"),
            make_delivery("2024-12-31T23:00:00Z", 99.99, status="Delivered"),
        ],
    )
