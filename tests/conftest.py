"""
Pytest fixtures for the DivvyPlan test suite.

Provides:
- Structured logging configured once per session, plus a captured_logs
  fixture returning parsed JSON records
- Default settings and director rosters
- An in-memory SQLite planner store
"""

import json
import logging
from decimal import Decimal
from io import StringIO

import pytest

from divvy_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from divvy_kernel.domain.values import DEFAULT_SETTINGS, DealInput, Director
from divvy_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from divvy_services.storage import PlannerStore


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture divvy_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_deal_result(...)
            logs = captured_logs()
            assert any(r["message"] == "deal_result_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("divvy_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def settings():
    return DEFAULT_SETTINGS


@pytest.fixture
def two_directors():
    return [
        Director(id="1", name="Alice", split_percent=Decimal("0.5")),
        Director(id="2", name="Bob", split_percent=Decimal("0.5")),
    ]


@pytest.fixture
def three_directors():
    return [
        Director(id="1", name="A", split_percent=Decimal("1") / 3),
        Director(id="2", name="B", split_percent=Decimal("1") / 3),
        Director(id="3", name="C", split_percent=Decimal("1") / 3),
    ]


@pytest.fixture
def standard_deal():
    """5000.00 including VAT, VAT registered, no expenses."""
    return DealInput(deal_amount=Decimal("5000.00"))


# =============================================================================
# Storage fixtures
# =============================================================================


@pytest.fixture
def store():
    """PlannerStore on a fresh in-memory SQLite database."""
    engine = init_engine_from_url("sqlite://")
    create_tables(engine)
    yield PlannerStore(get_session_factory())
    drop_tables(engine)
    reset_engine()
