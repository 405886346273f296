"""Shared test fixtures for the scheduling agent test suite."""

from __future__ import annotations

import os
from datetime import date

import pytest

TODAY = date(2024, 1, 14)


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any test module imports, so config.py reads
    predictable values.
    """
    os.environ.setdefault("SCHEDULING_BACKEND", "memory")
    os.environ["METRICS_ENABLED"] = "false"
    os.environ.pop("SCHEDULING_API_TOKEN", None)


@pytest.fixture
def stub_client():
    """A stub backend offering one open 09:00–09:45 slot."""
    from stubs import StubSchedulingClient, make_slot

    return StubSchedulingClient([make_slot("09:00", "09:45")])


@pytest.fixture
def today():
    """Fixed clock for relative dates: "today" is 2024-01-14."""
    return lambda: TODAY
