"""Shared fixtures for the offline unit suite."""

import pytest

from finn_testsuites.ui_testing.framework import retry
from finn_testsuites.unit.fakes import FakeClock


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    """Drive retry/poll delays and deadlines with virtual time."""
    fake = FakeClock()
    monkeypatch.setattr(retry, "_clock", fake)
    monkeypatch.setattr(retry, "_pause", fake.pause)
    return fake
