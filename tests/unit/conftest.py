"""
Unit test fixtures. Services run against the in-memory DB from the root
conftest; pure calculator tests need no fixtures at all.
"""
from datetime import datetime

import pytest


@pytest.fixture
def day_one():
    """A fixed 'now' so streak and timestamp assertions are deterministic."""
    return datetime(2025, 3, 10, 9, 0, 0)
