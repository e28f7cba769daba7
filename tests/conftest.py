"""Shared fixtures for proptree tests."""

import pytest


@pytest.fixture
def sample_records():
    """Flat region records: (0 (1 (2 5) 3) (4 6 7))."""
    return [
        {"id": 1, "parent": 0, "name": "Europe"},
        {"id": 2, "parent": 1, "name": "Germany"},
        {"id": 3, "parent": 1, "name": "France"},
        {"id": 4, "parent": 0, "name": "Asia"},
        {"id": 5, "parent": 2, "name": "Berlin"},
        {"id": 6, "parent": 4, "name": "Japan"},
        {"id": 7, "parent": 4, "name": "China"},
    ]
