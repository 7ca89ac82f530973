"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from borrowkit import Resources, ResourceSettings


@pytest.fixture
def resources():
    """Fresh Resources container with default settings."""
    return Resources(settings=ResourceSettings())


@pytest.fixture
def tracking_resources():
    """Resources container that records borrow sites."""
    return Resources(settings=ResourceSettings(track_borrow_sites=True))
