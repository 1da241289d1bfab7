"""
Root pytest configuration for TD(lambda) random walk tests.

This module provides shared configuration, markers and fixtures for all
tests.
"""

from typing import List

import pytest

from random_walk.states import Walk
from random_walk.vector import StateVector


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests that train on the full reference data"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow end-to-end tests"
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless explicitly requested."""
    if not config.getoption("--run-slow"):
        skip_slow = pytest.mark.skip(
            reason="slow tests skipped (use --run-slow to enable)"
        )
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


@pytest.fixture
def make_weights():
    """Build a weights vector from the five transient values.

    Returns:
        Callable mapping 5 transient values to pinned 7-component weights
    """
    def _make_weights(transient: List[float]) -> StateVector:
        assert len(transient) == 5, "Need one value per transient state"
        return StateVector([0.0] + list(transient) + [1.0])
    return _make_weights


@pytest.fixture
def half_weights(make_weights) -> StateVector:
    """Weights with every transient state at 0.5."""
    return make_weights([0.5] * 5)


@pytest.fixture
def right_walk() -> Walk:
    """Walk straight to the high terminal."""
    return (3, 4, 5, 6)


@pytest.fixture
def left_walk() -> Walk:
    """Walk straight to the low terminal."""
    return (3, 2, 1, 0)
