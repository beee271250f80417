"""Shared fixtures for the LumenPath test suite."""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """A seeded generator so random-sampling tests are repeatable."""
    return np.random.default_rng(12345)
