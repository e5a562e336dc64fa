"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def example_samples():
    """
    12 x 3 integer matrix, filled column by column with
    mod(1, 8, 15, ..., 246; 13) - 3.
    """
    return (np.arange(1, 12 * 3 * 7, 7) % 13 - 3).reshape(12, 3, order='F').astype(float)
