"""
Fixtures for feature-wise statistic tests.
"""

import pytest
import numpy as np


@pytest.fixture
def wide_samples(rng):
    """30 x 50 matrix with a shift in the first 10 features."""
    x = rng.standard_normal((30, 50))
    x[:, :10] += 1.0
    return x


@pytest.fixture
def three_groups():
    """Balanced 3-group labels for 30 rows."""
    return np.repeat([1, 2, 3], 10)


@pytest.fixture
def repeated_design(rng):
    """
    8 subjects x 3 conditions in shuffled row order.

    Returns (samples, groups, replicates); each subject has its own
    offset so that removing subject variance matters.
    """
    n_subj, n_cond, n_feat = 8, 3, 6
    groups = np.tile(np.arange(n_cond), n_subj)
    replicates = np.repeat(np.arange(n_subj), n_cond)
    subject_offset = rng.normal(0.0, 3.0, size=(n_subj, 1))
    samples = (
        rng.standard_normal((n_subj * n_cond, n_feat))
        + subject_offset[replicates]
        + 0.5 * groups[:, None]
    )
    order = rng.permutation(n_subj * n_cond)
    return samples[order], groups[order], replicates[order]
