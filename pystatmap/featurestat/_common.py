"""
Common constants and data types for feature-wise statistics.

Contains the frozen parameter payloads that go inside Result[P]
envelopes. Each payload is a pure data container.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


VALID_TESTS = ("t", "t2", "F")
VALID_OUTPUTS = ("z", "p", "left", "right", "both")
VALID_TAILS = ("left", "right", "both")

DESIGN_BETWEEN = "between"
DESIGN_WITHIN = "within"

# test_type tag -> (statistic name, CDF family)
TEST_TYPES = {
    "t_one_sample": ("Ttest", "t"),
    "t_two_sample": ("Ttest", "t"),
    "f_between": ("Ftest", "F"),
    "f_within": ("Ftest", "F"),
}

ZSCORE_LABEL = "Zscore"
PVAL_LABEL = "Pval"


@dataclass(frozen=True)
class RawStatParams:
    """
    Backend output: one statistic per feature and its degrees of freedom.

    df has one entry for the t family and two for the F family.
    """
    values: NDArray[np.floating[Any]]
    df: tuple[int, ...]
    stat_name: str
    cdf_family: str


@dataclass(frozen=True)
class StatParams:
    """
    Parameter payload returned to the user.

    Attributes
    ----------
    values : ndarray
        Statistic, z-score or p-value per feature, shape (M,).
    df : tuple of int or None
        Degrees of freedom; None once the statistic has been transformed.
    label : str
        'Ttest(df)', 'Ftest(df1,df2)', 'Zscore' or 'Pval'.
    stat_name : str
        Family of the raw statistic, 'Ttest' or 'Ftest'.
    output : str or None
        None for the raw statistic, otherwise 'z' or 'p'.
    tail : str or None
        'left', 'right' or 'both' when output == 'p'.
    test_type : str
        One of the TEST_TYPES tags.
    design_type : str
        'between' or 'within'.
    n_samples : int
        Rows entering the statistic (replicate units for paired data).
    n_features : int
        Number of feature columns.
    n_groups : int
        Number of group levels in the input labels.
    n_replicates : int
        Number of replicate units in the input labels.
    group_levels : tuple
        Original group label values, in code order.
    """
    values: NDArray[np.floating[Any]]
    df: tuple[int, ...] | None
    label: str
    stat_name: str
    output: str | None
    tail: str | None
    test_type: str
    design_type: str
    n_samples: int
    n_features: int
    n_groups: int
    n_replicates: int
    group_levels: tuple[Any, ...]
