"""
Multiple testing correction for feature-wise p-values.

A statistic map over thousands of features needs family-wise or
false-discovery-rate control before anything is called significant.
Results match R's p.adjust() for the methods provided.

    bonferroni, holm, hochberg  family-wise error rate
    BH (alias fdr), BY          false discovery rate
    none                        identity
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray, ArrayLike

from pystatmap.core.exceptions import ValidationError

VALID_METHODS = ("holm", "hochberg", "bonferroni", "BH", "BY", "fdr", "none")


def p_adjust(
    p: ArrayLike,
    method: str = "holm",
    n: int | None = None,
) -> NDArray[np.floating]:
    """
    Adjust p-values for multiple comparisons.

    Parameters
    ----------
    p : array-like
        p-values, e.g. StatSolution.values for 'Pval' output.
    method : str
        One of VALID_METHODS. Default "holm".
    n : int or None
        Number of comparisons. Default: number of non-NaN p-values.
        May be larger when some tests were not run.

    Returns
    -------
    ndarray
        Adjusted p-values in the input order, clipped to [0, 1].
        NaN inputs stay NaN and do not count as comparisons.
    """
    if method not in VALID_METHODS:
        raise ValidationError(
            f"method must be one of {VALID_METHODS}, got {method!r}"
        )

    p_arr = np.asarray(p, dtype=np.float64).ravel()
    result = p_arr.copy()

    valid = ~np.isnan(p_arr)
    pv = p_arr[valid]
    lp = len(pv)

    if n is None:
        n = lp
    elif n < lp:
        raise ValidationError(
            f"n ({n}) must be >= number of non-NaN p-values ({lp})"
        )

    if lp == 0 or method == "none":
        return result

    if method == "bonferroni":
        adjusted = pv * n
    elif method == "holm":
        # ascending rank i gets factor n - i + 1
        adjusted = _step_down(pv, np.arange(n, n - lp, -1, dtype=np.float64))
    elif method == "hochberg":
        adjusted = _step_up(pv, np.arange(n - lp + 1, n + 1, dtype=np.float64))
    elif method in ("BH", "fdr"):
        adjusted = _step_up(pv, n / np.arange(lp, 0, -1, dtype=np.float64))
    else:  # BY
        harmonic = np.sum(1.0 / np.arange(1, n + 1, dtype=np.float64))
        adjusted = _step_up(
            pv, harmonic * n / np.arange(lp, 0, -1, dtype=np.float64)
        )

    result[valid] = np.clip(adjusted, 0.0, 1.0)
    return result


def _step_down(pv: NDArray, factors: NDArray) -> NDArray:
    """Scale ascending p-values by factors, then enforce a running max."""
    order = np.argsort(pv, kind="stable")
    scaled = np.maximum.accumulate(pv[order] * factors)
    out = np.empty_like(pv)
    out[order] = scaled
    return out


def _step_up(pv: NDArray, factors: NDArray) -> NDArray:
    """Scale descending p-values by factors, then enforce a running min."""
    order = np.argsort(pv, kind="stable")[::-1]
    scaled = np.minimum.accumulate(pv[order] * factors)
    out = np.empty_like(pv)
    out[order] = scaled
    return out
