"""
Design classification from group and replicate labels.

Group labels say which condition a row belongs to; replicate labels say
which unit (subject, block, run) produced it. Together they determine
whether the observations are independent or repeated measures:

    between   every replicate unit contributes exactly one row
    within    every replicate unit contributes exactly one row per group

Anything else is rejected here, before any statistic is computed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pystatmap.core.exceptions import ClassCountError, DesignError
from pystatmap.core.validation import check_consistent_length, check_labels
from pystatmap.featurestat._common import DESIGN_BETWEEN, DESIGN_WITHIN


@dataclass(frozen=True)
class LabelDesign:
    """
    Normalized labels and the detected design.

    groups and replicates are dense integer codes 0..K-1 and 0..R-1,
    assigned in sorted order of the original label values, which are
    kept in group_levels and replicate_levels.
    """
    groups: NDArray[np.intp]
    n_groups: int
    replicates: NDArray[np.intp]
    n_replicates: int
    design_type: str
    group_levels: NDArray
    replicate_levels: NDArray

    @property
    def n_samples(self) -> int:
        return len(self.groups)


def normalize_labels(labels: ArrayLike, name: str) -> tuple[NDArray[np.intp], NDArray]:
    """
    Map labels to dense integer codes.

    Returns:
        (codes, levels) such that levels[codes] reproduces the labels
    """
    arr = check_labels(labels, name)
    levels, codes = np.unique(arr, return_inverse=True)
    return codes.reshape(-1).astype(np.intp), levels


def classify(groups: ArrayLike, replicates: ArrayLike) -> LabelDesign:
    """
    Classify the observation design.

    Args:
        groups: Per-row group (condition) labels
        replicates: Per-row replicate (subject/block) labels

    Returns:
        LabelDesign with codes, counts and design_type

    Raises:
        DesignError: If the labels form neither a between- nor a
            within-subjects design
    """
    g, group_levels = normalize_labels(groups, "groups")
    r, replicate_levels = normalize_labels(replicates, "replicates")
    check_consistent_length(g, r, names=("groups", "replicates"))

    n = len(g)
    n_groups = len(group_levels)
    n_replicates = len(replicate_levels)

    if n_replicates == n:
        design_type = DESIGN_BETWEEN
    else:
        cells = g * n_replicates + r
        balanced = n == n_groups * n_replicates
        if balanced and len(np.unique(cells)) == n:
            design_type = DESIGN_WITHIN
        else:
            raise DesignError(
                "Either all replicates must be unique, or each replicate must "
                "contain every group exactly once "
                f"({n} samples, {n_groups} groups, {n_replicates} replicates)",
                n_samples=n,
                n_groups=n_groups,
                n_replicates=n_replicates,
            )

    return LabelDesign(
        groups=g,
        n_groups=n_groups,
        replicates=r,
        n_replicates=n_replicates,
        design_type=design_type,
        group_levels=group_levels,
        replicate_levels=replicate_levels,
    )


def reduce_to_differences(
    samples: NDArray[np.floating[Any]],
    labels: LabelDesign,
) -> NDArray[np.floating[Any]]:
    """
    Paired differences, one row per replicate unit.

    Row j is samples[group 0 of replicate j] - samples[group 1 of
    replicate j], so a paired two-condition test becomes a one-sample
    test on the result.

    Raises:
        ClassCountError: If there are not exactly two groups
        DesignError: If the design is not within-subjects
    """
    if labels.n_groups != 2:
        raise ClassCountError(
            f"paired differences need exactly 2 groups, found {labels.n_groups}",
            test="t",
            expected="2",
            found=labels.n_groups,
        )
    if labels.design_type != DESIGN_WITHIN:
        raise DesignError(
            "t stat with 2 groups computes paired differences: each replicate "
            "must contain both groups",
            n_samples=labels.n_samples,
            n_groups=labels.n_groups,
            n_replicates=labels.n_replicates,
        )

    rows = np.empty((2, labels.n_replicates), dtype=np.intp)
    rows[labels.groups, labels.replicates] = np.arange(labels.n_samples)
    return samples[rows[0]] - samples[rows[1]]
