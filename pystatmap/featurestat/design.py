"""
StatDesign: tagged union for feature-wise test inputs.

The `test_type` tag selects one of four variants:

    t_one_sample   one-sample t against zero (or paired differences)
    t_two_sample   independent two-sample t, equal variances
    f_between      one-way ANOVA, optionally with a single contrast
    f_within       one-way repeated-measures ANOVA

Labels are classified exactly once, in the factory, and every variant
only stores validated arrays. Immutable after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pystatmap.core.exceptions import (
    ClassCountError,
    ContrastError,
    DesignError,
    UnsupportedFeatureError,
    ValidationError,
)
from pystatmap.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_consistent_length,
    check_finite,
    check_min_samples,
)
from pystatmap.featurestat._common import (
    DESIGN_BETWEEN,
    TEST_TYPES,
    VALID_TESTS,
)
from pystatmap.featurestat._labels import (
    LabelDesign,
    classify,
    reduce_to_differences,
)


def _to_samples(samples: ArrayLike) -> NDArray[np.floating[Any]]:
    """Observation matrix as float N x M; a 1D vector is one feature."""
    arr = check_array(samples, "samples")
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    check_2d(arr, "samples")
    check_min_samples(arr, 2, "samples")
    return arr


def _validate_contrast(
    contrast: ArrayLike,
    labels: LabelDesign,
) -> NDArray[np.floating[Any]]:
    """
    Check that a contrast is constant within each group and that the
    per-group values sum to zero.
    """
    c = check_array(contrast, "contrast")
    if c.ndim == 2 and 1 in c.shape:
        c = c.ravel()
    check_1d(c, "contrast")
    check_finite(c, "contrast")
    check_consistent_length(c, labels.groups, names=("contrast", "groups"))

    level_values = np.empty(labels.n_groups, dtype=np.float64)
    for k in range(labels.n_groups):
        ck = c[labels.groups == k]
        if not np.all(ck == ck[0]):
            level = labels.group_levels[k]
            raise ContrastError(
                f"contrast has different values in level {level!r}",
                level=level,
            )
        level_values[k] = ck[0]

    contrast_sum = float(np.sum(level_values))
    if contrast_sum != 0:
        raise ContrastError(
            f"contrast has sum {contrast_sum:g}, should be 0",
            contrast_sum=contrast_sum,
        )
    if not np.any(level_values):
        raise ContrastError("contrast is zero for every level", contrast_sum=0.0)

    return c


@dataclass(frozen=True)
class StatDesign:
    """
    Validated input for one feature-wise test.

    Do not construct directly; use StatDesign.for_test().
    """
    test_type: str
    test: str
    samples: NDArray[np.floating[Any]]
    groups: NDArray[np.intp]
    replicates: NDArray[np.intp]
    n_groups: int
    n_replicates: int
    design_type: str
    labels: LabelDesign
    contrast: NDArray[np.floating[Any]] | None = None
    paired: bool = False

    @property
    def stat_name(self) -> str:
        return TEST_TYPES[self.test_type][0]

    @property
    def cdf_family(self) -> str:
        return TEST_TYPES[self.test_type][1]

    @property
    def n_samples(self) -> int:
        return self.samples.shape[0]

    @property
    def n_features(self) -> int:
        return self.samples.shape[1]

    @classmethod
    def for_test(
        cls,
        samples: ArrayLike,
        groups: ArrayLike | None = None,
        replicates: ArrayLike | None = None,
        *,
        test: str = "t",
        contrast: ArrayLike | None = None,
    ) -> StatDesign:
        """
        Build the design for one of the tests in VALID_TESTS.

        Args:
            samples: N x M observations (1D is read as a single feature)
            groups: Per-row group labels. Default: one group.
            replicates: Per-row replicate labels. Default: every row is
                its own replicate (between-subjects).
            test: 't' (one-sample, or paired when 2 groups), 't2'
                (two-sample) or 'F' (one-way ANOVA)
            contrast: Per-row contrast weights, 'F' on a between design only

        Raises:
            ValidationError: Unknown test or malformed arrays
            DesignError: Labels form no valid design, or the design does
                not suit the test
            ClassCountError: Wrong number of groups for the test
            ContrastError: Invalid contrast
            UnsupportedFeatureError: Contrast outside a between-subjects F
        """
        if test not in VALID_TESTS:
            raise ValidationError(
                f"test must be one of {VALID_TESTS}, got {test!r}"
            )

        x = _to_samples(samples)
        n = x.shape[0]
        if groups is None:
            groups = np.ones(n, dtype=np.intp)
        if replicates is None:
            replicates = np.arange(n)

        labels = classify(groups, replicates)
        check_consistent_length(x, labels.groups, names=("samples", "groups"))

        if contrast is not None and test != "F":
            raise UnsupportedFeatureError(
                f"contrast is only supported for the F stat, not {test!r}",
                feature="contrast",
            )

        if test == "t":
            return cls._one_sample(x, labels)
        if test == "t2":
            return cls._two_sample(x, labels)
        return cls._anova(x, labels, contrast)

    # --- Variant builders ---

    @classmethod
    def _one_sample(cls, x: NDArray, labels: LabelDesign) -> StatDesign:
        paired = False
        n_groups = labels.n_groups
        if n_groups == 2:
            x = reduce_to_differences(x, labels)
            paired = True
            n_groups = 1

        if n_groups != 1:
            raise ClassCountError(
                f"t stat: expected 1 or 2 classes, found {labels.n_groups}",
                test="t",
                expected="1 or 2",
                found=labels.n_groups,
            )

        n = x.shape[0]
        return cls(
            test_type="t_one_sample",
            test="t",
            samples=x,
            groups=np.zeros(n, dtype=np.intp),
            replicates=np.arange(n, dtype=np.intp),
            n_groups=1,
            n_replicates=n,
            design_type=labels.design_type,
            labels=labels,
            paired=paired,
        )

    @classmethod
    def _two_sample(cls, x: NDArray, labels: LabelDesign) -> StatDesign:
        if labels.n_groups != 2:
            raise ClassCountError(
                f"t2 stat: expected 2 classes, found {labels.n_groups}",
                test="t2",
                expected="2",
                found=labels.n_groups,
            )
        if labels.design_type != DESIGN_BETWEEN:
            raise DesignError(
                "t2 stat: every replicate must be unique (independent samples); "
                "use the t stat for paired data",
                n_samples=labels.n_samples,
                n_groups=labels.n_groups,
                n_replicates=labels.n_replicates,
            )
        return cls(
            test_type="t_two_sample",
            test="t2",
            samples=x,
            groups=labels.groups,
            replicates=labels.replicates,
            n_groups=2,
            n_replicates=labels.n_replicates,
            design_type=labels.design_type,
            labels=labels,
        )

    @classmethod
    def _anova(
        cls,
        x: NDArray,
        labels: LabelDesign,
        contrast: ArrayLike | None,
    ) -> StatDesign:
        if labels.n_groups < 2:
            raise ClassCountError(
                f"F stat: expected >=2 classes, found {labels.n_groups}",
                test="F",
                expected=">=2",
                found=labels.n_groups,
            )

        if labels.design_type == DESIGN_BETWEEN:
            test_type = "f_between"
            c = None if contrast is None else _validate_contrast(contrast, labels)
        else:
            if contrast is not None:
                raise UnsupportedFeatureError(
                    "contrast is not supported for within-subject design",
                    feature="contrast",
                )
            test_type = "f_within"
            c = None

        return cls(
            test_type=test_type,
            test="F",
            samples=x,
            groups=labels.groups,
            replicates=labels.replicates,
            n_groups=labels.n_groups,
            n_replicates=labels.n_replicates,
            design_type=labels.design_type,
            labels=labels,
            contrast=c,
        )
