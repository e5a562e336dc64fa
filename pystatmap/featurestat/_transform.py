"""
Statistic -> probability transform.

The raw statistic is first mapped to a left-tailed probability with the
CDF of its reference distribution; that probability is then either
converted to a z-score or to a p-value with the requested tail.

Default tails follow the usual conventions: 'right' for F (the one-way
ANOVA test is one-sided), 'both' for t.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pystatmap.core.capabilities import (
    CAPABILITY_F_CDF,
    CAPABILITY_NORM_PPF,
    CAPABILITY_T_CDF,
)
from pystatmap.core.exceptions import CapabilityError, InvalidOutputError
from pystatmap.core.protocols import Distribution
from pystatmap.featurestat._common import VALID_OUTPUTS, VALID_TAILS


def resolve_output(
    output: str | None,
    test: str,
    tail: str | None = None,
) -> tuple[str | None, str | None]:
    """
    Normalize an output request.

    Args:
        output: None (raw statistic), 'z', 'p', 'left', 'right' or 'both'
        test: 't', 't2' or 'F'; selects the default tail for 'p'
        tail: Explicit tail; implies p-value output

    Returns:
        (output_kind, tail) where output_kind is None, 'z' or 'p'

    Raises:
        InvalidOutputError: Unknown output or tail, or a conflicting pair
    """
    if output == "":
        output = None

    if output is not None and output not in VALID_OUTPUTS:
        raise InvalidOutputError(
            f"illegal output type {output!r}, expected one of {VALID_OUTPUTS}",
            requested=output,
        )
    if tail is not None and tail not in VALID_TAILS:
        raise InvalidOutputError(
            f"illegal tail {tail!r}, expected one of {VALID_TAILS}",
            requested=tail,
        )

    if output in VALID_TAILS:
        if tail is not None and tail != output:
            raise InvalidOutputError(
                f"output {output!r} conflicts with tail {tail!r}",
                requested=(output, tail),
            )
        return "p", output

    if tail is not None:
        if output == "z":
            raise InvalidOutputError(
                "a tail cannot be combined with z-score output",
                requested=(output, tail),
            )
        return "p", tail

    if output == "p":
        return "p", "right" if test == "F" else "both"
    if output == "z":
        return "z", None
    return None, None


def _require(distribution: Distribution, capability: str) -> None:
    supports = getattr(distribution, "supports", None)
    if supports is None or not supports(capability):
        raise CapabilityError(
            f"distribution {distribution!r} does not provide {capability!r}",
            capability=capability,
        )


def to_probability(
    stat: NDArray[np.floating[Any]],
    df: tuple[int, ...],
    family: str,
    distribution: Distribution,
) -> NDArray[np.floating[Any]]:
    """
    Left-tailed probability P(X <= stat) under the reference distribution.

    Args:
        stat: Statistic per feature
        df: (df,) for family 't', (df1, df2) for family 'F'
        family: 't' or 'F'
        distribution: Provider of the CDFs
    """
    if family == "t":
        _require(distribution, CAPABILITY_T_CDF)
        (df1,) = df
        p = distribution.t_cdf(stat, df1)
    elif family == "F":
        _require(distribution, CAPABILITY_F_CDF)
        df1, df2 = df
        p = distribution.f_cdf(stat, df1, df2)
    else:
        raise ValueError(f"Unknown CDF family: {family!r}")
    return np.asarray(p, dtype=np.float64)


def apply_tail(p_left: NDArray[np.floating[Any]], tail: str) -> NDArray[np.floating[Any]]:
    """
    p-value for the requested tail from a left-tailed probability.

    'both' takes whichever tail is more extreme: 2 * min(p, 1 - p).
    """
    if tail == "left":
        return p_left
    if tail == "right":
        return 1.0 - p_left
    if tail == "both":
        return 2.0 * np.minimum(p_left, 1.0 - p_left)
    raise InvalidOutputError(f"illegal tail {tail!r}", requested=tail)


def to_zscore(
    p_left: NDArray[np.floating[Any]],
    distribution: Distribution,
) -> NDArray[np.floating[Any]]:
    """z-score with the same left-tailed probability."""
    _require(distribution, CAPABILITY_NORM_PPF)
    return np.asarray(distribution.norm_ppf(p_left), dtype=np.float64)


def transform_statistic(
    stat: NDArray[np.floating[Any]],
    df: tuple[int, ...],
    family: str,
    output_kind: str,
    tail: str | None,
    distribution: Distribution,
) -> NDArray[np.floating[Any]]:
    """
    Apply the full transform for output_kind 'z' or 'p'.
    """
    p_left = to_probability(stat, df, family, distribution)
    if output_kind == "z":
        return to_zscore(p_left, distribution)
    if output_kind == "p":
        return apply_tail(p_left, tail)
    raise InvalidOutputError(
        f"illegal output type {output_kind!r}", requested=output_kind,
    )
