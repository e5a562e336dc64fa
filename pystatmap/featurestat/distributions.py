"""
Distribution implementations for the output transform.

ScipyDistribution is the default. Any object satisfying the
pystatmap.core.protocols.Distribution protocol can be passed instead,
e.g. a stub in tests or a faster approximation for very large maps.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import stats as sp_stats

from pystatmap.core.capabilities import DISTRIBUTION_CAPABILITIES
from pystatmap.core.protocols import Distribution


class ScipyDistribution:
    """Distribution functions backed by scipy.stats."""

    def supports(self, capability: str) -> bool:
        return capability in DISTRIBUTION_CAPABILITIES

    def t_cdf(self, x: ArrayLike, df: float) -> NDArray[np.floating[Any]]:
        return np.asarray(sp_stats.t.cdf(x, df), dtype=np.float64)

    def f_cdf(self, x: ArrayLike, dfn: float, dfd: float) -> NDArray[np.floating[Any]]:
        return np.asarray(sp_stats.f.cdf(x, dfn, dfd), dtype=np.float64)

    def norm_ppf(self, p: ArrayLike) -> NDArray[np.floating[Any]]:
        return np.asarray(sp_stats.norm.ppf(p), dtype=np.float64)

    def __repr__(self) -> str:
        return "ScipyDistribution()"


def resolve_distribution(distribution: Distribution | None = None) -> Distribution:
    """Return the injected distribution, or the scipy default."""
    if distribution is None:
        return ScipyDistribution()
    return distribution
