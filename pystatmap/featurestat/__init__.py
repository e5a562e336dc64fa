"""
Feature-wise hypothesis-test statistics.

Computes one-sample t, two-sample t and one-way F (between- or
within-subjects) statistics for every column of an observation matrix
in a single vectorized pass, optionally converted to z-scores or
p-values.

Public API:
    compute_statistic(samples, groups, replicates, test, output) -> StatSolution
    p_adjust(p, method)           - multiple testing correction
    classify(groups, replicates)  - between / within design detection
    StatDesign                    - validated test input
    ScipyDistribution             - default CDF provider
"""

from pystatmap.featurestat.solvers import compute_statistic
from pystatmap.featurestat._p_adjust import p_adjust
from pystatmap.featurestat._labels import LabelDesign, classify, reduce_to_differences
from pystatmap.featurestat.design import StatDesign
from pystatmap.featurestat.distributions import ScipyDistribution
from pystatmap.featurestat._common import StatParams
from pystatmap.featurestat.solution import StatSolution

__all__ = [
    "compute_statistic",
    "p_adjust",
    "classify",
    "reduce_to_differences",
    "LabelDesign",
    "StatDesign",
    "ScipyDistribution",
    "StatParams",
    "StatSolution",
]
