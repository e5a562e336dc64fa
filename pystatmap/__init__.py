"""
PyStatMap: feature-wise statistics for wide observation matrices.

Computes classical t and F statistics independently for thousands of
feature columns (channels, voxels, genes) using closed-form, vectorized
sums of squares, with optional GPU acceleration.

Submodules:
    core: exceptions, Result envelope, DataSource, validation, compute utilities
    featurestat: design classification, statistic kernels, p/z transform
"""

__version__ = "0.1.0"

from pystatmap import core
from pystatmap import featurestat
from pystatmap.core.datasource import DataSource
from pystatmap.featurestat import compute_statistic, p_adjust

__all__ = [
    "__version__",
    "core",
    "featurestat",
    "DataSource",
    "compute_statistic",
    "p_adjust",
]
