"""
Capability string constants for PyStatMap.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Usage:
    from pystatmap.core.capabilities import CAPABILITY_T_CDF

    if dist.supports(CAPABILITY_T_CDF):
        p = dist.t_cdf(stat, df)
"""

# --- Data sources ---

# Samples are available as a full numpy array in memory
CAPABILITY_MATERIALIZED = 'materialized'

# --- Distributions ---

# Student t cumulative distribution function
CAPABILITY_T_CDF = 't_cdf'

# Fisher F cumulative distribution function
CAPABILITY_F_CDF = 'f_cdf'

# Inverse of the standard normal CDF
CAPABILITY_NORM_PPF = 'norm_ppf'

DISTRIBUTION_CAPABILITIES = frozenset({
    CAPABILITY_T_CDF,
    CAPABILITY_F_CDF,
    CAPABILITY_NORM_PPF,
})

__all__ = [
    'CAPABILITY_MATERIALIZED',
    'CAPABILITY_T_CDF',
    'CAPABILITY_F_CDF',
    'CAPABILITY_NORM_PPF',
    'DISTRIBUTION_CAPABILITIES',
]
