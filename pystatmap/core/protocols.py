"""
Core protocols for PyStatMap.

Structural interfaces that implementations must satisfy. Protocol
(structural typing) rather than ABC lets callers inject their own
objects, e.g. a stub Distribution in tests, without subclassing.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Capability-driven: use supports() for optional features
"""

from typing import Protocol, TypeVar, Any, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, NDArray

P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class Distribution(Protocol):
    """
    Numeric distribution functions consumed by the output transform.

    The statistic kernels never touch this interface; it is only needed
    when a z-score or p-value is requested. All methods are vectorized
    over their first argument and must propagate NaN.
    """

    def supports(self, capability: str) -> bool:
        """
        Report which functions this object can evaluate.

        Capability strings come from pystatmap.core.capabilities
        (CAPABILITY_T_CDF, CAPABILITY_F_CDF, CAPABILITY_NORM_PPF).
        """
        ...

    def t_cdf(self, x: ArrayLike, df: float) -> NDArray[np.floating[Any]]:
        """Student t CDF with df degrees of freedom."""
        ...

    def f_cdf(
        self, x: ArrayLike, dfn: float, dfd: float
    ) -> NDArray[np.floating[Any]]:
        """Fisher F CDF with (dfn, dfd) degrees of freedom."""
        ...

    def norm_ppf(self, p: ArrayLike) -> NDArray[np.floating[Any]]:
        """Inverse of the standard normal CDF."""
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend takes a validated design and produces a Result around
    a parameter payload. Backends are stateless apart from device
    configuration fixed at construction time.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}', e.g. 'cpu_closed_form'.
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the statistical computation.

        Args:
            design: Validated design object

        Returns:
            Result envelope containing parameter payload and metadata
        """
        ...
