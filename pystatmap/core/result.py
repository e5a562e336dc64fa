"""
Generic result container for all PyStatMap computations.

Every backend returns a Result envelope around its domain payload, so
timing, diagnostics and backend provenance are reported the same way
regardless of which statistic was computed.

Design decisions:
    - Generic over parameter payload P
    - info dict for loose metadata (test type, design type, kernel name)
    - timing is optional (unit tests can leave it out)
    - Immutable (frozen=True)
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (statistic vector, df, labels)
        info: Structured metadata (test type, design type, ...)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=RawStatParams(values=t, df=(11,), ...),
        ...     info={'test_type': 't_one_sample'},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_closed_form',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
