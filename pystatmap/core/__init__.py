"""
Core infrastructure for PyStatMap.

Shared abstractions used by the domain subpackage.

Key components:
    protocols: DataSource, Distribution, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    datasource: Observation matrix with sample/feature/dataset attributes
    compute: Timing, device detection, tolerance tiers
"""

from pystatmap.core.protocols import Backend, Distribution
from pystatmap.core.result import Result
from pystatmap.core.datasource import DataSource
from pystatmap.core.exceptions import (
    PyStatMapError,
    ValidationError,
    DimensionError,
    DesignError,
    ClassCountError,
    ContrastError,
    UnsupportedFeatureError,
    InvalidOutputError,
    CapabilityError,
)

__all__ = [
    # Protocols
    "Backend",
    "Distribution",
    # Containers
    "Result",
    "DataSource",
    # Exceptions
    "PyStatMapError",
    "ValidationError",
    "DimensionError",
    "DesignError",
    "ClassCountError",
    "ContrastError",
    "UnsupportedFeatureError",
    "InvalidOutputError",
    "CapabilityError",
]
