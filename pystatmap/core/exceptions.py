"""
Exception hierarchy for PyStatMap.

All exceptions inherit from PyStatMapError to allow catching any
library-specific error.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Nothing is caught internally; every error reaches the caller
"""


class PyStatMapError(Exception):
    """Base exception for all PyStatMap errors."""
    pass


class ValidationError(PyStatMapError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent lengths.
    """
    pass


class DesignError(ValidationError):
    """
    Group/replicate labels describe neither a between- nor a
    within-subjects design.

    Attributes:
        n_samples: Number of rows in the observation matrix
        n_groups: Number of distinct group levels
        n_replicates: Number of distinct replicate units
    """

    def __init__(
        self,
        message: str,
        n_samples: int | None = None,
        n_groups: int | None = None,
        n_replicates: int | None = None,
    ):
        super().__init__(message)
        self.n_samples = n_samples
        self.n_groups = n_groups
        self.n_replicates = n_replicates


class ClassCountError(ValidationError):
    """
    Number of group levels does not fit the requested test.

    Attributes:
        test: Requested test ('t', 't2' or 'F')
        expected: Human-readable requirement, e.g. '1 or 2', '>=2'
        found: Number of levels actually present
    """

    def __init__(self, message: str, test: str, expected: str, found: int):
        super().__init__(message)
        self.test = test
        self.expected = expected
        self.found = found


class ContrastError(ValidationError):
    """
    Contrast vector is not a valid single-df contrast.

    Raised when the contrast varies within a group level or when the
    per-level contrast values do not sum to zero.

    Attributes:
        level: Offending group level, or None for the sum check
        contrast_sum: Sum of per-level contrast values, if computed
    """

    def __init__(
        self,
        message: str,
        level: object = None,
        contrast_sum: float | None = None,
    ):
        super().__init__(message)
        self.level = level
        self.contrast_sum = contrast_sum


class UnsupportedFeatureError(PyStatMapError):
    """
    Requested feature is not available for this design.

    Attributes:
        feature: Name of the unsupported feature (e.g. 'contrast')
    """

    def __init__(self, message: str, feature: str):
        super().__init__(message)
        self.feature = feature


class InvalidOutputError(ValidationError):
    """
    Requested output kind or tail is not recognised.

    Attributes:
        requested: The offending output request
    """

    def __init__(self, message: str, requested: object):
        super().__init__(message)
        self.requested = requested


class CapabilityError(PyStatMapError):
    """
    An injected collaborator lacks a required capability.

    Raised when a Distribution cannot evaluate the CDF or inverse normal
    CDF needed for the requested output.

    Attributes:
        capability: The missing capability string
    """

    def __init__(self, message: str, capability: str):
        super().__init__(message)
        self.capability = capability
