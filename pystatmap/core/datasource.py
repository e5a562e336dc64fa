"""
Dataset container for PyStatMap.

A DataSource holds an observation matrix together with three attribute
stores:

    sa  sample attributes, one value per row (groups, replicates, contrast)
    fa  feature attributes, one value per column (e.g. channel names)
    a   dataset attributes, opaque key-value metadata

The statistic pipeline reads samples and sample attributes; fa and a are
carried to the output untouched.

Usage:
    from pystatmap.core.datasource import DataSource

    ds = DataSource.from_arrays(samples, groups=cond, replicates=subj)
    ds = DataSource.from_dataframe(df, feature_columns=['c1', 'c2'],
                                   group_column='condition')
    ds.sa['groups']
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Sequence, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pystatmap.core.exceptions import DimensionError, ValidationError
from pystatmap.core.capabilities import (
    CAPABILITY_MATERIALIZED,
)
from pystatmap.core.validation import check_array, check_2d

if TYPE_CHECKING:
    import pandas as pd

@dataclass
class DataSource:
    """
    Observation matrix plus sample, feature and dataset attributes.

    Construct via factory classmethods, not directly.
    """
    _samples: Any
    _sa: dict[str, Any]
    _fa: dict[str, Any]
    _a: dict[str, Any]
    _capabilities: frozenset[str]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Access ===

    @property
    def samples(self) -> Any:
        """N x M observation matrix."""
        return self._samples

    @property
    def sa(self) -> dict[str, Any]:
        """Sample attributes (one entry per row)."""
        return self._sa

    @property
    def fa(self) -> dict[str, Any]:
        """Feature attributes (one entry per column)."""
        return self._fa

    @property
    def a(self) -> dict[str, Any]:
        """Dataset attributes."""
        return self._a

    def sample_attribute(self, key: str) -> Any:
        """
        Return a sample attribute, or None if it is absent.
        """
        return self._sa.get(key)

    # === Properties ===

    @property
    def n_observations(self) -> int:
        """Number of rows."""
        return int(self._samples.shape[0])

    @property
    def n_features(self) -> int:
        """Number of columns."""
        return int(self._samples.shape[1])

    @property
    def metadata(self) -> dict[str, Any]:
        """Container metadata (source, shape)."""
        return self._metadata.copy()

    def supports(self, capability: str) -> bool:
        """
        Check if this DataSource supports a capability.

        Note:
            Unknown capabilities return False, never raise.
        """
        return capability in self._capabilities

    # === Factory Methods ===

    @classmethod
    def from_arrays(
        cls,
        samples: ArrayLike,
        *,
        groups: ArrayLike | None = None,
        replicates: ArrayLike | None = None,
        contrast: ArrayLike | None = None,
        sa: dict[str, ArrayLike] | None = None,
        fa: dict[str, Any] | None = None,
        a: dict[str, Any] | None = None,
    ) -> DataSource:
        """
        Construct from a numpy-compatible observation matrix.

        Args:
            samples: N x M observations (a 1D vector is read as N x 1)
            groups: Per-row group labels, stored as sa['groups']
            replicates: Per-row replicate labels, stored as sa['replicates']
            contrast: Per-row contrast weights, stored as sa['contrast']
            sa: Further sample attributes
            fa: Feature attributes; each value must have M entries
            a: Dataset attributes, copied as-is

        Returns:
            DataSource
        """
        arr = check_array(samples, "samples")
        if arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        check_2d(arr, "samples")
        n, m = arr.shape

        sample_attrs: dict[str, Any] = {}
        for key, value in (sa or {}).items():
            sample_attrs[key] = np.asarray(value)
        for key, value in (
            ('groups', groups), ('replicates', replicates), ('contrast', contrast)
        ):
            if value is not None:
                sample_attrs[key] = np.asarray(value)

        for key, value in sample_attrs.items():
            if len(value) != n:
                raise DimensionError(
                    f"sa[{key!r}]: length {len(value)} doesn't match {n} samples"
                )

        feature_attrs = dict(fa or {})
        for key, value in feature_attrs.items():
            if len(value) != m:
                raise DimensionError(
                    f"fa[{key!r}]: length {len(value)} doesn't match {m} features"
                )

        return cls(
            _samples=arr,
            _sa=sample_attrs,
            _fa=feature_attrs,
            _a=dict(a or {}),
            _capabilities=frozenset({CAPABILITY_MATERIALIZED}),
            _metadata={'n_observations': n, 'n_features': m, 'source': 'arrays'},
        )

    @classmethod
    def from_dataframe(
        cls,
        df: 'pd.DataFrame',
        *,
        feature_columns: Sequence[str],
        group_column: str | None = None,
        replicate_column: str | None = None,
        contrast_column: str | None = None,
        a: dict[str, Any] | None = None,
    ) -> DataSource:
        """
        Construct from a pandas DataFrame with one row per observation.

        The listed feature columns become the observation matrix and their
        names are stored as fa['labels'].
        """
        missing = [
            col for col in (
                *feature_columns, group_column, replicate_column, contrast_column
            )
            if col is not None and col not in df.columns
        ]
        if missing:
            raise ValidationError(
                f"DataFrame has no column(s) {missing}. Available: {list(df.columns)}"
            )
        if len(feature_columns) == 0:
            raise ValidationError("feature_columns: need at least one column")

        samples = df[list(feature_columns)].to_numpy(dtype=np.float64)

        def column(name: str | None) -> NDArray | None:
            return None if name is None else df[name].to_numpy()

        ds = cls.from_arrays(
            samples,
            groups=column(group_column),
            replicates=column(replicate_column),
            contrast=column(contrast_column),
            fa={'labels': list(feature_columns)},
            a=a,
        )
        ds._metadata['source'] = 'dataframe'
        return ds

    def copy_passthrough(self) -> tuple[dict[str, Any], dict[str, Any]]:
        """
        Deep copies of the feature and dataset attribute stores.

        Used when building an output dataset so that it never shares
        mutable state with its input.
        """
        return copy.deepcopy(self._fa), copy.deepcopy(self._a)
