"""
User-facing solution type for feature-wise statistics.

StatSolution wraps Result[StatParams] together with the feature and
dataset attributes carried over from the input. assemble_solution() is
the single place where the final label, df and output vector are put
together.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pystatmap.core.datasource import DataSource
from pystatmap.core.exceptions import InvalidOutputError
from pystatmap.core.result import Result
from pystatmap.featurestat._common import (
    PVAL_LABEL,
    RawStatParams,
    StatParams,
    ZSCORE_LABEL,
)
from pystatmap.featurestat._p_adjust import p_adjust
from pystatmap.featurestat.design import StatDesign


def format_stat_label(stat_name: str, df: tuple[int, ...]) -> str:
    """'Ttest(11)' or 'Ftest(2,9)'."""
    return f"{stat_name}({','.join(str(d) for d in df)})"


def assemble_solution(
    raw: Result[RawStatParams],
    design: StatDesign,
    values: NDArray[np.floating[Any]],
    output_kind: str | None,
    tail: str | None,
    *,
    timing: dict[str, float] | None = None,
    feature_attributes: dict[str, Any] | None = None,
    dataset_attributes: dict[str, Any] | None = None,
) -> StatSolution:
    """
    Package the output vector with its label and pass-through metadata.

    Raw statistics keep their degrees of freedom and are labelled
    'Ttest(df)' / 'Ftest(df1,df2)'. Transformed output drops df and is
    labelled 'Zscore' or 'Pval'.
    """
    params = raw.params
    if output_kind is None:
        df = params.df
        label = format_stat_label(params.stat_name, df)
    else:
        df = None
        label = ZSCORE_LABEL if output_kind == "z" else PVAL_LABEL

    out = np.array(values, dtype=np.float64).reshape(-1)
    out.flags.writeable = False

    stat_params = StatParams(
        values=out,
        df=df,
        label=label,
        stat_name=params.stat_name,
        output=output_kind,
        tail=tail,
        test_type=design.test_type,
        design_type=design.design_type,
        n_samples=design.n_samples,
        n_features=design.n_features,
        n_groups=design.labels.n_groups,
        n_replicates=design.labels.n_replicates,
        group_levels=tuple(design.labels.group_levels.tolist()),
    )

    result = Result(
        params=stat_params,
        info={**raw.info, 'output': output_kind, 'tail': tail},
        timing=timing if timing is not None else raw.timing,
        backend_name=raw.backend_name,
        warnings=raw.warnings,
    )

    return StatSolution(
        _result=result,
        _feature_attributes=dict(feature_attributes or {}),
        _dataset_attributes=dict(dataset_attributes or {}),
    )


@dataclass
class StatSolution:
    """
    User-facing result of compute_statistic().

    values is read-only and shares no memory with the input. The feature
    and dataset attributes are copies of the input's, untouched.
    """
    _result: Result[StatParams]
    _feature_attributes: dict[str, Any] = field(default_factory=dict)
    _dataset_attributes: dict[str, Any] = field(default_factory=dict)

    # --- Output ---

    @property
    def values(self) -> NDArray[np.floating[Any]]:
        """Statistic, z-score or p-value per feature, shape (M,)."""
        return self._result.params.values

    @property
    def df(self) -> int | tuple[int, int] | None:
        """
        Degrees of freedom: int for t, (df1, df2) for F, None after a
        z or p transform.
        """
        df = self._result.params.df
        if df is None:
            return None
        if len(df) == 1:
            return df[0]
        return df

    @property
    def label(self) -> str:
        """'Ttest(df)', 'Ftest(df1,df2)', 'Zscore' or 'Pval'."""
        return self._result.params.label

    @property
    def stats(self) -> tuple[str]:
        return (self._result.params.label,)

    @property
    def stat_name(self) -> str:
        return self._result.params.stat_name

    @property
    def output(self) -> str | None:
        return self._result.params.output

    @property
    def tail(self) -> str | None:
        return self._result.params.tail

    # --- Design ---

    @property
    def test_type(self) -> str:
        return self._result.params.test_type

    @property
    def design_type(self) -> str:
        return self._result.params.design_type

    @property
    def n_samples(self) -> int:
        return self._result.params.n_samples

    @property
    def n_features(self) -> int:
        return self._result.params.n_features

    @property
    def n_groups(self) -> int:
        return self._result.params.n_groups

    @property
    def n_replicates(self) -> int:
        return self._result.params.n_replicates

    @property
    def group_levels(self) -> tuple[Any, ...]:
        return self._result.params.group_levels

    # --- Attributes ---

    @property
    def sample_attributes(self) -> dict[str, Any]:
        """Attributes of the single output row: stats, plus df when raw."""
        sa: dict[str, Any] = {'stats': [self.label]}
        if self.df is not None:
            sa['df'] = [self.df]
        return sa

    @property
    def feature_attributes(self) -> dict[str, Any]:
        return self._feature_attributes

    @property
    def dataset_attributes(self) -> dict[str, Any]:
        return self._dataset_attributes

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Conversions ---

    def to_datasource(self) -> DataSource:
        """
        The output as a 1 x M DataSource, with sa['stats'] (and sa['df']
        for raw statistics) and copies of the pass-through attributes.
        """
        sa: dict[str, Any] = {'stats': np.array([self.label])}
        if self.df is not None:
            sa['df'] = np.array([self.df])
        return DataSource.from_arrays(
            self.values.reshape(1, -1).copy(),
            sa=sa,
            fa=copy.deepcopy(self._feature_attributes),
            a=copy.deepcopy(self._dataset_attributes),
        )

    def adjusted(self, method: str = "holm") -> NDArray[np.floating[Any]]:
        """
        Multiple-comparison adjusted p-values across features.

        Raises:
            InvalidOutputError: If this solution does not hold p-values
        """
        if self.output != "p":
            raise InvalidOutputError(
                f"adjusted() needs p-value output, this solution holds {self.label!r}",
                requested=self.output,
            )
        return p_adjust(self.values, method=method)

    def summary(self) -> str:
        """Short text report of the statistic map."""
        vals = self.values
        finite = vals[np.isfinite(vals)]
        lines = [
            f"Feature-wise {self.stat_name} ({self.test_type}, {self.design_type} design)",
            "=" * 60,
            f"Samples: {self.n_samples}    Features: {self.n_features}    "
            f"Groups: {self.n_groups}    Replicates: {self.n_replicates}",
            f"Output: {self.label}" + (f"  (tail: {self.tail})" if self.tail else ""),
        ]
        if finite.size:
            lines.append(
                f"Range: [{finite.min():.4g}, {finite.max():.4g}]    "
                f"Median: {np.median(finite):.4g}"
            )
        if finite.size < vals.size:
            lines.append(f"Non-finite: {vals.size - finite.size}")
        if self.output == "p":
            lines.append(f"p < 0.05: {int(np.sum(finite < 0.05))} of {vals.size}")
        lines.append(f"Backend: {self.backend_name}")
        for w in self.warnings:
            lines.append(f"Warning: {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"StatSolution(label={self.label!r}, n_features={self.n_features}, "
            f"design={self.design_type!r})"
        )
