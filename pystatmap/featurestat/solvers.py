"""
Solver dispatch for feature-wise statistics.

Public API:
    compute_statistic(samples, groups, replicates, test, output, ...)
        -> StatSolution
"""

from __future__ import annotations

import time
from typing import Any, Literal

from numpy.typing import ArrayLike

from pystatmap.core.capabilities import CAPABILITY_MATERIALIZED
from pystatmap.core.datasource import DataSource
from pystatmap.core.exceptions import ValidationError
from pystatmap.core.protocols import Backend, Distribution
from pystatmap.featurestat._common import RawStatParams
from pystatmap.featurestat._transform import resolve_output, transform_statistic
from pystatmap.featurestat.backends.cpu import CPUStatBackend
from pystatmap.featurestat.design import StatDesign
from pystatmap.featurestat.distributions import resolve_distribution
from pystatmap.featurestat.solution import StatSolution, assemble_solution


BackendChoice = Literal['cpu', 'gpu', 'auto']


def _get_backend(backend: str = 'cpu') -> Backend[StatDesign, RawStatParams]:
    """
    Select backend.

    'cpu' is the numpy reference. 'gpu' requires torch and a CUDA/MPS
    device. 'auto' uses a GPU when one is available, else the CPU.
    """
    if backend == 'cpu':
        return CPUStatBackend()
    if backend == 'gpu':
        from pystatmap.featurestat.backends.gpu import GPUStatBackend
        return GPUStatBackend()
    if backend == 'auto':
        from pystatmap.core.compute.device import detect_gpu
        if detect_gpu() is None:
            return CPUStatBackend()
        from pystatmap.featurestat.backends.gpu import GPUStatBackend
        return GPUStatBackend()
    raise ValidationError(
        f"Unknown backend: {backend!r}. Use 'cpu', 'gpu' or 'auto'."
    )


def compute_statistic(
    samples: ArrayLike | DataSource,
    groups: ArrayLike | None = None,
    replicates: ArrayLike | None = None,
    test: Literal['t', 't2', 'F'] = 't',
    output: str | None = None,
    *,
    tail: Literal['left', 'right', 'both'] | None = None,
    contrast: ArrayLike | None = None,
    distribution: Distribution | None = None,
    backend: BackendChoice = 'cpu',
) -> StatSolution:
    """
    Compute a t or F statistic independently for every feature column.

    Parameters
    ----------
    samples : array-like or DataSource
        N x M observation matrix. A DataSource supplies defaults for
        groups, replicates and (for 'F') contrast from its sample
        attributes, and its feature/dataset attributes are copied to
        the result.
    groups : array-like or None
        Group (condition) label per row. Default: a single group.
    replicates : array-like or None
        Replicate (subject/block) label per row. Default: all rows
        unique, i.e. a between-subjects design.
    test : str
        't'  one-sample t-test against zero; with 2 groups in a
             within-subjects design, a paired t-test on group 1 - group 2
        't2' two-sample t-test with equal variances, group 1 - group 2
        'F'  one-way ANOVA; between- or within-subjects as detected
    output : str or None
        None for the raw statistic, 'z' for a z-score, 'p' for a p-value
        with the default tail ('right' for F, 'both' for t), or 'left',
        'right', 'both' for a p-value with that tail.
    tail : str or None
        Explicit tail; implies p-value output.
    contrast : array-like or None
        Per-row contrast weights for a single-df between-subjects F test.
        Must be constant within each group; per-group values sum to 0.
    distribution : Distribution or None
        CDF / inverse-normal provider. Default: scipy.stats.
    backend : str
        'cpu' (default), 'gpu' or 'auto'.

    Returns
    -------
    StatSolution
        values (M,), df, label ('Ttest(df)', 'Ftest(df1,df2)', 'Zscore'
        or 'Pval') plus pass-through attributes.

    Examples
    --------
    >>> s = compute_statistic(samples, groups, test='F')
    >>> s.label
    'Ftest(2,9)'
    >>> compute_statistic(samples, test='t', output='p').values
    """
    t0 = time.perf_counter()

    feature_attributes: dict[str, Any] = {}
    dataset_attributes: dict[str, Any] = {}
    if isinstance(samples, DataSource):
        ds = samples
        if not ds.supports(CAPABILITY_MATERIALIZED):
            raise ValidationError(
                "DataSource samples must be materialized in memory"
            )
        if groups is None:
            groups = ds.sample_attribute('groups')
        if replicates is None:
            replicates = ds.sample_attribute('replicates')
        if contrast is None and test == 'F':
            contrast = ds.sample_attribute('contrast')
        feature_attributes, dataset_attributes = ds.copy_passthrough()
        samples = ds.samples

    design = StatDesign.for_test(
        samples, groups, replicates, test=test, contrast=contrast,
    )
    output_kind, tail = resolve_output(output, test, tail)

    be = _get_backend(backend)
    raw = be.solve(design)

    timing = dict(raw.timing or {})
    if output_kind is None:
        values = raw.params.values
    else:
        t_transform = time.perf_counter()
        values = transform_statistic(
            raw.params.values,
            raw.params.df,
            raw.params.cdf_family,
            output_kind,
            tail,
            resolve_distribution(distribution),
        )
        timing['transform'] = time.perf_counter() - t_transform
    timing['total_seconds'] = time.perf_counter() - t0

    return assemble_solution(
        raw,
        design,
        values,
        output_kind,
        tail,
        timing=timing,
        feature_attributes=feature_attributes,
        dataset_attributes=dataset_attributes,
    )
