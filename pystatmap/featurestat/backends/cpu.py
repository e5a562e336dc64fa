"""
CPU reference backend for feature-wise statistics.

Dispatches to the closed-form kernels based on design.test_type.
"""

from __future__ import annotations

import numpy as np

from pystatmap.core.result import Result
from pystatmap.core.compute.timing import Timer
from pystatmap.featurestat._common import RawStatParams
from pystatmap.featurestat.design import StatDesign
from pystatmap.featurestat.backends._t_test import quick_ttest, quick_ttest2
from pystatmap.featurestat.backends._f_test import (
    quick_ftest_between,
    quick_ftest_within,
)


def nonfinite_warnings(values: np.ndarray) -> list[str]:
    """Warning strings for features whose statistic is NaN or Inf."""
    n_bad = int(np.sum(~np.isfinite(values)))
    if n_bad == 0:
        return []
    return [
        f"{n_bad} of {values.size} features have a non-finite statistic "
        "(zero variance or non-finite input)"
    ]


class CPUStatBackend:
    """CPU reference backend (numpy, float64)."""

    @property
    def name(self) -> str:
        return 'cpu_closed_form'

    def solve(self, design: StatDesign) -> Result[RawStatParams]:
        """Compute the raw statistic for every feature column."""
        timer = Timer()
        timer.start()

        test_type = design.test_type
        x = design.samples

        with timer.section(test_type):
            if test_type == "t_one_sample":
                stat, df1 = quick_ttest(x)
                df = (df1,)
            elif test_type == "t_two_sample":
                stat, df1 = quick_ttest2(x[design.groups == 0], x[design.groups == 1])
                df = (df1,)
            elif test_type == "f_between":
                stat, df = quick_ftest_between(
                    x, design.groups, design.n_groups, design.contrast,
                )
            elif test_type == "f_within":
                stat, df = quick_ftest_within(
                    x, design.groups, design.replicates,
                    design.n_groups, design.n_replicates,
                )
            else:
                raise ValueError(f"Unknown test_type: {test_type!r}")

        timer.stop()

        values = np.asarray(stat, dtype=np.float64).reshape(-1)

        return Result(
            params=RawStatParams(
                values=values,
                df=tuple(int(d) for d in df),
                stat_name=design.stat_name,
                cdf_family=design.cdf_family,
            ),
            info={
                'test_type': test_type,
                'design_type': design.design_type,
                'paired': design.paired,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(nonfinite_warnings(values)),
        )
