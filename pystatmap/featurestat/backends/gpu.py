"""
GPU backend for feature-wise statistics.

Same closed-form decompositions as the CPU kernels, written with torch.
Group and replicate means come from one-hot matrix products, so each
statistic is a handful of (N x K)^T (N x M) products regardless of the
number of groups.

float64 on CUDA (and on the CPU device, which is used for reference
runs); MPS has no float64 and runs in float32.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from pystatmap.core.result import Result
from pystatmap.core.compute.device import DeviceInfo, get_cpu_info, select_device
from pystatmap.core.compute.timing import Timer
from pystatmap.featurestat._common import RawStatParams
from pystatmap.featurestat.design import StatDesign
from pystatmap.featurestat.backends.cpu import nonfinite_warnings


class GPUStatBackend:
    """
    torch backend for the four feature-wise statistics.

    Args:
        device: 'auto' (best GPU, raises if none), 'cuda', 'mps', or
            'cpu' to run the torch kernels on the host
    """

    def __init__(self, device: str = 'auto'):
        import torch

        self._torch = torch

        if device == 'auto':
            self._device_info = select_device('gpu')
        elif device == 'cpu':
            self._device_info = get_cpu_info()
        elif device in ('cuda', 'mps'):
            info = select_device('gpu')
            if info.device_type != device:
                raise RuntimeError(f"Requested device {device!r} is not available")
            self._device_info = info
        else:
            raise ValueError(
                f"device must be 'auto', 'cuda', 'mps' or 'cpu', got {device!r}"
            )

        self._device = torch.device(self._device_info.torch_device)
        self._dtype = (
            torch.float64 if self._device_info.supports_fp64 else torch.float32
        )

    @property
    def device_info(self) -> DeviceInfo:
        return self._device_info

    @property
    def name(self) -> str:
        precision = 'fp64' if self._dtype == self._torch.float64 else 'fp32'
        return f'gpu_{self._device_info.device_type}_{precision}'

    def _sync(self) -> None:
        if self._device_info.device_type == 'cuda':
            self._torch.cuda.synchronize()

    def _tensor(self, arr: np.ndarray) -> Any:
        return self._torch.as_tensor(arr, dtype=self._dtype, device=self._device)

    def _one_hot(self, codes: np.ndarray, n_levels: int) -> Any:
        idx = self._torch.as_tensor(codes, dtype=self._torch.long, device=self._device)
        return self._torch.nn.functional.one_hot(idx, n_levels).to(self._dtype)

    def solve(self, design: StatDesign) -> Result[RawStatParams]:
        """Compute the raw statistic for every feature column on the device."""
        timer = Timer(sync=self._sync)
        timer.start()

        test_type = design.test_type

        with timer.section('transfer_to_device'):
            x = self._tensor(design.samples)

        with timer.section(test_type):
            if test_type == "t_one_sample":
                stat, df = self._ttest(x)
            elif test_type == "t_two_sample":
                stat, df = self._ttest2(x, design)
            elif test_type == "f_between":
                stat, df = self._ftest_between(x, design)
            elif test_type == "f_within":
                stat, df = self._ftest_within(x, design)
            else:
                raise ValueError(f"Unknown test_type: {test_type!r}")

        with timer.section('transfer_to_host'):
            values = stat.cpu().numpy().astype(np.float64).reshape(-1)

        timer.stop()

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
                'device': str(self._device_info),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(nonfinite_warnings(values)),
        )

    # --- Kernels ---

    def _group_stats(self, x: Any, codes: np.ndarray, n_levels: int) -> tuple[Any, Any, Any]:
        """Per-level counts (K,), means (K, M) and each row's level mean (N, M)."""
        onehot = self._one_hot(codes, n_levels)
        counts = onehot.sum(dim=0)
        means = (onehot.T @ x) / counts[:, None]
        return counts, means, onehot @ means

    def _ttest(self, x: Any) -> tuple[Any, tuple[int]]:
        n = x.shape[0]
        mu = x.sum(dim=0) / n
        df = n - 1
        ss = ((x - mu) ** 2).sum(dim=0)
        return mu * self._torch.sqrt((n * df) / ss), (df,)

    def _ttest2(self, x: Any, design: StatDesign) -> tuple[Any, tuple[int]]:
        counts, means, row_means = self._group_stats(x, design.groups, 2)
        nx, ny = (int(c) for c in counts.tolist())
        df = nx + ny - 2
        scaling = (nx * ny) * df / (nx + ny)
        ss = ((x - row_means) ** 2).sum(dim=0)
        return (means[0] - means[1]) * self._torch.sqrt(scaling / ss), (df,)

    def _ftest_between(self, x: Any, design: StatDesign) -> tuple[Any, tuple[int, int]]:
        ns = x.shape[0]
        k = design.n_groups
        mu = x.sum(dim=0) / ns
        counts, means, row_means = self._group_stats(x, design.groups, k)
        wss = ((row_means - x) ** 2).sum(dim=0)

        if design.contrast is not None:
            c = self._tensor(design.contrast)
            b = (c[:, None] * (mu - row_means)).sum(dim=0)
            bss = b ** 2 / (c ** 2).sum()
            df1 = 1
        else:
            bss = (counts[:, None] * (mu - means) ** 2).sum(dim=0)
            df1 = k - 1

        df2 = ns - k
        return (bss / df1) / (wss / df2), (df1, df2)

    def _ftest_within(self, x: Any, design: StatDesign) -> tuple[Any, tuple[int, int]]:
        gm = x.mean(dim=0)
        counts, means, row_means = self._group_stats(x, design.groups, design.n_groups)
        sst = (counts[:, None] * (gm - means) ** 2).sum(dim=0)
        ssw = ((row_means - x) ** 2).sum(dim=0)

        rep_counts, rep_means, _ = self._group_stats(
            x, design.replicates, design.n_replicates,
        )
        sss = (rep_counts[:, None] * (gm - rep_means) ** 2).sum(dim=0)

        df1 = design.n_groups - 1
        df2 = df1 * (design.n_replicates - 1)
        return (sst / df1) / ((ssw - sss) / df2), (df1, df2)
