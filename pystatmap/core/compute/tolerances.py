"""
Tolerance tiers for comparing backends.

The CPU closed-form kernels are the reference. GPU results in float64
agree to rounding error; float32 (MPS) only to single precision.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """rtol/atol pair for numerical comparison."""
    rtol: float
    atol: float
    name: str


CPU_FP64 = ToleranceTier(rtol=1e-10, atol=1e-12, name='cpu_fp64')

GPU_FP64 = ToleranceTier(rtol=1e-9, atol=1e-11, name='gpu_fp64')

# Sums of squares lose more digits than plain means in float32
GPU_FP32 = ToleranceTier(rtol=1e-4, atol=1e-5, name='gpu_fp32')


def select_tolerance(backend_name: str) -> ToleranceTier:
    """Select tolerance tier for a backend name such as 'gpu_cuda_fp64'."""
    if 'gpu' not in backend_name:
        return CPU_FP64
    if 'fp32' in backend_name:
        return GPU_FP32
    return GPU_FP64
