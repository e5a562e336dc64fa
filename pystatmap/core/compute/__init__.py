"""
Shared compute infrastructure for PyStatMap.

Hardware detection, timing and tolerance tiers shared by the CPU and GPU
backends. Domain kernels live in pystatmap.featurestat.backends.
"""

from pystatmap.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from pystatmap.core.compute.timing import Timer
from pystatmap.core.compute.tolerances import (
    ToleranceTier,
    CPU_FP64,
    GPU_FP64,
    GPU_FP32,
    select_tolerance,
)

__all__ = [
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    "Timer",
    "ToleranceTier",
    "CPU_FP64",
    "GPU_FP64",
    "GPU_FP32",
    "select_tolerance",
]
