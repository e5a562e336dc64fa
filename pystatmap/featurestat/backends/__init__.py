"""
Backends for feature-wise statistics.

    cpu: CPUStatBackend, numpy reference kernels
    gpu: GPUStatBackend, torch kernels (import requires torch)
"""

from pystatmap.featurestat.backends.cpu import CPUStatBackend

__all__ = ["CPUStatBackend"]
