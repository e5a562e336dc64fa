"""
Execution timing utilities.

Backends report wall-clock timings in Result.timing. GPU kernels run
asynchronously, so a backend can hand the timer a synchronisation
callback (e.g. torch.cuda.synchronize) that is invoked around every
measurement.
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator


class Timer:
    """
    Accumulating timer with named sections.

    Usage:
        timer = Timer()
        timer.start()

        with timer.section('t_one_sample'):
            t, df = quick_ttest(x)

        timer.stop()
        timer.result()
        # {'total_seconds': 0.002, 't_one_sample': 0.0015}
    """

    def __init__(self, sync: Callable[[], None] | None = None):
        """
        Args:
            sync: Called before every clock read. Pass the device
                  synchronize function when timing GPU work.
        """
        self._sync_fn = sync
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def _sync(self) -> None:
        if self._sync_fn is not None:
            self._sync_fn()

    def start(self) -> None:
        """Start the overall timer."""
        self._sync()
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        """Stop the overall timer."""
        self._sync()
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """
        Time a named section. Repeated sections accumulate.
        """
        self._sync()
        start = time.perf_counter()
        try:
            yield
        finally:
            self._sync()
            elapsed = time.perf_counter() - start
            self._sections[name] = self._sections.get(name, 0.0) + elapsed

    def result(self) -> dict[str, float]:
        """
        Get timing results.

        Returns:
            Dictionary with 'total_seconds' and all section timings

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")

        result = {'total_seconds': self._total}
        result.update(self._sections)
        return result
