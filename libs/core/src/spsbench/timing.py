from __future__ import annotations
import logging
import time
from typing import Callable, List, Optional

from .config import BenchmarkConfig
from .errors import InvalidConfiguration
from .metrics import BenchmarkTimes

"""Wall-clock engine: pre-warm, then time each measured call in isolation."""

log = logging.getLogger(__name__)

StepFn = Callable[[int], None]


class TimingEngine:
    def __init__(
        self,
        config: BenchmarkConfig,
        *,
        clock: Callable[[], float] = time.perf_counter,
        progress_cb: Optional[Callable[[int, int], None]] = None,
    ) -> None:
        self.config = config
        self._clock = clock
        self._progress_cb = progress_cb

    @property
    def substrate(self):
        return self.config.timing_substrate

    def prewarm(self, step: StepFn) -> None:
        for i in range(self.config.prewarm_iterations):
            step(i)

    def measure(self, step: StepFn) -> BenchmarkTimes:
        """Run `step(i)` for every measured iteration and summarise the deltas (ms)."""
        runs = self.config.run_iterations
        if runs <= 0:
            raise InvalidConfiguration("cannot average over zero measured iterations")
        clock = self._clock
        times: List[float] = []
        for i in range(runs):
            start = clock()
            step(i)
            end = clock()
            times.append((end - start) * 1000.0)
            if self._progress_cb is not None:
                try:
                    self._progress_cb(i + 1, runs)
                except Exception:
                    # progress reporting must never break a measurement
                    log.debug("progress callback failed", exc_info=True)
        return BenchmarkTimes.from_series(times)

    def run(self, step_name: str, step: StepFn, *, label: str = "") -> BenchmarkTimes:
        log.info("[START][TIME] (pre-warm) %s [%s] benchmark...", step_name, label)
        self.prewarm(step)
        log.info("[DONE][TIME] (pre-warm) %s [%s] benchmark...", step_name, label)
        log.info("[START][TIME] %s [%s] benchmark...", step_name, label)
        result = self.measure(step)
        log.info("[DONE][TIME] %s [%s] benchmark... avg %.4f ms", step_name, label, result.avg_ms)
        return result
