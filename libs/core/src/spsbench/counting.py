from __future__ import annotations
import logging
from typing import Callable

from .config import BenchmarkConfig
from .metrics import OperationCountTable

"""Operation-counting engine.

Counts are deterministic for a fixed message length, so instead of
repeating the measured call the engine attributes exactly one
representative call per step: pre-warm untouched, then tag the bucket,
reset, call once, snapshot, reset again.
"""

log = logging.getLogger(__name__)

StepFn = Callable[[int], None]

# every counted call goes through the shared slot
REPRESENTATIVE_ITERATION = 0


class CountingEngine:
    def __init__(self, config: BenchmarkConfig) -> None:
        self.config = config

    @property
    def substrate(self):
        return self.config.counting_substrate

    def prewarm(self, step: StepFn) -> None:
        for _ in range(self.config.prewarm_iterations):
            step(REPRESENTATIVE_ITERATION)

    def measure(self, step_name: str, step: StepFn) -> OperationCountTable:
        group = self.substrate
        group.set_bucket(step_name)
        group.reset_counters()
        step(REPRESENTATIVE_ITERATION)
        table = group.snapshot()
        if log.isEnabledFor(logging.DEBUG):
            log.debug("counter data:\n%s", group.format_counter_data(step_name))
        group.reset_counters()
        return table

    def run(self, step_name: str, step: StepFn, *, label: str = "") -> OperationCountTable:
        log.info("[START][COUNT] (pre-warm) %s [%s] benchmark...", step_name, label)
        self.prewarm(step)
        log.info("[START][COUNT] %s [%s] benchmark...", step_name, label)
        table = self.measure(step_name, step)
        log.info(
            "[DONE][COUNT] %s [%s] benchmark... %d operations",
            step_name, label, table.bucket_total(step_name),
        )
        return table
