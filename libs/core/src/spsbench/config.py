from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Optional

from .errors import InvalidConfiguration, UnsupportedMode
from .groups import BN254_ORDER, BilinearGroup, CountingBilinearGroup
from .modes import BenchmarkMode


@dataclass(frozen=True)
class BenchmarkConfig:
    """Benchmark settings shared by every scheme being compared.

    `timing_substrate` is the bilinear group used for timer runs,
    `counting_substrate` the instrumented group used for counting runs. Each
    engine reads only its own substrate.
    """
    timing_substrate: Any
    counting_substrate: Any
    prewarm_iterations: int
    run_iterations: int
    payload_size: int

    def __post_init__(self) -> None:
        if self.run_iterations <= 0:
            raise InvalidConfiguration("the amount of measured iterations must be positive")
        if self.prewarm_iterations < 0:
            raise InvalidConfiguration("the amount of pre-warm iterations may not be negative")
        # pre-warm reuses the measured slots, so it must fit inside them
        if self.prewarm_iterations > self.run_iterations:
            raise InvalidConfiguration(
                "the amount of pre-warm iterations may not be larger than the amount "
                "of measured iterations"
            )
        if self.payload_size <= 0:
            raise InvalidConfiguration("the message length must be positive")

    def substrate_for(self, mode: BenchmarkMode) -> Any:
        if mode is BenchmarkMode.TIME:
            return self.timing_substrate
        if mode is BenchmarkMode.COUNTING:
            return self.counting_substrate
        raise UnsupportedMode(f"unsupported benchmark mode: {mode!r}")

    def to_pretty_string(self) -> str:
        return (
            f"{self.run_iterations} iterations :: messageLength {self.payload_size} "
            f":: {self.prewarm_iterations} pre-warm"
        )


def _group_order() -> int:
    override = os.getenv("SPSBENCH_GROUP_ORDER")
    if override:
        try:
            return int(override, 0)
        except ValueError as exc:
            raise InvalidConfiguration("SPSBENCH_GROUP_ORDER must be an integer") from exc
    return BN254_ORDER


def default_config(
    prewarm_iterations: int,
    run_iterations: int,
    payload_size: int,
    *,
    order: Optional[int] = None,
) -> BenchmarkConfig:
    """Config with the stock substrates over a group of the given order."""
    p = order if order is not None else _group_order()
    return BenchmarkConfig(
        timing_substrate=BilinearGroup(p),
        counting_substrate=CountingBilinearGroup(p),
        prewarm_iterations=prewarm_iterations,
        run_iterations=run_iterations,
        payload_size=payload_size,
    )
