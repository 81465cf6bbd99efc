from __future__ import annotations
import math
import statistics
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

"""Benchmark result containers.

Timing runs produce `BenchmarkTimes`, counting runs produce an
`OperationCountTable`; both are wrapped per lifecycle stage in a
`BenchmarkResult`. Presentation lives in the reporting sinks, not here.
"""

STRUCTURES = ("G1", "G2", "GT")


@dataclass(frozen=True)
class BenchmarkTimes:
    runs: int
    min_ms: float
    max_ms: float
    sum_ms: float
    avg_ms: float
    median_ms: float = 0.0
    stddev_ms: float = 0.0
    series: Tuple[float, ...] = ()

    @classmethod
    def from_series(cls, series: Sequence[float]) -> "BenchmarkTimes":
        if not series:
            raise ValueError("cannot summarise an empty timing series")
        samples = [float(s) for s in series]
        total = math.fsum(samples)
        avg = total / len(samples)
        # fsum can leave avg a few ulps outside [min, max] for constant series
        lo, hi = min(samples), max(samples)
        avg = min(max(avg, lo), hi)
        return cls(
            runs=len(samples),
            min_ms=lo,
            max_ms=hi,
            sum_ms=total,
            avg_ms=avg,
            median_ms=statistics.median(samples),
            stddev_ms=statistics.pstdev(samples) if len(samples) > 1 else 0.0,
            series=tuple(samples),
        )


@dataclass(frozen=True)
class OperationCounts:
    """Primitive operations counted in one group."""
    ops: int = 0
    squarings: int = 0
    inversions: int = 0
    exponentiations: int = 0

    @property
    def total(self) -> int:
        # exponentiations are already charged through ops/squarings
        return self.ops + self.squarings + self.inversions

    def as_dict(self) -> Dict[str, int]:
        return {
            "ops": self.ops,
            "squarings": self.squarings,
            "inversions": self.inversions,
            "exponentiations": self.exponentiations,
            "total": self.total,
        }


_ZERO = OperationCounts()


@dataclass(frozen=True)
class OperationCountTable:
    """Snapshot of counters keyed by bucket name and group identifier."""
    groups: Dict[str, Dict[str, OperationCounts]] = field(default_factory=dict)
    pairing_counts: Dict[str, int] = field(default_factory=dict)

    def buckets(self) -> List[str]:
        return sorted(set(self.groups) | set(self.pairing_counts))

    def get(self, bucket: str, structure: str) -> OperationCounts:
        if structure not in STRUCTURES:
            raise KeyError(f"unknown group structure {structure!r}")
        return self.groups.get(bucket, {}).get(structure, _ZERO)

    def total(self, bucket: str, structure: str) -> int:
        return self.get(bucket, structure).total

    def pairings(self, bucket: str) -> int:
        return self.pairing_counts.get(bucket, 0)

    def bucket_total(self, bucket: str) -> int:
        return sum(self.total(bucket, s) for s in STRUCTURES) + self.pairings(bucket)

    def is_zero(self) -> bool:
        return all(self.bucket_total(b) == 0 for b in self.buckets())

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for bucket in self.buckets():
            entry: Dict[str, Any] = {s: self.get(bucket, s).as_dict() for s in STRUCTURES}
            entry["pairings"] = self.pairings(bucket)
            out[bucket] = entry
        return out


@dataclass(frozen=True)
class BenchmarkResult:
    stage: str
    mode: str  # 'time' or 'counting'
    times: Optional[BenchmarkTimes] = None
    counts: Optional[OperationCountTable] = None
    verify_failures: int = 0

    @property
    def anomalous(self) -> bool:
        return self.verify_failures > 0

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"stage": self.stage, "mode": self.mode}
        if self.times is not None:
            t = self.times
            out["times"] = {
                "runs": t.runs,
                "avg_ms": t.avg_ms,
                "min_ms": t.min_ms,
                "max_ms": t.max_ms,
                "sum_ms": t.sum_ms,
                "median_ms": t.median_ms,
                "stddev_ms": t.stddev_ms,
                "series": list(t.series),
            }
        if self.counts is not None:
            out["counts"] = self.counts.as_dict()
        if self.verify_failures:
            out["verify_failures"] = self.verify_failures
        return out


@dataclass
class BenchmarkSummary:
    scheme: str
    mode: str
    results: List[BenchmarkResult]
    meta: Dict[str, Any] = field(default_factory=dict)

    def result(self, stage: str) -> BenchmarkResult:
        for res in self.results:
            if res.stage == stage:
                return res
        raise KeyError(stage)
