from __future__ import annotations
from enum import Enum
from typing import Any, Generic, List, TypeVar

from .errors import BenchmarkStateError

T = TypeVar("T")

_EMPTY = object()


class SharingPolicy(str, Enum):
    """How iteration numbers map onto storage slots.

    FRESH_PER_ITERATION: iteration i owns slot i, so no state is reused
    across measured calls.
    SINGLE_SHARED: every iteration reads and writes slot 0.
    """
    FRESH_PER_ITERATION = "fresh-per-iteration"
    SINGLE_SHARED = "single-shared"


class SlotArena(Generic[T]):
    """Fixed-size per-iteration storage written by one stage, read by the next."""

    def __init__(self, name: str, size: int, policy: SharingPolicy) -> None:
        if size <= 0:
            raise ValueError("slot arena needs at least one slot")
        self.name = name
        self.policy = policy
        self._slots: List[Any] = [_EMPTY] * (size if policy is SharingPolicy.FRESH_PER_ITERATION else 1)

    def __len__(self) -> int:
        return len(self._slots)

    def index(self, iteration: int) -> int:
        if self.policy is SharingPolicy.SINGLE_SHARED:
            return 0
        if not 0 <= iteration < len(self._slots):
            raise IndexError(f"{self.name}: iteration {iteration} outside [0, {len(self._slots)})")
        return iteration

    def __getitem__(self, iteration: int) -> T:
        value = self._slots[self.index(iteration)]
        if value is _EMPTY:
            raise BenchmarkStateError(f"{self.name}[{iteration}] was read before any stage wrote it")
        return value

    def __setitem__(self, iteration: int, value: T) -> None:
        self._slots[self.index(iteration)] = value

    def values(self) -> List[T]:
        return [v for v in self._slots if v is not _EMPTY]
