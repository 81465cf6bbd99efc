from __future__ import annotations
import secrets
from collections import defaultdict
from typing import Dict, Optional

from .errors import InvalidConfiguration, OperationFailure
from .metrics import STRUCTURES, OperationCountTable, OperationCounts

"""Prime-order bilinear group substrates.

Elements are stored by their discrete logarithm with respect to a fixed
generator, so the group law is addition mod p and the pairing is
multiplication mod p. This is the classic "debug" representation: it keeps
every algebraic relation a scheme relies on while staying pure Python.

`BilinearGroup` is the uninstrumented substrate used for timing runs.
`CountingBilinearGroup` additionally tallies every primitive operation per
bucket and per group so counting runs can attribute costs to a lifecycle
stage.
"""

# Prime order r of the BN254 pairing groups.
BN254_ORDER = 21888242871839275222246405745257275088548364400416034343698204186575808495617

DEFAULT_BUCKET = "default"

_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)


def is_probable_prime(n: int, rounds: int = 8) -> bool:
    """Miller-Rabin test; exact below 3.3e24, probabilistic above."""
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n % p == 0:
            return n == p
    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    bases = list(_SMALL_PRIMES)
    bases.extend(secrets.randbelow(n - 3) + 2 for _ in range(rounds))
    for a in bases:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


class GroupElement:
    __slots__ = ("group", "value")

    def __init__(self, group: "Group", value: int) -> None:
        self.group = group
        self.value = value % group.order

    def _check(self, other: object) -> "GroupElement":
        if not isinstance(other, GroupElement) or other.group is not self.group:
            raise OperationFailure(
                f"cannot combine element of {self.group.name} with {other!r}"
            )
        return other

    def __mul__(self, other: "GroupElement") -> "GroupElement":
        other = self._check(other)
        self.group._charge("ops")
        return GroupElement(self.group, self.value + other.value)

    def __invert__(self) -> "GroupElement":
        self.group._charge("inversions")
        return GroupElement(self.group, -self.value)

    def __truediv__(self, other: "GroupElement") -> "GroupElement":
        return self * ~self._check(other)

    def __pow__(self, exponent: int) -> "GroupElement":
        k = int(exponent) % self.group.order
        self.group._charge_exponentiation(k)
        return GroupElement(self.group, self.value * k)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GroupElement):
            return NotImplemented
        return other.group is self.group and other.value == self.value

    def __hash__(self) -> int:
        return hash((self.group.name, self.value))

    def __repr__(self) -> str:
        return f"{self.group.name}({self.value})"

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(self.group.element_size, "big")


class Group:
    """One prime-order group of a bilinear group (G1, G2 or GT)."""

    def __init__(self, name: str, owner: "BilinearGroup") -> None:
        self.name = name
        self.owner = owner
        self.order = owner.order
        self.element_size = (self.order.bit_length() + 7) // 8

    def __repr__(self) -> str:
        return f"Group({self.name}, p={self.order})"

    def _charge(self, kind: str, amount: int = 1) -> None:
        self.owner._record(self.name, kind, amount)

    def _charge_exponentiation(self, k: int) -> None:
        # square-and-multiply cost of the exponent
        self._charge("exponentiations")
        if k > 1:
            self._charge("squarings", k.bit_length() - 1)
            self._charge("ops", bin(k).count("1") - 1)

    def generator(self) -> GroupElement:
        return GroupElement(self, 1)

    def identity(self) -> GroupElement:
        return GroupElement(self, 0)

    def random_exponent(self) -> int:
        """Uniform non-zero exponent in Z_p."""
        return secrets.randbelow(self.order - 1) + 1

    def random_element(self) -> GroupElement:
        return GroupElement(self, self.random_exponent())

    def restore(self, data: bytes) -> GroupElement:
        if len(data) != self.element_size:
            raise OperationFailure(
                f"{self.name} element encoding must be {self.element_size} bytes, got {len(data)}"
            )
        value = int.from_bytes(data, "big")
        if value >= self.order:
            raise OperationFailure(f"{self.name} element encoding out of range")
        return GroupElement(self, value)


class BilinearGroup:
    """Type-3 bilinear group e: G1 x G2 -> GT of prime order p."""

    def __init__(self, order: int = BN254_ORDER) -> None:
        order = int(order)
        # exponent inversion in the schemes needs Z_p to be a field
        if order <= 2 or not is_probable_prime(order):
            raise InvalidConfiguration(f"group order must be a prime larger than 2, got {order}")
        self.order = order
        self.g1 = Group("G1", self)
        self.g2 = Group("G2", self)
        self.gt = Group("GT", self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(p={self.order.bit_length()} bits)"

    def group(self, name: str) -> Group:
        try:
            return {"G1": self.g1, "G2": self.g2, "GT": self.gt}[name]
        except KeyError:
            raise OperationFailure(f"unknown group {name!r}") from None

    def pair(self, a: GroupElement, b: GroupElement) -> GroupElement:
        if not isinstance(a, GroupElement) or a.group is not self.g1:
            raise OperationFailure("first pairing argument must be an element of G1")
        if not isinstance(b, GroupElement) or b.group is not self.g2:
            raise OperationFailure("second pairing argument must be an element of G2")
        self._record_pairing()
        return GroupElement(self.gt, a.value * b.value)

    def _record(self, structure: str, kind: str, amount: int) -> None:
        pass

    def _record_pairing(self) -> None:
        pass


class CountingBilinearGroup(BilinearGroup):
    """Bilinear group that tallies operations into the active bucket.

    Counters only ever grow until `reset_counters()` wipes every bucket;
    nothing resets implicitly.
    """

    def __init__(self, order: int = BN254_ORDER) -> None:
        super().__init__(order)
        self._bucket = DEFAULT_BUCKET
        self._counts: Dict[str, Dict[str, Dict[str, int]]] = {}
        self._pairings: Dict[str, int] = {}

    @property
    def bucket(self) -> str:
        return self._bucket

    def set_bucket(self, name: str) -> None:
        if not name:
            raise ValueError("bucket name must be non-empty")
        self._bucket = name

    def reset_counters(self) -> None:
        self._counts = {}
        self._pairings = {}

    def _record(self, structure: str, kind: str, amount: int) -> None:
        per_bucket = self._counts.setdefault(self._bucket, {})
        per_group = per_bucket.setdefault(structure, defaultdict(int))
        per_group[kind] += amount

    def _record_pairing(self) -> None:
        self._pairings[self._bucket] = self._pairings.get(self._bucket, 0) + 1

    def snapshot(self) -> OperationCountTable:
        groups: Dict[str, Dict[str, OperationCounts]] = {}
        for bucket in set(self._counts) | set(self._pairings) | {self._bucket}:
            recorded = self._counts.get(bucket, {})
            groups[bucket] = {
                s: OperationCounts(**dict(recorded.get(s, {}))) for s in STRUCTURES
            }
        return OperationCountTable(groups=groups, pairing_counts=dict(self._pairings))

    def format_counter_data(self, bucket: Optional[str] = None) -> str:
        table = self.snapshot()
        lines = []
        for name in ([bucket] if bucket else table.buckets()):
            lines.append(f"[{name}]")
            for s in STRUCTURES:
                c = table.get(name, s)
                lines.append(
                    f"  {s}: total={c.total} ops={c.ops} sq={c.squarings} "
                    f"inv={c.inversions} exp={c.exponentiations}"
                )
            lines.append(f"  pairings: {table.pairings(name)}")
        return "\n".join(lines)
