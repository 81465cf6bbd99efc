from __future__ import annotations
import struct
from dataclasses import dataclass
from typing import Sequence, Tuple

from spsbench import KeyPair, OperationFailure, registry
from spsbench.groups import BilinearGroup, Group, GroupElement

"""Groth15 structure-preserving signatures over a bilinear group substrate.

Messages are vectors (M_1..M_n) in the "message group" (G1 or G2); the
other source group carries R and the verification key.

    pp:     G, H generators, Y = G^y, E = e(Y, H)
    keygen: v <- Z_p, V = H^v
    sign:   r <- Z_p*, R = H^r, S = (Y * G^v)^(1/r), T_i = (Y^v * M_i)^(1/r)
    verify: e(S, R) == E * e(G, V)   and   e(T_i, R) == e(Y, V) * e(M_i, H)
"""

_HEADER = struct.Struct(">I")


@dataclass(frozen=True)
class Groth15PublicParameters:
    group: BilinearGroup
    message_group: Group
    other_group: Group
    g: GroupElement
    h: GroupElement
    y: GroupElement
    e_y_h: GroupElement
    message_length: int

    @classmethod
    def generate(cls, group: BilinearGroup, message_group: str, message_length: int) -> "Groth15PublicParameters":
        if message_length <= 0:
            raise OperationFailure("Groth15 needs a positive message length")
        if message_group == "G1":
            m_group, o_group = group.g1, group.g2
        elif message_group == "G2":
            m_group, o_group = group.g2, group.g1
        else:
            raise OperationFailure(f"messages must live in G1 or G2, not {message_group!r}")
        g = m_group.generator()
        h = o_group.generator()
        y = g ** m_group.random_exponent()
        # precomputed once so verification only pays for the key-dependent pairings
        e_y_h = _pair(group, m_group, y, h)
        return cls(group, m_group, o_group, g, h, y, e_y_h, message_length)

    def pair(self, m_side: GroupElement, o_side: GroupElement) -> GroupElement:
        return _pair(self.group, self.message_group, m_side, o_side)


def _pair(group: BilinearGroup, message_group: Group, m_side: GroupElement, o_side: GroupElement) -> GroupElement:
    if message_group is group.g1:
        return group.pair(m_side, o_side)
    return group.pair(o_side, m_side)


@dataclass(frozen=True)
class Groth15SigningKey:
    v: int


@dataclass(frozen=True)
class Groth15VerificationKey:
    V: GroupElement


@dataclass(frozen=True)
class Groth15Signature:
    R: GroupElement
    S: GroupElement
    T: Tuple[GroupElement, ...]


class Groth15Instance:
    def __init__(self, pp: Groth15PublicParameters) -> None:
        self.pp = pp

    def _check_message(self, message: Sequence[GroupElement]) -> None:
        if len(message) != self.pp.message_length:
            raise OperationFailure(
                f"message has {len(message)} elements, scheme was set up for {self.pp.message_length}"
            )

    def generate_key_pair(self, size: int) -> KeyPair:
        if size != self.pp.message_length:
            raise OperationFailure(
                f"key requested for {size} messages, scheme was set up for {self.pp.message_length}"
            )
        v = self.pp.other_group.random_exponent()
        return KeyPair(Groth15SigningKey(v), Groth15VerificationKey(self.pp.h ** v))

    def sign(self, signing_key: Groth15SigningKey, message: Sequence[GroupElement]) -> Groth15Signature:
        self._check_message(message)
        pp = self.pp
        v = signing_key.v
        r = pp.other_group.random_exponent()
        try:
            r_inv = pow(r, -1, pp.group.order)
        except ValueError as exc:
            raise OperationFailure(f"signing randomness {r} is not invertible mod the group order") from exc
        S = (pp.y * pp.g ** v) ** r_inv
        y_v = pp.y ** v
        T = tuple((y_v * m) ** r_inv for m in message)
        return Groth15Signature(R=pp.h ** r, S=S, T=T)

    def verify(
        self,
        message: Sequence[GroupElement],
        signature: Groth15Signature,
        verification_key: Groth15VerificationKey,
    ) -> bool:
        self._check_message(message)
        if len(signature.T) != len(message):
            return False
        pp = self.pp
        R, V = signature.R, verification_key.V
        if pp.pair(signature.S, R) != pp.e_y_h * pp.pair(pp.g, V):
            return False
        e_y_v = pp.pair(pp.y, V)
        return all(
            pp.pair(t, R) == e_y_v * pp.pair(m, pp.h)
            for t, m in zip(signature.T, message)
        )

    # serialization: 4-byte big-endian header followed by fixed-width elements

    def serialize_key_pair(self, key_pair: KeyPair) -> bytes:
        sk, vk = key_pair.signing_key, key_pair.verification_key
        scalar = sk.v.to_bytes(self.pp.other_group.element_size, "big")
        return _HEADER.pack(self.pp.message_length) + scalar + vk.V.to_bytes()

    def restore_key_pair(self, data: bytes) -> KeyPair:
        body = self._strip_header(data, self.pp.message_length)
        width = self.pp.other_group.element_size
        if len(body) != 2 * width:
            raise OperationFailure("malformed Groth15 key pair encoding")
        v = int.from_bytes(body[:width], "big")
        V = self.pp.other_group.restore(body[width:])
        return KeyPair(Groth15SigningKey(v), Groth15VerificationKey(V))

    def serialize_signature(self, signature: Groth15Signature) -> bytes:
        parts = [signature.R.to_bytes(), signature.S.to_bytes()]
        parts.extend(t.to_bytes() for t in signature.T)
        return _HEADER.pack(len(signature.T)) + b"".join(parts)

    def restore_signature(self, data: bytes) -> Groth15Signature:
        if len(data) < _HEADER.size:
            raise OperationFailure("truncated Groth15 signature encoding")
        (count,) = _HEADER.unpack_from(data)
        body = data[_HEADER.size:]
        o_width = self.pp.other_group.element_size
        m_width = self.pp.message_group.element_size
        if len(body) != o_width + m_width * (count + 1):
            raise OperationFailure("malformed Groth15 signature encoding")
        R = self.pp.other_group.restore(body[:o_width])
        rest = body[o_width:]
        elems = [
            self.pp.message_group.restore(rest[i * m_width:(i + 1) * m_width])
            for i in range(count + 1)
        ]
        return Groth15Signature(R=R, S=elems[0], T=tuple(elems[1:]))

    @staticmethod
    def _strip_header(data: bytes, expected: int) -> bytes:
        if len(data) < _HEADER.size:
            raise OperationFailure("truncated Groth15 encoding")
        (n,) = _HEADER.unpack_from(data)
        if n != expected:
            raise OperationFailure(f"encoding is for {n} messages, scheme expects {expected}")
        return data[_HEADER.size:]


class _Groth15:
    name = "groth15"
    message_group = "G1"

    def construct(self, substrate: BilinearGroup, payload_size: int) -> Groth15Instance:
        return Groth15Instance(
            Groth15PublicParameters.generate(substrate, self.message_group, payload_size)
        )


@registry.register("groth15-g1")
class Groth15G1(_Groth15):
    """Groth15 signing vectors of G1 elements (the paper's type 1)."""
    name = "groth15-g1"
    message_group = "G1"


@registry.register("groth15-g2")
class Groth15G2(_Groth15):
    """Groth15 signing vectors of G2 elements."""
    name = "groth15-g2"
    message_group = "G2"
