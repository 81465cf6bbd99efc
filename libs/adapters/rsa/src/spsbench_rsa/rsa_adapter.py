from __future__ import annotations
import os
import struct
from typing import Any, Sequence

from spsbench import KeyPair, OperationFailure, registry

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from cryptography.hazmat.primitives import hashes, serialization

_LEN = struct.Struct(">I")


def _gen_rsa_keypair(bits: int = 2048):
    sk = rsa.generate_private_key(public_exponent=65537, key_size=bits)
    pk = sk.public_key()
    sk_bytes = sk.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    pk_bytes = pk.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pk_bytes, sk_bytes


def _rsa_bits() -> int:
    override = os.getenv("SPSBENCH_RSA_BITS")
    if override:
        try:
            return int(override)
        except ValueError as exc:
            raise ValueError("SPSBENCH_RSA_BITS must be an integer") from exc
    return 2048


def _load_private_key(sk_bytes: bytes):
    return serialization.load_der_private_key(sk_bytes, password=None)


def _load_public_key(pk_bytes: bytes):
    return serialization.load_der_public_key(pk_bytes)


def _encode_message(message: Sequence[Any]) -> bytes:
    # group elements are signed through their canonical encoding
    return b"".join(m.to_bytes() if hasattr(m, "to_bytes") else bytes(m) for m in message)


def _frame(*parts: bytes) -> bytes:
    return b"".join(_LEN.pack(len(p)) + p for p in parts)


def _unframe(data: bytes, count: int) -> list[bytes]:
    parts: list[bytes] = []
    offset = 0
    for _ in range(count):
        if offset + _LEN.size > len(data):
            raise OperationFailure("truncated RSA-PSS encoding")
        (n,) = _LEN.unpack_from(data, offset)
        offset += _LEN.size
        if offset + n > len(data):
            raise OperationFailure("truncated RSA-PSS encoding")
        parts.append(data[offset:offset + n])
        offset += n
    if offset != len(data):
        raise OperationFailure("trailing bytes after RSA-PSS encoding")
    return parts


class RSAPSSInstance:
    """RSA-PSS over DER-encoded keys; performs no group operations."""
    hash_algorithm = hashes.SHA256
    hash_digest_size = hashes.SHA256().digest_size
    salt_length = hash_digest_size  # Recommended salt length: match hash size

    def __init__(self, payload_size: int, bits: int) -> None:
        self.payload_size = payload_size
        self.bits = bits
        self.mech = f"RSA-{bits}-PSS"

    def _padding(self) -> padding.PSS:
        return padding.PSS(mgf=padding.MGF1(self.hash_algorithm()), salt_length=self.salt_length)

    def _check_message(self, message: Sequence[Any]) -> None:
        if len(message) != self.payload_size:
            raise OperationFailure(
                f"message has {len(message)} elements, expected {self.payload_size}"
            )

    def generate_key_pair(self, size: int) -> KeyPair:
        pk, sk = _gen_rsa_keypair(self.bits)
        return KeyPair(signing_key=sk, verification_key=pk)

    def sign(self, signing_key: bytes, message: Sequence[Any]) -> bytes:
        self._check_message(message)
        sk = _load_private_key(signing_key)
        return sk.sign(_encode_message(message), self._padding(), self.hash_algorithm())

    def verify(self, message: Sequence[Any], signature: bytes, verification_key: bytes) -> bool:
        self._check_message(message)
        pk = _load_public_key(verification_key)
        try:
            pk.verify(signature, _encode_message(message), self._padding(), self.hash_algorithm())
            return True
        except InvalidSignature:
            return False

    def serialize_key_pair(self, key_pair: KeyPair) -> bytes:
        return _frame(key_pair.signing_key, key_pair.verification_key)

    def restore_key_pair(self, data: bytes) -> KeyPair:
        sk, pk = _unframe(data, 2)
        return KeyPair(signing_key=sk, verification_key=pk)

    def serialize_signature(self, signature: bytes) -> bytes:
        return bytes(signature)

    def restore_signature(self, data: bytes) -> bytes:
        return bytes(data)


@registry.register("rsa-pss")
class RSAPSS:
    """Classical RSA-PSS baseline using cryptography.

    Ignores the substrate's algebra: message vectors are hashed through their
    element encodings, so counting runs report zero group operations.
    """
    name = "rsa-pss"
    message_group = "G1"

    def construct(self, substrate: Any, payload_size: int) -> RSAPSSInstance:
        return RSAPSSInstance(payload_size, _rsa_bits())
