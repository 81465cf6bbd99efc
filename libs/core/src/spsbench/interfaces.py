from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

"""Contracts between the harness and the schemes it measures.

Adapters implement these Protocols and register themselves into the global
registry. The orchestrator only ever talks to these interfaces; keys and
signatures stay opaque to it.
"""

Message = Sequence[Any]


@dataclass(frozen=True)
class KeyPair:
    signing_key: Any
    verification_key: Any


class OperationInstance(Protocol):
    """A constructed scheme instance (public parameters already derived)."""
    def generate_key_pair(self, size: int) -> KeyPair: ...
    def sign(self, signing_key: Any, message: Message) -> Any: ...
    def verify(self, message: Message, signature: Any, verification_key: Any) -> bool: ...
    def serialize_key_pair(self, key_pair: KeyPair) -> bytes: ...
    def restore_key_pair(self, data: bytes) -> KeyPair: ...
    def serialize_signature(self, signature: Any) -> bytes: ...
    def restore_signature(self, data: bytes) -> Any: ...


class MeasuredOperation(Protocol):
    """Construction delegate for a scheme.

    `construct` bundles public-parameter generation with instance creation and
    must be safe to call repeatedly: timing runs call it once per setup
    iteration.
    """
    name: str
    message_group: str  # 'G1' or 'G2'
    def construct(self, substrate: Any, payload_size: int) -> OperationInstance: ...
