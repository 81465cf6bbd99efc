from __future__ import annotations
from typing import List, Tuple

from .groups import Group, GroupElement


def prepare_messages(group: Group, block_count: int, message_length: int) -> List[Tuple[GroupElement, ...]]:
    """Precompute `block_count` messages of `message_length` random elements of `group`."""
    if block_count < 0 or message_length <= 0:
        raise ValueError("block_count must be >= 0 and message_length > 0")
    return [
        tuple(group.random_element() for _ in range(message_length))
        for _ in range(block_count)
    ]
