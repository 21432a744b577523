"""
Common test fixtures shared by all modules.

Provides factory functions for:
- Leaf values (deterministic 64-byte leaves)
- Key-value stores that fail on demand
"""

from typing import Iterable

from core.crypto.hashing import sha256
from core.merkle import LEAF_BYTES
from core.storage import MemoryStore


def make_leaf(seed: int | str = 0) -> bytes:
    """Deterministic 64-byte leaf derived from ``seed``."""
    digest = sha256(str(seed).encode("utf-8"))
    return (digest + digest)[:LEAF_BYTES]


def make_leaves(count: int, offset: int = 0) -> list[bytes]:
    """``count`` distinct leaves with seeds ``offset .. offset + count - 1``."""
    return [make_leaf(offset + i) for i in range(count)]


class FailingStore(MemoryStore):
    """
    MemoryStore whose writes (and optionally reads) raise on demand.

    Set ``fail_writes`` / ``fail_reads`` to True to make the next
    operations raise OSError.
    """

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.fail_reads = False
        self.write_attempts = 0

    def get(self, key: bytes) -> bytes | None:
        if self.fail_reads:
            raise OSError("simulated read failure")
        return super().get(key)

    def put(self, key: bytes, value: bytes) -> None:
        self.write_attempts += 1
        if self.fail_writes:
            raise OSError("simulated write failure")
        super().put(key, value)

    def write_batch(self, items: Iterable[tuple[bytes, bytes]]) -> None:
        self.write_attempts += 1
        if self.fail_writes:
            raise OSError("simulated write failure")
        super().write_batch(items)
