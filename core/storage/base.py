"""
Key-Value Store Interface

Opaque persistent byte store that trees are layered over.
Each backend knows how to:
1. Read and write single keys
2. Apply a group of writes atomically
3. Report "not found" as None rather than raising
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable


class KeyValueStore(ABC):
    """
    Base class for key-value store backends.

    Backends raise their native exceptions; TreeStore wraps them into
    PersistenceError.
    """

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """Return the value stored at ``key``, or None if absent."""
        ...

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Remove ``key``; deleting a missing key is not an error."""
        ...

    @abstractmethod
    def write_batch(self, items: Iterable[tuple[bytes, bytes]]) -> None:
        """
        Write every ``(key, value)`` pair or none of them.

        Args:
            items: Pairs to write, applied in order
        """
        ...

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> "KeyValueStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
