"""In-process key-value store backed by a dict."""

from __future__ import annotations

from typing import Iterable

from core.storage.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Ephemeral store for tests and single-process use."""

    def __init__(self) -> None:
        self._data: dict[bytes, bytes] = {}

    def get(self, key: bytes) -> bytes | None:
        return self._data.get(bytes(key))

    def put(self, key: bytes, value: bytes) -> None:
        self._data[bytes(key)] = bytes(value)

    def delete(self, key: bytes) -> None:
        self._data.pop(bytes(key), None)

    def write_batch(self, items: Iterable[tuple[bytes, bytes]]) -> None:
        # materialize first so a failing iterator leaves the store untouched
        staged = [(bytes(key), bytes(value)) for key, value in items]
        self._data.update(staged)

    def keys(self) -> list[bytes]:
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)
