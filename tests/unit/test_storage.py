"""
Storage Unit Tests
Tests for core/storage (backends, TreeStore, open_store)

Tests:
- MemoryStore and SQLiteStore share get/put/delete/batch semantics
- SQLite batches are atomic and survive reopening
- TreeStore wraps backend failures in PersistenceError
- open_store builds the configured backend
"""
import sqlite3
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.config.runtime import StorageConfig
from core.crypto.hashing import sha256
from core.merkle import build_tree, build_zero_hashes
from core.schemas.errors import ConfigError, PersistenceError
from core.storage import (
    MemoryStore,
    SQLiteStore,
    TreeStore,
    Metadata,
    open_store,
    snapshot_key,
    tree_key,
)
from fixtures import FailingStore, make_leaves


class _FailAfterFirstRow:
    """Connection wrapper whose executemany writes one row, then fails."""

    def __init__(self, conn):
        self.conn = conn

    def execute(self, *args):
        return self.conn.execute(*args)

    @property
    def in_transaction(self):
        return self.conn.in_transaction

    def executemany(self, sql, rows):
        rows = list(rows)
        self.conn.execute(sql, rows[0])
        raise sqlite3.OperationalError("simulated failure mid-batch")


class _FailOnCommit(_FailAfterFirstRow):
    """Connection wrapper whose COMMIT fails after the rows are written."""

    def execute(self, sql, *args):
        if sql == "COMMIT":
            raise sqlite3.OperationalError("simulated commit failure")
        return self.conn.execute(sql, *args)

    def executemany(self, sql, rows):
        return self.conn.executemany(sql, rows)


@pytest.fixture(params=["memory", "sqlite"])
def kv(request, tmp_path):
    if request.param == "memory":
        yield MemoryStore()
    else:
        store = SQLiteStore(tmp_path / "kv.db")
        yield store
        store.close()


class TestKeyValueStore:
    """Contract shared by every backend."""

    def test_missing_key_is_none(self, kv):
        assert kv.get(b"missing") is None

    def test_put_get(self, kv):
        kv.put(b"k", b"v")

        assert kv.get(b"k") == b"v"

    def test_put_overwrites(self, kv):
        kv.put(b"k", b"v1")
        kv.put(b"k", b"v2")

        assert kv.get(b"k") == b"v2"

    def test_delete(self, kv):
        kv.put(b"k", b"v")
        kv.delete(b"k")
        kv.delete(b"never-written")

        assert kv.get(b"k") is None

    def test_write_batch(self, kv):
        kv.write_batch([(b"a", b"1"), (b"b", b"2")])

        assert kv.get(b"a") == b"1"
        assert kv.get(b"b") == b"2"

    def test_binary_keys(self, kv):
        kv.put(b"\x00snapshot:t", b"\x00\xff")

        assert kv.get(b"\x00snapshot:t") == b"\x00\xff"
        assert kv.get(b"t") is None


class TestSQLiteStore:
    """SQLite-specific behavior."""

    def test_persists_across_reopen(self, tmp_path):
        path = tmp_path / "reopen.db"
        with SQLiteStore(path) as store:
            store.write_batch([(b"a", b"1"), (b"b", b"2")])

        with SQLiteStore(path) as store:
            assert store.get(b"a") == b"1"
            assert store.get(b"b") == b"2"

    def test_failed_batch_rolls_back(self, tmp_path):
        """A batch that fails part-way leaves no partial writes."""
        store = SQLiteStore(tmp_path / "atomic.db")
        store.put(b"a", b"old")
        store._conn = _FailAfterFirstRow(store._conn)

        with pytest.raises(sqlite3.OperationalError):
            store.write_batch([(b"a", b"new"), (b"b", b"2")])

        store._conn = store._conn.conn
        assert store.get(b"a") == b"old"
        assert store.get(b"b") is None
        store.close()

    def test_failed_commit_rolls_back(self, tmp_path):
        """A failed COMMIT does not leave the connection inside a transaction."""
        store = SQLiteStore(tmp_path / "commit.db")
        store._conn = _FailOnCommit(store._conn)

        with pytest.raises(sqlite3.OperationalError):
            store.write_batch([(b"a", b"1")])

        store._conn = store._conn.conn
        assert not store._conn.in_transaction
        assert store.get(b"a") is None
        store.write_batch([(b"b", b"2")])
        assert store.get(b"b") == b"2"
        store.close()

    def test_concurrent_batches_on_shared_store(self, tmp_path):
        """Batches from several threads never interleave on the shared connection."""
        store = SQLiteStore(tmp_path / "threads.db")

        def write(worker):
            for i in range(100):
                key = f"{worker}:{i}".encode()
                store.write_batch([(key, b"v"), (key + b":meta", b"m")])
            return worker

        with ThreadPoolExecutor(max_workers=4) as pool:
            finished = list(pool.map(write, range(4)))

        assert finished == [0, 1, 2, 3]
        assert store.get(b"3:99:meta") == b"m"
        store.close()

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "trees.db"
        with SQLiteStore(path) as store:
            store.put(b"k", b"v")

        assert path.exists()


class TestTreeStore:
    """Tests for the persistence adapter."""

    def test_metadata_absent(self, memory_store):
        assert TreeStore(memory_store).get_metadata("t") is None

    def test_metadata_round_trip(self, memory_store):
        store = TreeStore(memory_store)
        metadata = Metadata(root=sha256(b"r"), depth=5)

        store.put_metadata("t", metadata)

        assert store.get_metadata("t") == metadata
        assert memory_store.get(tree_key("t")) is not None

    def test_snapshot_round_trip(self, memory_store):
        store = TreeStore(memory_store)
        levels = build_tree(make_leaves(3), build_zero_hashes(2)).levels

        store.put_snapshot("t", levels)

        assert store.get_snapshot("t", 2) == levels
        assert store.get_snapshot("other", 2) is None

    def test_put_state_writes_both_records(self, memory_store):
        store = TreeStore(memory_store)
        tree = build_tree(make_leaves(2), build_zero_hashes(2))

        store.put_state("t", Metadata(root=tree.root, depth=2), tree.levels)

        assert store.get_metadata("t").root == tree.root
        assert store.get_snapshot("t", 2) == tree.levels

    def test_put_state_without_snapshot(self, memory_store):
        store = TreeStore(memory_store)

        store.put_state("t", Metadata(root=sha256(b"r"), depth=2))

        assert memory_store.get(snapshot_key("t")) is None
        assert store.get_metadata("t") is not None

    def test_write_failure_wrapped(self):
        failing = FailingStore()
        failing.fail_writes = True
        store = TreeStore(failing)

        with pytest.raises(PersistenceError) as exc_info:
            store.put_state("t", Metadata(root=sha256(b"r"), depth=2), [[], [], [sha256(b"r")]])

        assert exc_info.value.retryable
        assert exc_info.value.details["operation"] == "put_state"
        assert isinstance(exc_info.value.__cause__, OSError)
        assert len(failing) == 0

    def test_read_failure_wrapped(self):
        failing = FailingStore()
        failing.fail_reads = True

        with pytest.raises(PersistenceError):
            TreeStore(failing).get_metadata("t")


class TestOpenStore:
    """Tests for open_store()."""

    def test_memory_backend(self):
        assert isinstance(open_store(StorageConfig(backend="memory")), MemoryStore)

    def test_sqlite_backend(self, tmp_path):
        store = open_store(StorageConfig(backend="sqlite", path=str(tmp_path / "x.db")))
        try:
            assert isinstance(store, SQLiteStore)
        finally:
            store.close()

    def test_unknown_backend(self):
        with pytest.raises(ConfigError):
            open_store(StorageConfig(backend="redis"))
