"""
API Smoke Tests

Tests for the FastAPI endpoints:
1. GET /health returns ok
2. POST /trees creates and restores trees
3. PUT /trees/{name}/leaves/{index} updates roots
4. GET /trees/{name}/hash-path/{index} returns a path that compresses to the root
5. POST /trees/{name}/verify checks paths
6. Errors map to structured JSON with the right status codes
7. Updates to different trees can run in parallel on one SQLite store
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from api.app import app
from api.deps import TreeRegistry, set_registry
from core.config.runtime import RuntimeConfig, TreeConfig
from core.crypto.hashing import from_hex, to_hex
from core.merkle import HashPath, build_zero_hashes
from core.storage import MemoryStore, SQLiteStore
from fixtures import FailingStore, make_leaf


# Create test client
client = TestClient(app)


@pytest.fixture(autouse=True)
def registry():
    """Serve every test from a fresh in-memory registry."""
    reg = TreeRegistry(MemoryStore(), RuntimeConfig(tree=TreeConfig(depth=4)))
    set_registry(reg)
    yield reg
    set_registry(None)


def _create(name: str = "t", depth: int | None = 3) -> dict:
    response = client.post("/trees", json={"name": name, "depth": depth})
    assert response.status_code == 200
    return response.json()


class TestHealth:
    """Tests for GET /health."""

    def test_health(self):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"ok": True, "service": "hashpath-api", "version": "v1"}


class TestTrees:
    """Tests for tree creation and lookup."""

    def test_create(self):
        data = _create(depth=3)

        assert data["ok"] is True
        assert data["depth"] == 3
        assert data["root"] == to_hex(build_zero_hashes(3)[3])

    def test_create_uses_config_depth(self):
        data = _create(name="cfg", depth=None)

        assert data["depth"] == 4

    def test_create_twice_restores(self):
        _create(depth=3)

        data = _create(depth=8)

        assert data["depth"] == 3

    def test_get(self):
        created = _create()

        response = client.get("/trees/t")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_tree(self):
        response = client.get("/trees/missing")

        assert response.status_code == 404
        body = response.json()
        assert body["ok"] is False
        assert body["error"]["code"] == "TREE_NOT_FOUND"

    def test_invalid_depth(self):
        response = client.post("/trees", json={"name": "t", "depth": 0})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "CONFIG_ERROR"

    def test_tree_restored_from_store(self, registry):
        """A tree created earlier is found after the registry forgets it."""
        _create()
        fresh = TreeRegistry(registry.kv, registry.config)
        set_registry(fresh)

        response = client.get("/trees/t")

        assert response.status_code == 200
        assert response.json()["depth"] == 3


class TestLeaves:
    """Tests for PUT /trees/{name}/leaves/{index}."""

    def test_update(self):
        created = _create()

        response = client.put("/trees/t/leaves/2", json={"value": to_hex(make_leaf(2))})

        assert response.status_code == 200
        data = response.json()
        assert data["index"] == 2
        assert data["previous_root"] == created["root"]
        assert data["root"] != created["root"]
        assert client.get("/trees/t").json()["root"] == data["root"]

    def test_update_utf8(self):
        _create()

        response = client.put("/trees/t/leaves/0", json={"value": "hello", "encoding": "utf8"})

        assert response.status_code == 200

    def test_update_out_of_range(self):
        _create(depth=2)

        response = client.put("/trees/t/leaves/4", json={"value": to_hex(make_leaf(1))})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "OUT_OF_RANGE"
        assert error["details"]["index"] == 4

    def test_update_wrong_size(self):
        _create()

        response = client.put("/trees/t/leaves/0", json={"value": "0xabcd"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_LEAF_SIZE"

    def test_update_bad_hex(self):
        _create()

        response = client.put("/trees/t/leaves/0", json={"value": "0xzz"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_update_unknown_tree(self):
        response = client.put("/trees/missing/leaves/0", json={"value": to_hex(make_leaf(1))})

        assert response.status_code == 404

    def test_persistence_failure(self):
        failing = FailingStore()
        set_registry(TreeRegistry(failing))
        _create()
        root = client.get("/trees/t").json()["root"]
        failing.fail_writes = True

        response = client.put("/trees/t/leaves/0", json={"value": to_hex(make_leaf(1))})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "PERSISTENCE_ERROR"
        assert client.get("/trees/t").json()["root"] == root


class TestHashPaths:
    """Tests for hash path retrieval and verification."""

    def test_hash_path_compresses_to_root(self):
        _create()
        client.put("/trees/t/leaves/5", json={"value": to_hex(make_leaf(5))})

        response = client.get("/trees/t/hash-path/5")

        assert response.status_code == 200
        data = response.json()
        assert data["depth"] == 3
        path = HashPath.from_dict(data)
        assert to_hex(path.compute_root()) == data["root"]

    def test_hash_path_out_of_range(self):
        _create(depth=2)

        response = client.get("/trees/t/hash-path/4")

        assert response.status_code == 400

    def test_verify(self):
        _create()
        leaf = make_leaf(5)
        client.put("/trees/t/leaves/5", json={"value": to_hex(leaf)})
        pairs = client.get("/trees/t/hash-path/5").json()["pairs"]

        good = client.post("/trees/t/verify", json={"index": 5, "value": to_hex(leaf), "pairs": pairs})
        bad = client.post("/trees/t/verify", json={"index": 5, "value": to_hex(make_leaf(6)), "pairs": pairs})

        assert good.status_code == 200
        assert good.json()["valid"] is True
        assert bad.json()["valid"] is False

    def test_verify_against_explicit_root(self):
        _create()
        leaf = make_leaf(1)
        client.put("/trees/t/leaves/1", json={"value": to_hex(leaf)})
        issued = client.get("/trees/t/hash-path/1").json()
        client.put("/trees/t/leaves/2", json={"value": to_hex(make_leaf(2))})

        response = client.post("/trees/t/verify", json={
            "index": 1,
            "value": to_hex(leaf),
            "pairs": issued["pairs"],
            "root": issued["root"],
        })

        assert response.json()["valid"] is True
        assert from_hex(response.json()["root"]) == from_hex(issued["root"])

    def test_verify_malformed_pairs(self):
        _create()

        response = client.post("/trees/t/verify", json={
            "index": 0,
            "value": to_hex(make_leaf(0)),
            "pairs": [["0x00", "0x00"]],
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "HASH_PATH_INVALID"


class TestRegistryConcurrency:
    """Parallel requests against different trees in one registry."""

    def test_parallel_updates_on_distinct_trees(self, tmp_path):
        kv = SQLiteStore(tmp_path / "api.db")
        reg = TreeRegistry(kv, RuntimeConfig(tree=TreeConfig(depth=8)))
        names = ["a", "b", "c", "d"]
        for name in names:
            reg.open(name)

        def worker(name):
            for i in range(100):
                with reg.lock(name):
                    reg.get(name).update_element(i, make_leaf(f"{name}:{i}"))
            return reg.get(name).get_root()

        with ThreadPoolExecutor(max_workers=len(names)) as pool:
            roots = dict(zip(names, pool.map(worker, names)))

        fresh = TreeRegistry(kv)
        for name in names:
            assert fresh.get(name).get_root() == roots[name]
            path = fresh.get(name).get_hash_path(99)
            assert path.compute_root() == roots[name]
        kv.close()
