"""
Tests for the key-value stores.

Tests cover:
1. Memory store semantics (get/set/delete/keys/all/clear)
2. File store persistence through fsspec
3. Corrupt data and I/O failures surfacing as StoreError
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netspace.errors import StoreError
from netspace.storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path) -> KeyValueStore:
    """Each store implementation, empty."""
    if request.param == "memory":
        return MemoryKeyValueStore("node_geosub")
    return FileKeyValueStore("node_geosub", str(tmp_path / "stores"))


# =============================================================================
# Test: Shared contract
# =============================================================================

class TestKeyValueStoreContract:
    """Behaviour every store must share."""

    def test_get_missing_returns_none(self, store):
        assert store.get("missing") is None

    def test_set_then_get(self, store):
        store.set("alpha", {"host": "alpha.example.org", "state": 1})
        assert store.get("alpha") == {"host": "alpha.example.org", "state": 1}

    def test_set_overwrites(self, store):
        store.set("alpha", {"state": 1})
        store.set("alpha", {"state": 2})
        assert store.get("alpha") == {"state": 2}
        assert store.keys() == ["alpha"]

    def test_delete(self, store):
        store.set("alpha", {"state": 1})
        store.delete("alpha")
        assert store.get("alpha") is None
        assert store.keys() == []

    def test_delete_missing_is_noop(self, store):
        store.set("alpha", {"state": 1})
        store.delete("missing")
        assert store.keys() == ["alpha"]

    def test_keys_in_insertion_order(self, store):
        for name in ["charlie", "alpha", "bravo"]:
            store.set(name, {"n": name})
        assert store.keys() == ["charlie", "alpha", "bravo"]

    def test_all(self, store):
        store.set("alpha", {"n": 1})
        store.set("bravo", {"n": 2})
        assert store.all() == {"alpha": {"n": 1}, "bravo": {"n": 2}}
        assert list(store.all().keys()) == ["alpha", "bravo"]

    def test_clear(self, store):
        store.set("alpha", {"n": 1})
        store.set("bravo", {"n": 2})
        store.clear()
        assert store.keys() == []
        assert store.get("alpha") is None

    def test_returned_values_are_not_live(self, store):
        """Mutating a returned value does not change the store."""
        store.set("alpha", {"n": 1})
        value = store.get("alpha")
        value["n"] = 99
        assert store.get("alpha") == {"n": 1}


# =============================================================================
# Test: File store
# =============================================================================

class TestFileKeyValueStore:
    """fsspec-backed flat-file store."""

    def test_creates_directory(self, tmp_path):
        directory = tmp_path / "a" / "b"
        FileKeyValueStore("node_geotop", str(directory))
        assert directory.is_dir()

    def test_data_file_name(self, tmp_path):
        store = FileKeyValueStore("node_geotop", str(tmp_path))
        store.set("alpha__esusx", {"geosub": "esusx"})
        assert (tmp_path / "node_geotop.dat").exists()
        assert not (tmp_path / "node_geotop.dat.tmp").exists()

    def test_persists_across_instances(self, tmp_path):
        FileKeyValueStore("node_geosub", str(tmp_path)).set("alpha", {"state": 1})

        reopened = FileKeyValueStore("node_geosub", str(tmp_path))
        assert reopened.get("alpha") == {"state": 1}

    def test_sees_writes_from_other_instances(self, tmp_path):
        """Nothing is cached between calls."""
        first = FileKeyValueStore("node_geosub", str(tmp_path))
        second = FileKeyValueStore("node_geosub", str(tmp_path))

        first.set("alpha", {"state": 1})
        assert second.keys() == ["alpha"]

    def test_separate_names_are_separate_stores(self, tmp_path):
        gsn = FileKeyValueStore("node_geosub", str(tmp_path))
        gtn = FileKeyValueStore("node_geotop", str(tmp_path))

        gsn.set("alpha", {"state": 1})
        assert gtn.keys() == []

    def test_keys_with_separators_and_unicode(self, tmp_path):
        store = FileKeyValueStore("node_geotop", str(tmp_path))
        store.set("alpha__esusx", {"host": "ünï.example.org"})
        store.set("key=with=equals", {"n": 1})

        reopened = FileKeyValueStore("node_geotop", str(tmp_path))
        assert reopened.keys() == ["alpha__esusx", "key=with=equals"]
        assert reopened.get("alpha__esusx") == {"host": "ünï.example.org"}

    def test_clear_removes_file(self, tmp_path):
        store = FileKeyValueStore("node_geosub", str(tmp_path))
        store.set("alpha", {"state": 1})
        store.clear()
        assert not (tmp_path / "node_geosub.dat").exists()

    def test_clear_without_file(self, tmp_path):
        store = FileKeyValueStore("node_geosub", str(tmp_path))
        store.clear()
        assert store.keys() == []

    def test_corrupt_file_raises_store_error(self, tmp_path):
        (tmp_path / "node_geosub.dat").write_text("this is not json\n", encoding="utf-8")
        store = FileKeyValueStore("node_geosub", str(tmp_path))

        with pytest.raises(StoreError, match="line 1"):
            store.keys()

    def test_undecodable_file_raises_store_error(self, tmp_path):
        (tmp_path / "node_geosub.dat").write_bytes(b'{"key": "a\xff", "value": {}}\n')
        store = FileKeyValueStore("node_geosub", str(tmp_path))

        with pytest.raises(StoreError, match="UTF-8"):
            store.keys()

    def test_failed_write_leaves_no_temp_file(self, tmp_path):
        store = FileKeyValueStore("node_geosub", str(tmp_path))
        store.set("alpha", {"state": 1})

        with pytest.raises(StoreError):
            store.set("beta", {"state": object()})

        assert not (tmp_path / "node_geosub.dat.tmp").exists()
        assert store.all() == {"alpha": {"state": 1}}

    def test_blank_lines_ignored(self, tmp_path):
        (tmp_path / "node_geosub.dat").write_text(
            '\n{"key": "alpha", "value": {"state": 1}}\n\n', encoding="utf-8"
        )
        store = FileKeyValueStore("node_geosub", str(tmp_path))
        assert store.all() == {"alpha": {"state": 1}}

    def test_unwritable_directory_raises_store_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(StoreError):
            FileKeyValueStore("node_geosub", str(blocker / "stores"))
