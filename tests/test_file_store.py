# tests/test_file_store.py
"""
File Store Tests - Keyed JSON Document Persistence

Covers missing and corrupt documents, atomic saves and deletion.
"""
import pytest

from parkchain.adapters.persistence.file_store import TRANSACTIONS_KEY, JsonFileStore
from parkchain.domain.errors import StorageError


class TestJsonFileStore:
    def test_load_missing_returns_default(self, store):
        assert store.load("nothing_here", default=[]) == []
        assert store.load("nothing_here") is None

    def test_save_then_load(self, store):
        store.save(TRANSACTIONS_KEY, [{"id": "tx_1", "amount": 5.0}])
        assert store.load(TRANSACTIONS_KEY) == [{"id": "tx_1", "amount": 5.0}]
        assert store.path_for(TRANSACTIONS_KEY).name == "parkchain_gateway_transactions.json"

    def test_save_replaces_whole_document(self, store):
        store.save("doc", {"a": 1, "b": 2})
        store.save("doc", {"c": 3})
        assert store.load("doc") == {"c": 3}

    def test_corrupt_document_is_backed_up(self, store):
        path = store.path_for("doc")
        path.write_text("{not json", encoding="utf-8")

        assert store.load("doc", default={"fallback": True}) == {"fallback": True}
        assert not path.exists()
        backup = path.with_suffix(".json.corrupt")
        assert backup.exists()
        assert backup.read_text(encoding="utf-8") == "{not json"

    def test_unserializable_value_raises_and_leaves_no_temp_files(self, store):
        store.save("doc", {"ok": True})
        with pytest.raises(StorageError, match="doc"):
            store.save("doc", {"bad": object()})

        assert store.load("doc") == {"ok": True}
        assert list(store.data_dir.glob("*.tmp")) == []

    def test_delete(self, store):
        store.save("doc", [1, 2, 3])
        store.delete("doc")
        assert store.load("doc", default="gone") == "gone"
        # Deleting again is a no-op
        store.delete("doc")

    def test_creates_data_dir(self, tmp_path):
        target = tmp_path / "nested" / "dir"
        JsonFileStore(target)
        assert target.is_dir()
