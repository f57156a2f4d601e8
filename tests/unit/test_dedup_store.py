"""
Unit tests for the seen-ids / seen-registrations store.
"""

import json

from src.store.dedup import DedupStore
from src.store.file_manager import CampaignPaths


class TestDedupStore:
    """Tests for DedupStore."""

    def _store(self, data_dir):
        paths = CampaignPaths(data_dir, data_dir / "audit", "5 Series")
        return DedupStore.for_paths(paths), paths

    def test_missing_files_load_empty(self, data_dir):
        """A first run starts with empty sets."""
        store, _ = self._store(data_dir)
        store.load()
        assert store.ids == []
        assert store.registrations == []

    def test_persist_and_reload(self, data_dir):
        """Added entries survive a persist/load cycle."""
        store, paths = self._store(data_dir)
        store.load()
        store.add_id("abc")
        store.add_registration("AB12 CDE")
        store.persist()

        assert paths.seen_ids.name == "seen_vehicles_5_Series.json"
        assert json.loads(paths.seen_ids.read_text()) == ["abc"]

        reloaded, _ = self._store(data_dir)
        reloaded.load()
        assert reloaded.contains_id("abc")
        assert reloaded.contains_registration("AB12 CDE")

    def test_ids_normalized_on_load(self, data_dir):
        """Persisted ids with a query string are matched without it."""
        _, paths = self._store(data_dir)
        paths.seen_ids.write_text(json.dumps(["abc?ref=1", "abc", "def"]))
        store, _ = self._store(data_dir)
        store.load()

        assert store.ids == ["abc", "def"]
        assert store.contains_id("abc?other=2")

    def test_add_is_idempotent(self, data_dir):
        """Adding the same value twice keeps one entry."""
        store, _ = self._store(data_dir)
        store.add_id("x")
        store.add_id("x")
        store.add_registration(" R1 ")
        store.add_registration("R1")
        assert store.ids == ["x"]
        assert store.registrations == ["R1"]

    def test_blank_values_ignored(self, data_dir):
        """Empty ids and registrations are never stored or matched."""
        store, _ = self._store(data_dir)
        store.add_id("")
        store.add_registration(None)
        assert store.ids == []
        assert store.registrations == []
        assert not store.contains_registration("")

    def test_corrupt_file_loads_empty(self, data_dir):
        """An unparseable file is treated as empty."""
        _, paths = self._store(data_dir)
        paths.seen_registrations.write_text("{not json")
        store, _ = self._store(data_dir)
        store.load()
        assert store.registrations == []
