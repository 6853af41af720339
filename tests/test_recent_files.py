"""
Unit tests for the recent_files module.

Tests list ordering rules and tolerant loading of the JSON store.
"""

import json

from PX_Libs.ProjStoreLib.recent_files import RecentFilesStore, add_recent_file


class TestAddRecentFile:
    """Tests for add_recent_file function."""

    def test_moves_existing_to_front(self):
        """Should de-duplicate and put the path first."""
        assert add_recent_file(["b.png", "a.png", "c.png"], "a.png") == ["a.png", "b.png", "c.png"]

    def test_caps_length(self):
        """Should keep at most limit entries."""
        files = [f"{i}.png" for i in range(10)]
        result = add_recent_file(files, "new.png")
        assert len(result) == 10
        assert result[0] == "new.png"
        assert "9.png" not in result

    def test_does_not_mutate_input(self):
        """Should return a new list."""
        files = ["a.png"]
        add_recent_file(files, "b.png")
        assert files == ["a.png"]


class TestRecentFilesStore:
    """Tests for the RecentFilesStore class."""

    def test_missing_file_is_empty(self, data_dir):
        """Should read a missing store as an empty list."""
        assert RecentFilesStore(data_dir).load() == []

    def test_save_creates_directory(self, data_dir):
        """Should create the data directory and write a JSON array."""
        store = RecentFilesStore(data_dir)
        store.save(["/x.png"])
        assert json.loads(store.path.read_text()) == ["/x.png"]

    def test_malformed_json_is_empty(self, data_dir):
        """Should read invalid JSON as an empty list."""
        data_dir.mkdir()
        (data_dir / "recent_files.json").write_text("{not json")
        assert RecentFilesStore(data_dir).load() == []

    def test_non_list_payload_is_empty(self, data_dir):
        """Should ignore a payload that is not a list."""
        data_dir.mkdir()
        (data_dir / "recent_files.json").write_text('{"files": []}')
        assert RecentFilesStore(data_dir).load() == []

    def test_non_string_entries_dropped(self, data_dir):
        """Should keep only string entries."""
        data_dir.mkdir()
        (data_dir / "recent_files.json").write_text('["/a.png", 3, null, "/b.png"]')
        assert RecentFilesStore(data_dir).load() == ["/a.png", "/b.png"]

    def test_load_add_save_cycle(self, data_dir):
        """Should keep newest first across reloads."""
        for path in ("/a.png", "/b.png", "/a.png"):
            store = RecentFilesStore(data_dir)
            store.save(add_recent_file(store.load(), path))
        assert RecentFilesStore(data_dir).load() == ["/a.png", "/b.png"]
