"""
Unit tests for the reprocess queue.
"""

from src.store.reprocess_queue import QueuedListing, ReprocessQueue, parse_line


class TestParseLine:
    """Tests for parse_line function."""

    def test_valid_line(self):
        assert parse_line("abc — https://x.example/vehicle/abc\n") == QueuedListing("abc", "https://x.example/vehicle/abc")

    def test_invalid_lines(self):
        assert parse_line("") is None
        assert parse_line("abc https://x.example") is None
        assert parse_line(" — https://x.example") is None


class TestReprocessQueue:
    """Tests for ReprocessQueue."""

    def test_enqueue_and_read(self, data_dir):
        """Entries are read back in order."""
        queue = ReprocessQueue(data_dir / "reprocess_queue.txt")
        queue.enqueue("a", "https://x.example/vehicle/a")
        queue.enqueue("b", "https://x.example/vehicle/b")

        assert queue.read() == [
            QueuedListing("a", "https://x.example/vehicle/a"),
            QueuedListing("b", "https://x.example/vehicle/b"),
        ]
        assert (data_dir / "reprocess_queue.txt").read_text("utf-8").splitlines()[0] == "a — https://x.example/vehicle/a"

    def test_duplicates_collapsed(self, data_dir):
        queue = ReprocessQueue(data_dir / "q.txt")
        queue.enqueue("a", "https://x.example/vehicle/a")
        queue.enqueue("a", "https://x.example/vehicle/a")
        assert len(queue) == 1

    def test_malformed_lines_skipped(self, data_dir):
        path = data_dir / "q.txt"
        path.write_text("garbage\n\nc — https://x.example/vehicle/c\n", "utf-8")
        assert ReprocessQueue(path).read() == [QueuedListing("c", "https://x.example/vehicle/c")]

    def test_clear(self, data_dir):
        queue = ReprocessQueue(data_dir / "q.txt")
        queue.enqueue("a", "https://x.example/vehicle/a")
        queue.clear()
        assert queue.read() == []
        queue.clear()

    def test_missing_file_is_empty(self, data_dir):
        assert ReprocessQueue(data_dir / "none.txt").read() == []
