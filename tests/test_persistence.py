"""
Tests for persistence — the JSONL event log.
"""

import json
from pathlib import Path

from dotstrap.core.models.event import EventKind, Level, LogEvent
from dotstrap.core.persistence.event_log import EventLogWriter


class TestEventLogWriter:
    """Tests for the append-only event log."""

    def test_write_creates_parent_dirs(self, tmp_path: Path):
        path = tmp_path / ".logs" / "nested" / "install.jsonl"
        writer = EventLogWriter(path)
        writer.write(LogEvent(step="link", msg="start"))
        assert path.is_file()
        assert writer.path == path

    def test_one_json_object_per_line(self, tmp_path: Path):
        path = tmp_path / "install.jsonl"
        writer = EventLogWriter(path)
        writer.write(LogEvent(ev=EventKind.STEP_BEGIN, step="a"))
        writer.write(LogEvent(ev=EventKind.STEP_END, step="a", ok=True, code=0, duration_ms=3))

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        first, second = (json.loads(line) for line in lines)
        assert first["ev"] == "step_begin"
        assert "msg" not in first
        assert second["ok"] is True
        assert second["duration_ms"] == 3

    def test_appends_across_writers(self, tmp_path: Path):
        path = tmp_path / "install.jsonl"
        EventLogWriter(path).write(LogEvent(msg="one"))
        EventLogWriter(path).write(LogEvent(msg="two"))
        assert [e.msg for e in EventLogWriter(path).read_all()] == ["one", "two"]

    def test_non_ascii_kept(self, tmp_path: Path):
        path = tmp_path / "install.jsonl"
        EventLogWriter(path).write(LogEvent(msg="café ✓"))
        assert "café ✓" in path.read_text(encoding="utf-8")

    def test_read_missing_file(self, tmp_path: Path):
        assert EventLogWriter(tmp_path / "absent.jsonl").read_all() == []

    def test_read_skips_corrupt_lines(self, tmp_path: Path):
        path = tmp_path / "install.jsonl"
        writer = EventLogWriter(path)
        writer.write(LogEvent(msg="good", lvl=Level.WARN))
        with path.open("a") as f:
            f.write("{not json\n\n")
            f.write('{"lvl": "LOUD"}\n')
        writer.write(LogEvent(msg="also good"))

        events = writer.read_all()
        assert [e.msg for e in events] == ["good", "also good"]
        assert events[0].lvl == Level.WARN

    def test_read_recent(self, tmp_path: Path):
        writer = EventLogWriter(tmp_path / "install.jsonl")
        for i in range(5):
            writer.write(LogEvent(msg=str(i)))
        assert [e.msg for e in writer.read_recent(2)] == ["3", "4"]
        assert writer.read_recent(0) == []
        assert len(writer.read_recent(50)) == 5
