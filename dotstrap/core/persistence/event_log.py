"""
Event log: append-only JSONL sink for the step log.

Every structured record becomes one JSON line.  The file and its
parent directory are created on the first write; entries are never
modified or deleted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from dotstrap.core.models.event import LogEvent

logger = logging.getLogger(__name__)


class EventLogWriter:
    """Append-only JSONL writer.

    Write failures propagate: a run whose machine-readable log cannot
    be written is a failed run.
    """

    def __init__(self, path: Path):
        self._path = path
        self._ready = False

    @property
    def path(self) -> Path:
        return self._path

    def write(self, event: LogEvent) -> None:
        """Append one record."""
        if not self._ready:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._ready = True

        line = json.dumps(event.to_record(), ensure_ascii=False) + "\n"
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line)

    def read_all(self) -> list[LogEvent]:
        """Read all records, oldest first.  Corrupt lines are skipped."""
        if not self._path.is_file():
            return []

        events: list[LogEvent] = []
        with self._path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(LogEvent.model_validate(json.loads(line)))
                except ValueError as e:
                    logger.warning("Skipping corrupt log record at line %d: %s", line_num, e)
        return events

    def read_recent(self, n: int = 20) -> list[LogEvent]:
        """Read the most recent N records."""
        return self.read_all()[-n:] if n > 0 else []
