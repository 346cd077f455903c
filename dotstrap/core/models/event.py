"""
LogEvent: one structured record of the step log.

Serialized as one JSON object per line.  Optional fields that are
unset are left out of the line, so a ``log`` record carries no
``ok``/``duration_ms`` and a ``step_begin`` carries no ``msg``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

SCHEMA_VERSION = 1


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Level(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class EventKind(str, Enum):
    STEP_BEGIN = "step_begin"
    STEP_END = "step_end"
    LOG = "log"


class LogEvent(BaseModel):
    """A single step-log record."""

    ts: str = Field(default_factory=_now_iso)
    lvl: Level = Level.INFO
    ev: EventKind = EventKind.LOG
    step: str | None = None
    msg: str | None = None
    ok: bool | None = None
    code: int | None = None
    duration_ms: int | None = None
    component: str = "dotstrap"
    version: int = SCHEMA_VERSION
    error: str | None = None

    def to_record(self) -> dict:
        """JSON-ready dict without the unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)
