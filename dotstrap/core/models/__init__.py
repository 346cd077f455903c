"""
Domain models: pydantic records and the installer task contract.

All models are re-exported here for convenient access:

    from dotstrap.core.models import FileMapping, LogEvent, Platform, InstallerTask
"""

from dotstrap.core.models.event import EventKind, Level, LogEvent
from dotstrap.core.models.mapping import FileMapping
from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import InstallerTask, TaskContext

__all__ = [
    "EventKind",
    "FileMapping",
    "InstallerTask",
    "Level",
    "LogEvent",
    "Platform",
    "TaskContext",
]
