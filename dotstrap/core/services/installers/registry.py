"""
Installer registry: the ordered task list for each platform.

Order matters and is preserved exactly: archive/JSON helpers first,
the login shell last so a failure earlier never leaves the user in
a half-configured shell.
"""

from __future__ import annotations

from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import InstallerTask, TaskContext
from dotstrap.core.services.installers import fedora, mac, ubuntu

REGISTRY: dict[Platform, list[type[InstallerTask]]] = {
    Platform.UBUNTU: ubuntu.TASKS,
    Platform.FEDORA: fedora.TASKS,
    Platform.MAC: mac.TASKS,
}


def task_classes(platform: Platform) -> list[type[InstallerTask]]:
    """Task classes for ``platform``, in run order."""
    return list(REGISTRY[platform])


def installers_for(platform: Platform, ctx: TaskContext) -> list[InstallerTask]:
    """Fresh task instances for ``platform``, in run order.

    Each call builds new instances; tasks never share mutable state.
    """
    return [cls(ctx) for cls in task_classes(platform)]
