"""
Installer task contract: the interface between the orchestrator and tools.

The orchestrator only talks to tasks through this protocol:

    should_run() → pre() → run() → post()

Tasks do NOT inherit platform helpers.  Package-manager primitives,
fallback chains and verification are free functions in
``dotstrap.core.services.installers`` that a task composes.

To create a new task:
    1. Subclass InstallerTask
    2. Set ``name``, ``tool`` and ``binary``
    3. Implement run() (and pre()/post() when the defaults don't fit)
    4. Add it to the platform list in the installer registry
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from dotstrap.adapters.shell.filesystem import ensure_dir
from dotstrap.core.models.platform import Platform

if TYPE_CHECKING:
    from dotstrap.adapters.shell.command import CommandRunner
    from dotstrap.core.config.loader import Settings
    from dotstrap.core.observability.step_log import StepLogger


@dataclass
class TaskContext:
    """Everything a task needs to do its work.

    Read-only for tasks: one context is shared by every task of a run.
    """

    settings: Settings
    runner: CommandRunner
    log: StepLogger
    platform: Platform
    machine: str = "x86_64"

    @property
    def home(self) -> Path:
        return self.settings.home

    @property
    def bin_dir(self) -> Path:
        """User-local bin directory for binaries installed without root."""
        return self.settings.home / ".local" / "bin"

    @property
    def fzf_dir(self) -> Path:
        """Checkout used by the upstream fzf installer."""
        return self.settings.home / ".fzf"

    @property
    def extra_paths(self) -> list[Path]:
        """Directories prefixed onto the search path for detection."""
        return [self.bin_dir, self.fzf_dir / "bin"]


class InstallerTask(ABC):
    """Abstract base class for one tool's install procedure on one platform.

    ``run()`` must be idempotent: check whether the tool is already
    there before changing anything.  ``post()`` must raise if the tool
    is not usable afterwards.
    """

    name: ClassVar[str] = ""
    tool: ClassVar[str] = ""
    binary: ClassVar[str] = ""

    def __init__(self, ctx: TaskContext):
        self.ctx = ctx

    @property
    def step(self) -> str:
        """Log step key for this task."""
        return f"install-{self.name}"

    def should_run(self) -> bool:
        """False when the task or its tool is in the configured skip set."""
        skip = self.ctx.settings.skip
        return self.name not in skip and self.tool not in skip

    def pre(self) -> None:
        """Idempotent preparation.  Default: create the user-local bin dir."""
        ensure_dir(self.ctx.bin_dir)

    @abstractmethod
    def run(self) -> None:
        """Install the tool unless it is already present."""

    def post(self) -> None:
        """Verify ``binary`` resolves on the search path."""
        from dotstrap.core.services.installers.fallback import verify_on_path

        verify_on_path(self.ctx, self.binary)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
