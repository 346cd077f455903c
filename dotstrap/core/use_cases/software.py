"""
Software use case: install the platform's tool list.

    settings → detect platform → registry → orchestrator → report
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotstrap.adapters.shell.command import CommandRunner
from dotstrap.adapters.shell.filesystem import ensure_dir
from dotstrap.core.config.loader import Settings
from dotstrap.core.engine.orchestrator import InstallerRunError, RunReport, run_tasks
from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import TaskContext
from dotstrap.core.observability.step_log import StepLogger, get_step_logger
from dotstrap.core.services.detection import detect_machine, detect_platform
from dotstrap.core.services.installers.registry import installers_for, task_classes

logger = logging.getLogger(__name__)

SOFTWARE_STEP = "install-software"

# Stray ``env`` scripts here shadow /usr/bin/env for installer shebangs.
ENV_SHIMS: tuple[str, ...] = (".local/bin/env", ".deno/env")


@dataclass
class SoftwareResult:
    """Result of installing software."""

    platform: Platform | None = None
    machine: str = ""
    report: RunReport | None = None
    warnings: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.platform is not None:
            result["platform"] = self.platform.value
        result["machine"] = self.machine
        if self.warnings:
            result["warnings"] = self.warnings
        if self.report is not None:
            result["report"] = self.report.to_dict()
        return result


def build_context(
    settings: Settings,
    *,
    runner: CommandRunner | None = None,
    log: StepLogger | None = None,
    platform: Platform | None = None,
    machine: str | None = None,
) -> TaskContext:
    """Assemble the shared task context, detecting what is not given."""
    return TaskContext(
        settings=settings,
        runner=runner or CommandRunner(verbose=not settings.quiet),
        log=log or get_step_logger(),
        platform=platform or detect_platform(),
        machine=machine or detect_machine(),
    )


def find_env_shims(home: Path) -> list[Path]:
    """User-level ``env`` files that may shadow the system one."""
    return [home / rel for rel in ENV_SHIMS if (home / rel).is_file()]


def install_software(
    settings: Settings,
    *,
    runner: CommandRunner | None = None,
    log: StepLogger | None = None,
    platform: Platform | None = None,
    machine: str | None = None,
) -> SoftwareResult:
    """Run every installer task for the detected platform.

    Stops at the first failing task; ``result.report`` then shows
    which tasks succeeded, which failed and which never began.
    """
    ctx = build_context(settings, runner=runner, log=log, platform=platform, machine=machine)
    result = SoftwareResult(platform=ctx.platform, machine=ctx.machine)

    ensure_dir(ctx.bin_dir)
    tasks = installers_for(ctx.platform, ctx)

    try:
        with ctx.log.step(SOFTWARE_STEP):
            ctx.log.info(SOFTWARE_STEP, f"detected OS: {ctx.platform.value} ({ctx.machine})")

            for shim in find_env_shims(settings.home):
                message = f"found '{shim}' which may shadow system env; installers may fail"
                ctx.log.warn(SOFTWARE_STEP, message)
                result.warnings.append(message)

            result.report = run_tasks(tasks, ctx.log)
    except InstallerRunError as e:
        result.report = e.report
        result.error = str(e)

    return result


def list_software(settings: Settings, platform: Platform | None = None) -> list[dict]:
    """Describe the task list for ``platform`` without running anything."""
    platform = platform or detect_platform()
    skip = set(settings.skip)
    return [
        {
            "name": cls.name,
            "tool": cls.tool,
            "binary": cls.binary,
            "skipped": cls.name in skip or cls.tool in skip,
        }
        for cls in task_classes(platform)
    ]
