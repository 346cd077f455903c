"""
Install use case: the full bootstrap.

    link dotfiles → install software → reload hint

Dotfiles go first so the freshly installed shell starts with the
right configuration.  A linking failure stops the run before any
package is installed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotstrap.adapters.shell.command import CommandRunner
from dotstrap.core.config.loader import Settings
from dotstrap.core.models.platform import Platform
from dotstrap.core.observability.step_log import StepLogger
from dotstrap.core.services.installers.toolkit import login_shell
from dotstrap.core.use_cases.dotfiles import DotfilesResult, link_dotfiles
from dotstrap.core.use_cases.software import SoftwareResult, build_context, install_software

logger = logging.getLogger(__name__)


def reload_hint(shell: str) -> str:
    """Command that picks up the new configuration in ``shell``."""
    name = os.path.basename(shell.strip()) if shell else ""
    if name == "fish":
        return "exec fish"
    if name == "zsh":
        return "source ~/.zshrc"
    if name == "bash":
        return "source ~/.bashrc"
    return "exec $SHELL -l"


@dataclass
class InstallResult:
    """Result of the full bootstrap."""

    dotfiles: DotfilesResult | None = None
    software: SoftwareResult | None = None
    hint: str = ""
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.dotfiles is not None:
            result["dotfiles"] = self.dotfiles.to_dict()
        if self.software is not None:
            result["software"] = self.software.to_dict()
        if self.hint:
            result["hint"] = self.hint
        return result


def run_install(
    settings: Settings,
    *,
    runner: CommandRunner | None = None,
    log: StepLogger | None = None,
    platform: Platform | None = None,
    machine: str | None = None,
) -> InstallResult:
    """Link dotfiles, then install the platform's tools."""
    ctx = build_context(settings, runner=runner, log=log, platform=platform, machine=machine)
    result = InstallResult()

    result.dotfiles = link_dotfiles(settings, ctx.platform, ctx.log)
    if result.dotfiles.error:
        result.error = result.dotfiles.error
        return result

    result.software = install_software(
        settings,
        runner=ctx.runner,
        log=ctx.log,
        platform=ctx.platform,
        machine=ctx.machine,
    )
    if result.software.error:
        result.error = result.software.error
        return result

    result.hint = reload_hint(login_shell(ctx))
    return result
