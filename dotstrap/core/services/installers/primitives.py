"""
Platform primitives: package managers, privilege and PATH lookups.

Free functions that tasks compose.  Nothing here decides *whether*
to install: that is the task's idempotency check.  Package names
are passed as argument lists, never interpolated into shell strings.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence

from dotstrap.adapters.shell.command import CommandResult
from dotstrap.core.models.task import TaskContext
from dotstrap.core.services.installers.errors import PrivilegeError

logger = logging.getLogger(__name__)

# no self-update on every brew invocation
BREW_ENV: dict[str, str] = {"HOMEBREW_NO_AUTO_UPDATE": "1"}


# ── Lookups ─────────────────────────────────────────────────────


def which(ctx: TaskContext, name: str) -> str | None:
    """Resolve ``name`` with the user-local bin dirs prefixed."""
    return ctx.runner.which(name, ctx.extra_paths)


def cmd_exists(ctx: TaskContext, name: str) -> bool:
    """Whether ``name`` resolves with the user-local bin dirs prefixed."""
    return which(ctx, name) is not None


# ── Privilege ───────────────────────────────────────────────────


def is_root() -> bool:
    """Whether the process runs as uid 0."""
    return hasattr(os, "geteuid") and os.geteuid() == 0


def run_privileged(
    ctx: TaskContext,
    cmd: Sequence[str],
    *,
    quiet: bool = False,
    input: str | None = None,
    env: Mapping[str, str] | None = None,
) -> CommandResult:
    """Run ``cmd`` as root: directly when root, through sudo otherwise.

    Raises:
        PrivilegeError: Not root and sudo is not available.
        CommandError: The command failed.
    """
    if is_root():
        return ctx.runner.run(cmd, quiet=quiet, input=input, env=env)
    if ctx.runner.which("sudo"):
        return ctx.runner.run(["sudo", *cmd], quiet=quiet, input=input, env=env)
    raise PrivilegeError(f"need root or sudo: {' '.join(cmd)}")


# ── apt (Debian family) ─────────────────────────────────────────


def apt_update(ctx: TaskContext) -> None:
    run_privileged(ctx, ["apt-get", "update", "-y"])


def apt_install(ctx: TaskContext, *packages: str, update: bool = True) -> None:
    """Install packages with apt-get, refreshing the index first."""
    if not packages:
        return
    if update:
        apt_update(ctx)
    run_privileged(ctx, ["apt-get", "install", "-y", *packages])


# ── dnf (Fedora / RHEL family) ──────────────────────────────────


def dnf_install(ctx: TaskContext, *packages: str) -> None:
    if not packages:
        return
    run_privileged(ctx, ["dnf", "install", "-y", *packages])


def dnf_copr_enable(ctx: TaskContext, repo: str) -> None:
    """Enable a COPR repository (installs the dnf plugin first)."""
    dnf_install(ctx, "dnf-plugins-core")
    run_privileged(ctx, ["dnf", "-y", "copr", "enable", repo])


# ── Homebrew (macOS) ────────────────────────────────────────────


def brew_installed(ctx: TaskContext, package: str) -> bool:
    """Whether Homebrew already has ``package`` installed."""
    return ctx.runner.succeeds(["brew", "list", "--versions", package], env=BREW_ENV)


def brew_install(ctx: TaskContext, *packages: str) -> None:
    """Install the packages Homebrew does not have yet."""
    missing = [p for p in packages if not brew_installed(ctx, p)]
    if not missing:
        return
    ctx.runner.run(["brew", "install", *missing], env=BREW_ENV)


def brew_prefix(ctx: TaskContext) -> str:
    return ctx.runner.capture(["brew", "--prefix"], env=BREW_ENV)
