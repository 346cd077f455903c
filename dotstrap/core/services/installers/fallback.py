"""
Fallback chains and post-install verification.

A fallback chain is an ordered list of ``(label, apply)`` methods.
Each method is tried only if the previous one failed; the first
success ends the chain.  Every attempt is visible in the step log:

    ℹ️  INFO [install-lazygit-fedora] attempt dnf install lazygit
    ⚠️  WARN [install-lazygit-fedora] dnf install lazygit failed: …
    ℹ️  INFO [install-lazygit-fedora] attempt COPR atim/lazygit
    ✅ SUCCESS [install-lazygit-fedora] installed via COPR atim/lazygit
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from dotstrap.adapters.shell.command import CommandError
from dotstrap.core.models.task import TaskContext
from dotstrap.core.services.installers.errors import InstallError, VerificationError
from dotstrap.core.services.installers.primitives import which

if TYPE_CHECKING:
    from dotstrap.core.models.task import InstallerTask
    from dotstrap.core.observability.step_log import StepLogger

logger = logging.getLogger(__name__)

Method = tuple[str, Callable[[], None]]

# Failures that move the chain on to the next method.  Anything else
# (configuration errors, bugs) propagates immediately.
RECOVERABLE: tuple[type[BaseException], ...] = (CommandError, InstallError, OSError)


def attempt_in_order(log: StepLogger, step: str, methods: Sequence[Method]) -> str:
    """Try ``methods`` in order until one succeeds.

    Returns:
        Label of the method that succeeded.

    Raises:
        InstallError: Every method failed (or there were none).
    """
    failures: list[str] = []
    for label, apply in methods:
        log.info(step, f"attempt {label}")
        try:
            apply()
        except RECOVERABLE as e:
            log.warn(step, f"{label} failed: {e}")
            failures.append(f"{label}: {e}")
            continue
        log.success(step, f"installed via {label}")
        return label

    detail = "; ".join(failures) if failures else "no install methods"
    raise InstallError(f"all install methods failed ({detail})")


def ensure_installed(task: InstallerTask, methods: Sequence[Method]) -> str | None:
    """Idempotent install: skip the chain when ``task.binary`` already resolves.

    Returns:
        The succeeding method label, or None if nothing had to be done.
    """
    ctx = task.ctx
    if which(ctx, task.binary):
        ctx.log.info(task.step, f"{task.tool} already installed; skipping")
        return None
    return attempt_in_order(ctx.log, task.step, methods)


def verify_on_path(ctx: TaskContext, binary: str) -> str:
    """Post-check: ``binary`` must resolve (user-local bin dirs prefixed).

    Returns:
        Absolute path of the binary.

    Raises:
        VerificationError: The binary is not on the search path.
    """
    path = which(ctx, binary)
    if not path:
        raise VerificationError(f"verify: {binary} missing on PATH")
    logger.debug("Verified %s at %s", binary, path)
    return path
