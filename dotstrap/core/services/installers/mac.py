"""
macOS tasks (Homebrew).

Every task's ``pre()`` makes sure ``brew`` exists, installing it
non-interactively on a fresh machine.
"""

from __future__ import annotations

from pathlib import Path

from dotstrap.adapters.shell.command import CommandError
from dotstrap.core.models.task import InstallerTask, TaskContext
from dotstrap.core.services.installers.fallback import Method, ensure_installed
from dotstrap.core.services.installers.primitives import brew_install, brew_prefix
from dotstrap.core.services.installers.toolkit import (
    LAZYGIT,
    ensure_brew,
    ensure_default_shell,
    install_release_latest,
    install_release_versioned,
)


def _brew(ctx: TaskContext, *packages: str) -> Method:
    return f"brew install {' '.join(packages)}", lambda: brew_install(ctx, *packages)


def install_fzf_key_bindings(ctx: TaskContext, step: str) -> None:
    """Run the key-binding installer shipped in the fzf formula (best-effort)."""
    try:
        script = Path(brew_prefix(ctx)) / "opt" / "fzf" / "install"
        ctx.runner.run([str(script), "--key-bindings", "--completion", "--no-update-rc"])
    except CommandError as e:
        ctx.log.warn(step, f"fzf key bindings not installed: {e}")


class UnzipMac(InstallerTask):
    name = "unzip-mac"
    tool = "unzip"
    binary = "unzip"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "unzip")])


class JqMac(InstallerTask):
    name = "jq-mac"
    tool = "jq"
    binary = "jq"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "jq")])


class FzfMac(InstallerTask):
    name = "fzf-mac"
    tool = "fzf"
    binary = "fzf"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        if ensure_installed(self, [_brew(self.ctx, "fzf")]) is not None:
            install_fzf_key_bindings(self.ctx, self.step)


class FdMac(InstallerTask):
    name = "fd-mac"
    tool = "fd"
    binary = "fd"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "fd")])


class BatMac(InstallerTask):
    name = "bat-mac"
    tool = "bat"
    binary = "bat"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "bat")])


class StarshipMac(InstallerTask):
    name = "starship-mac"
    tool = "starship"
    binary = "starship"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "starship")])


class LazygitMac(InstallerTask):
    name = "lazygit-mac"
    tool = "lazygit"
    binary = "lazygit"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(
            self,
            [
                _brew(self.ctx, "lazygit"),
                ("versioned release tarball", lambda: install_release_versioned(self.ctx, LAZYGIT)),
                ("latest release tarball", lambda: install_release_latest(self.ctx, LAZYGIT)),
            ],
        )


class NeovimMac(InstallerTask):
    name = "neovim-mac"
    tool = "neovim"
    binary = "nvim"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "neovim")])


class FishMac(InstallerTask):
    name = "fish-mac"
    tool = "fish"
    binary = "fish"

    def pre(self) -> None:
        super().pre()
        ensure_brew(self.ctx, self.step)

    def run(self) -> None:
        ensure_installed(self, [_brew(self.ctx, "fish")])
        ensure_default_shell(self.ctx, self.step, "fish")


TASKS: list[type[InstallerTask]] = [
    UnzipMac,
    JqMac,
    FzfMac,
    FdMac,
    BatMac,
    StarshipMac,
    LazygitMac,
    NeovimMac,
    FishMac,
]
