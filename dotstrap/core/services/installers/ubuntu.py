"""
Debian-family tasks (apt).

Debian renames two binaries: ``fd`` ships as ``fdfind`` and ``bat``
as ``batcat``.  Both get a shim in the user-local bin dir under the
upstream name.
"""

from __future__ import annotations

from dotstrap.core.models.task import InstallerTask, TaskContext
from dotstrap.core.services.installers.fallback import Method, ensure_installed
from dotstrap.core.services.installers.primitives import apt_install
from dotstrap.core.services.installers.toolkit import (
    LAZYGIT,
    ensure_default_shell,
    ensure_upstream_fzf,
    install_release_latest,
    install_release_versioned,
    install_starship,
    link_shim,
)


def _apt(ctx: TaskContext, *packages: str) -> Method:
    return f"apt install {' '.join(packages)}", lambda: apt_install(ctx, *packages)


class UnzipUbuntu(InstallerTask):
    name = "unzip-ubuntu"
    tool = "unzip"
    binary = "unzip"

    def run(self) -> None:
        ensure_installed(self, [_apt(self.ctx, "unzip")])


class JqUbuntu(InstallerTask):
    name = "jq-ubuntu"
    tool = "jq"
    binary = "jq"

    def run(self) -> None:
        ensure_installed(self, [_apt(self.ctx, "jq")])


class FzfUbuntu(InstallerTask):
    """Upstream fzf first: the apt package lags far behind."""

    name = "fzf-ubuntu"
    tool = "fzf"
    binary = "fzf"

    def run(self) -> None:
        ensure_installed(
            self,
            [
                ("upstream fzf installer", lambda: ensure_upstream_fzf(self.ctx, self.step)),
                _apt(self.ctx, "fzf"),
            ],
        )


class FdUbuntu(InstallerTask):
    name = "fd-ubuntu"
    tool = "fd"
    binary = "fd"

    def run(self) -> None:
        ensure_installed(self, [_apt(self.ctx, "fd-find")])
        link_shim(self.ctx, "fd", "fdfind")


class BatUbuntu(InstallerTask):
    name = "bat-ubuntu"
    tool = "bat"
    binary = "bat"

    def run(self) -> None:
        ensure_installed(self, [_apt(self.ctx, "bat")])
        link_shim(self.ctx, "bat", "batcat")


class StarshipUbuntu(InstallerTask):
    name = "starship-ubuntu"
    tool = "starship"
    binary = "starship"

    def run(self) -> None:
        ensure_installed(
            self, [("starship install script", lambda: install_starship(self.ctx))]
        )


class LazygitUbuntu(InstallerTask):
    name = "lazygit-ubuntu"
    tool = "lazygit"
    binary = "lazygit"

    def run(self) -> None:
        ensure_installed(
            self,
            [
                _apt(self.ctx, "lazygit"),
                ("versioned release tarball", lambda: install_release_versioned(self.ctx, LAZYGIT)),
                ("latest release tarball", lambda: install_release_latest(self.ctx, LAZYGIT)),
            ],
        )


class NeovimUbuntu(InstallerTask):
    name = "neovim-ubuntu"
    tool = "neovim"
    binary = "nvim"

    def run(self) -> None:
        ensure_installed(self, [_apt(self.ctx, "neovim")])


class FishUbuntu(InstallerTask):
    name = "fish-ubuntu"
    tool = "fish"
    binary = "fish"

    def run(self) -> None:
        ensure_installed(self, [_apt(self.ctx, "fish")])
        ensure_default_shell(self.ctx, self.step, "fish")


TASKS: list[type[InstallerTask]] = [
    UnzipUbuntu,
    JqUbuntu,
    FzfUbuntu,
    FdUbuntu,
    BatUbuntu,
    StarshipUbuntu,
    LazygitUbuntu,
    NeovimUbuntu,
    FishUbuntu,
]
