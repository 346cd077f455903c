"""Fedora / RHEL-family tasks (dnf, COPR for lazygit)."""

from __future__ import annotations

from dotstrap.core.models.task import InstallerTask, TaskContext
from dotstrap.core.services.installers.fallback import Method, ensure_installed
from dotstrap.core.services.installers.primitives import dnf_copr_enable, dnf_install
from dotstrap.core.services.installers.toolkit import (
    LAZYGIT,
    ensure_default_shell,
    ensure_upstream_fzf,
    install_release_latest,
    install_release_versioned,
    install_starship,
)

LAZYGIT_COPR = "atim/lazygit"


def _dnf(ctx: TaskContext, *packages: str) -> Method:
    return f"dnf install {' '.join(packages)}", lambda: dnf_install(ctx, *packages)


def _copr_lazygit(ctx: TaskContext) -> None:
    dnf_copr_enable(ctx, LAZYGIT_COPR)
    dnf_install(ctx, "lazygit")


class UnzipFedora(InstallerTask):
    name = "unzip-fedora"
    tool = "unzip"
    binary = "unzip"

    def run(self) -> None:
        ensure_installed(self, [_dnf(self.ctx, "unzip")])


class JqFedora(InstallerTask):
    name = "jq-fedora"
    tool = "jq"
    binary = "jq"

    def run(self) -> None:
        ensure_installed(self, [_dnf(self.ctx, "jq")])


class FzfFedora(InstallerTask):
    name = "fzf-fedora"
    tool = "fzf"
    binary = "fzf"

    def run(self) -> None:
        ensure_installed(
            self,
            [
                _dnf(self.ctx, "fzf"),
                ("upstream fzf installer", lambda: ensure_upstream_fzf(self.ctx, self.step)),
            ],
        )


class FdFedora(InstallerTask):
    """Newer Fedora ships ``fd``; older releases and EPEL call it ``fd-find``."""

    name = "fd-fedora"
    tool = "fd"
    binary = "fd"

    def run(self) -> None:
        ensure_installed(self, [_dnf(self.ctx, "fd"), _dnf(self.ctx, "fd-find")])


class BatFedora(InstallerTask):
    name = "bat-fedora"
    tool = "bat"
    binary = "bat"

    def run(self) -> None:
        ensure_installed(self, [_dnf(self.ctx, "bat")])


class StarshipFedora(InstallerTask):
    name = "starship-fedora"
    tool = "starship"
    binary = "starship"

    def run(self) -> None:
        ensure_installed(
            self, [("starship install script", lambda: install_starship(self.ctx))]
        )


class LazygitFedora(InstallerTask):
    name = "lazygit-fedora"
    tool = "lazygit"
    binary = "lazygit"

    def run(self) -> None:
        ensure_installed(
            self,
            [
                _dnf(self.ctx, "lazygit"),
                (f"COPR {LAZYGIT_COPR}", lambda: _copr_lazygit(self.ctx)),
                ("versioned release tarball", lambda: install_release_versioned(self.ctx, LAZYGIT)),
                ("latest release tarball", lambda: install_release_latest(self.ctx, LAZYGIT)),
            ],
        )


class NeovimFedora(InstallerTask):
    name = "neovim-fedora"
    tool = "neovim"
    binary = "nvim"

    def run(self) -> None:
        ensure_installed(self, [_dnf(self.ctx, "neovim")])


class FishFedora(InstallerTask):
    name = "fish-fedora"
    tool = "fish"
    binary = "fish"

    def run(self) -> None:
        ensure_installed(self, [_dnf(self.ctx, "fish")])
        ensure_default_shell(self.ctx, self.step, "fish")


TASKS: list[type[InstallerTask]] = [
    UnzipFedora,
    JqFedora,
    FzfFedora,
    FdFedora,
    BatFedora,
    StarshipFedora,
    LazygitFedora,
    NeovimFedora,
    FishFedora,
]
