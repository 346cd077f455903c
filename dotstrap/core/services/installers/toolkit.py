"""
Shared install recipes used by more than one platform.

    upstream fzf      git clone/pull ~/.fzf + its installer
    release tarballs  GitHub release assets into the user-local bin dir
    install scripts   download once, run with an argument list
    shims             ``fd`` → ``fdfind``, ``bat`` → ``batcat``
    default shell     /etc/shells + chsh

Every download goes through curl via the command runner, so the
runner stays the only process boundary and tests can fake it.
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import pwd
import shutil
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from dotstrap.adapters.shell.command import CommandError
from dotstrap.adapters.shell.filesystem import ensure_dir, remove_if_exists
from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import TaskContext
from dotstrap.core.services.installers.errors import InstallError
from dotstrap.core.services.installers.primitives import cmd_exists, run_privileged, which

logger = logging.getLogger(__name__)

FZF_REPO = "https://github.com/junegunn/fzf.git"
STARSHIP_INSTALL_URL = "https://starship.rs/install.sh"
HOMEBREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
ETC_SHELLS = Path("/etc/shells")

_ARCH_MAP = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


# ── fzf ─────────────────────────────────────────────────────────


def ensure_upstream_fzf(ctx: TaskContext, step: str | None = None) -> None:
    """Clone (or fast-forward) ~/.fzf and run its installer.

    A checkout that cannot be fast-forwarded is removed and cloned
    again.  The installer only adds key bindings and completion; it
    never edits shell rc files.
    """
    fzf_dir = ctx.fzf_dir
    if fzf_dir.is_dir():
        try:
            ctx.runner.run(["git", "-C", str(fzf_dir), "pull", "--ff-only"], quiet=True)
        except CommandError as e:
            ctx.log.warn(step, f"fzf checkout not updatable, recloning: {e}")
            shutil.rmtree(fzf_dir)
            ctx.runner.run(["git", "clone", "--depth", "1", FZF_REPO, str(fzf_dir)])
    else:
        ctx.runner.run(["git", "clone", "--depth", "1", FZF_REPO, str(fzf_dir)])

    ctx.runner.run(
        [str(fzf_dir / "install"), "--key-bindings", "--completion", "--no-update-rc"]
    )


# ── Downloads ───────────────────────────────────────────────────


def download(ctx: TaskContext, url: str, dest: Path) -> Path:
    """Fetch ``url`` to ``dest`` with curl (fails on HTTP errors)."""
    ctx.runner.run(["curl", "-fsSL", "-o", str(dest), url], quiet=True)
    return dest


def install_tarball_binary(
    ctx: TaskContext,
    url: str,
    binary: str,
    dest_name: str | None = None,
) -> Path:
    """Download a .tar.gz and install one binary from it into the bin dir.

    Args:
        url: Tarball URL.
        binary: Member name of the executable inside the archive root.
        dest_name: Installed name (default: ``binary``).

    Returns:
        Path of the installed executable.

    Raises:
        InstallError: The archive does not contain ``binary``.
        CommandError: Download or extraction failed.
    """
    ensure_dir(ctx.bin_dir)
    target = ctx.bin_dir / (dest_name or binary)

    with tempfile.TemporaryDirectory(prefix="dotstrap-") as tmp:
        tmp_dir = Path(tmp)
        archive = download(ctx, url, tmp_dir / "archive.tar.gz")
        ctx.runner.run(["tar", "-xzf", str(archive), "-C", str(tmp_dir)], quiet=True)

        extracted = tmp_dir / binary
        if not extracted.is_file():
            raise InstallError(f"{binary} not found in {url}")

        extracted.chmod(0o755)
        remove_if_exists(target)
        shutil.move(str(extracted), str(target))

    logger.info("Installed %s from %s", target, url)
    return target


# ── GitHub releases ─────────────────────────────────────────────


@dataclass(frozen=True)
class GithubRelease:
    """Where a tool's release tarballs live and how they are named.

    Asset templates accept ``{version}``, ``{os}`` and ``{arch}``.
    """

    repo: str
    binary: str
    versioned_asset: str
    latest_asset: str

    def versioned_url(self, tag: str, os_label: str, arch: str) -> str:
        asset = self.versioned_asset.format(version=tag.lstrip("v"), os=os_label, arch=arch)
        return f"https://github.com/{self.repo}/releases/download/{tag}/{asset}"

    def latest_url(self, os_label: str, arch: str) -> str:
        asset = self.latest_asset.format(os=os_label, arch=arch)
        return f"https://github.com/{self.repo}/releases/latest/download/{asset}"


LAZYGIT = GithubRelease(
    repo="jesseduffield/lazygit",
    binary="lazygit",
    versioned_asset="lazygit_{version}_{os}_{arch}.tar.gz",
    latest_asset="lazygit_{os}_{arch}.tar.gz",
)


def release_target(platform: Platform, machine: str) -> tuple[str, str]:
    """Map (platform, machine) to the ``(os, arch)`` labels used by assets.

    Raises:
        InstallError: The architecture has no published asset.
    """
    os_label = "Darwin" if platform is Platform.MAC else "Linux"
    arch = _ARCH_MAP.get(machine.lower())
    if arch is None:
        raise InstallError(f"unsupported platform for release assets: {os_label}/{machine}")
    return os_label, arch


def latest_release_tag(ctx: TaskContext, repo: str) -> str:
    """Tag of the latest release: GitHub API first, redirect target second.

    Raises:
        InstallError: Neither source yields a tag.
    """
    api_url = f"https://api.github.com/repos/{repo}/releases/latest"
    try:
        body = ctx.runner.capture(
            ["curl", "-fsSL", "-H", "Accept: application/vnd.github+json", api_url]
        )
        tag = json.loads(body).get("tag_name", "")
        if tag:
            return tag
    except (CommandError, ValueError, AttributeError) as e:
        logger.debug("Release API lookup failed for %s: %s", repo, e)

    try:
        effective = ctx.runner.capture(
            [
                "curl", "-fsSLI", "-o", os.devnull, "-w", "%{url_effective}",
                f"https://github.com/{repo}/releases/latest",
            ]
        )
    except CommandError as e:
        raise InstallError(f"cannot resolve latest release of {repo}: {e}") from e

    tag = effective.rstrip("/").rsplit("/", 1)[-1]
    if not tag or tag == "latest":
        raise InstallError(f"cannot resolve latest release of {repo}")
    return tag


def install_release_versioned(ctx: TaskContext, release: GithubRelease) -> Path:
    """Install the binary from the latest release's versioned asset."""
    os_label, arch = release_target(ctx.platform, ctx.machine)
    tag = latest_release_tag(ctx, release.repo)
    return install_tarball_binary(ctx, release.versioned_url(tag, os_label, arch), release.binary)


def install_release_latest(ctx: TaskContext, release: GithubRelease) -> Path:
    """Install the binary from the unversioned ``releases/latest`` asset."""
    os_label, arch = release_target(ctx.platform, ctx.machine)
    return install_tarball_binary(ctx, release.latest_url(os_label, arch), release.binary)


# ── Install scripts ─────────────────────────────────────────────


def run_install_script(
    ctx: TaskContext,
    url: str,
    args: Sequence[str] = (),
    *,
    interpreter: str = "sh",
    env: Mapping[str, str] | None = None,
) -> None:
    """Download an installer script and execute it (no ``curl | sh``)."""
    with tempfile.TemporaryDirectory(prefix="dotstrap-") as tmp:
        script = download(ctx, url, Path(tmp) / "install.sh")
        ctx.runner.run([interpreter, str(script), *args], env=env)


def install_starship(ctx: TaskContext) -> None:
    """Official starship installer, into the user-local bin dir."""
    ensure_dir(ctx.bin_dir)
    run_install_script(ctx, STARSHIP_INSTALL_URL, ["-y", "-b", str(ctx.bin_dir)])


def ensure_brew(ctx: TaskContext, step: str) -> None:
    """Install Homebrew non-interactively when ``brew`` is missing."""
    if cmd_exists(ctx, "brew"):
        return
    ctx.log.info(step, "installing Homebrew")
    run_install_script(
        ctx, HOMEBREW_INSTALL_URL, interpreter="/bin/bash", env={"NONINTERACTIVE": "1"}
    )


# ── Shims ───────────────────────────────────────────────────────


def link_shim(ctx: TaskContext, name: str, target_cmd: str) -> Path | None:
    """Expose ``target_cmd`` as ``name`` in the bin dir.

    Nothing happens when ``name`` already resolves or ``target_cmd``
    does not.

    Returns:
        The shim path, or None if no shim was created.
    """
    if cmd_exists(ctx, name):
        return None
    target = which(ctx, target_cmd)
    if target is None:
        return None

    ensure_dir(ctx.bin_dir)
    shim = ctx.bin_dir / name
    remove_if_exists(shim)
    shim.symlink_to(target)
    logger.info("Shim %s -> %s", shim, target)
    return shim


# ── Default shell ───────────────────────────────────────────────


def current_user() -> str | None:
    """Login name of the invoking user, or None when it cannot be resolved."""
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        logger.debug("Cannot resolve current user: %s", e)
        return None


def login_shell(ctx: TaskContext) -> str:
    """Current login shell of the invoking user (``settings.shell`` when unknown)."""
    user = current_user()
    if user is None:
        return ctx.settings.shell
    if ctx.platform is Platform.MAC:
        try:
            out = ctx.runner.capture(["dscl", ".", "-read", f"/Users/{user}", "UserShell"])
        except CommandError as e:
            logger.debug("dscl lookup failed: %s", e)
        else:
            # "UserShell: /bin/zsh"
            parts = out.split()
            if len(parts) >= 2:
                return parts[-1]
    else:
        try:
            return pwd.getpwnam(user).pw_shell
        except KeyError:
            logger.debug("No passwd entry for %s", user)
    return ctx.settings.shell


def register_shell(ctx: TaskContext, step: str, shell_path: str) -> None:
    """Append ``shell_path`` to /etc/shells if absent (best-effort)."""
    try:
        listed = ETC_SHELLS.read_text(encoding="utf-8").split()
    except FileNotFoundError:
        listed = []
    except OSError as e:
        ctx.log.warn(step, f"could not read {ETC_SHELLS}: {e}")
        return
    if shell_path in listed:
        return
    try:
        run_privileged(ctx, ["tee", "-a", str(ETC_SHELLS)], quiet=True, input=f"{shell_path}\n")
    except (CommandError, InstallError) as e:
        ctx.log.warn(step, f"could not add {shell_path} to /etc/shells: {e}")


def ensure_default_shell(ctx: TaskContext, step: str, shell: str) -> bool:
    """Make ``shell`` the user's login shell.

    Failures are warnings: the tool itself is installed either way.

    Returns:
        True if the login shell was changed.

    Raises:
        InstallError: ``shell`` does not resolve.
    """
    shell_path = which(ctx, shell)
    if shell_path is None:
        raise InstallError(f"{shell} not found; cannot make it the default shell")

    register_shell(ctx, step, shell_path)

    if login_shell(ctx) == shell_path:
        ctx.log.info(step, f"{shell} is already the default shell")
        return False

    try:
        ctx.runner.run(["chsh", "-s", shell_path])
    except CommandError as e:
        logger.debug("chsh as user failed: %s", e)
        user = current_user()
        if user is None:
            ctx.log.warn(step, f"could not change default shell to {shell_path}: unknown user")
            return False
        try:
            run_privileged(ctx, ["chsh", "-s", shell_path, user])
        except (CommandError, InstallError) as e2:
            ctx.log.warn(step, f"could not change default shell to {shell_path}: {e2}")
            return False

    ctx.log.success(step, f"default shell set to {shell_path}")
    return True
