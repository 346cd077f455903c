"""
Filesystem adapter: symlink and directory primitives.

Every call here ignores "not found" where absence is an acceptable
state and lets every other ``OSError`` propagate.  Nothing is
swallowed wholesale.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

LinkAction = Literal["linked", "unchanged", "replaced"]


def ensure_dir(path: Path) -> None:
    """Create ``path`` and its parents if missing."""
    path.mkdir(parents=True, exist_ok=True)


def read_link(path: Path) -> str | None:
    """Return the raw target of a symlink, or None if ``path`` is not one."""
    if not path.is_symlink():
        return None
    try:
        return os.readlink(path)
    except FileNotFoundError:
        return None


def remove_if_exists(path: Path) -> bool:
    """Unlink a file or symlink; False if it was already gone."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    return True


def ensure_symlink(source: Path, destination: Path) -> LinkAction:
    """Make ``destination`` a symlink to ``source``.

    - Parent directory is created if absent.
    - A symlink already pointing at ``source`` is left alone.
    - A symlink pointing elsewhere is replaced.
    - A regular file is removed and replaced by the link.
    - A directory is never removed: the ``OSError`` propagates.

    Returns:
        What happened: ``linked``, ``unchanged`` or ``replaced``.
    """
    ensure_dir(destination.parent)

    action: LinkAction = "linked"
    if destination.is_symlink():
        if read_link(destination) == str(source):
            return "unchanged"
        remove_if_exists(destination)
        action = "replaced"
    elif destination.exists():
        if destination.is_dir():
            raise IsADirectoryError(f"refusing to replace directory: {destination}")
        remove_if_exists(destination)
        action = "replaced"

    destination.symlink_to(source)
    logger.debug("%s %s -> %s", action, destination, source)
    return action


def remove_symlink_if_owned(source: Path, destination: Path) -> bool:
    """Remove ``destination`` only if it is a symlink whose target is ``source``.

    Regular files, symlinks pointing elsewhere and missing paths are
    left untouched.

    Returns:
        True if the symlink was removed.
    """
    if not destination.is_symlink():
        return False
    if read_link(destination) != str(source):
        return False
    return remove_if_exists(destination)
