"""
Dotfile mapping table: which repository file is linked where.

Sources live under ``<repo>/dotfiles``; destinations are in the home
directory or ``$XDG_CONFIG_HOME`` (default ``~/.config``).  Both
the link and unlink operations read this one table.
"""

from __future__ import annotations

from pathlib import Path

from dotstrap.core.config.loader import Settings
from dotstrap.core.models.mapping import FileMapping
from dotstrap.core.models.platform import Platform

# (source relative to dotfiles/, destination root, destination relative path)
_HOME = "home"
_CONFIG = "config"

_TABLE: list[tuple[str, str, str]] = [
    ("bashrc", _HOME, ".bashrc"),
    ("bash_profile", _HOME, ".bash_profile"),
    ("zshrc", _HOME, ".zshrc"),
    ("fish/config.fish", _CONFIG, "fish/config.fish"),
    ("gitconfig", _HOME, ".gitconfig"),
    ("tmux.conf", _HOME, ".tmux.conf"),
    ("aliases.sh", _HOME, ".aliases.sh"),
    ("starship.toml", _CONFIG, "starship.toml"),
    ("ghostty/config", _CONFIG, "ghostty/config"),
    ("zed/settings.json", _CONFIG, "zed/settings.json"),
    ("zed/keymap.json", _CONFIG, "zed/keymap.json"),
]

# Ghostty on macOS also reads Application Support, under both its
# current and its legacy bundle identifier.
_MAC_TABLE: list[tuple[str, str, str]] = [
    ("ghostty/config", _HOME, "Library/Application Support/Ghostty/config"),
    ("ghostty/config", _HOME, "Library/Application Support/com.mitchellh.ghostty/config"),
]


def get_file_mappings(settings: Settings, platform: Platform) -> list[FileMapping]:
    """Absolute source/destination pairs for ``platform``, in table order."""
    roots = {_HOME: settings.home, _CONFIG: settings.config_home}
    rows = list(_TABLE)
    if platform is Platform.MAC:
        rows += _MAC_TABLE

    source_dir = settings.dotfiles_dir
    return [
        FileMapping(source=source_dir / Path(src), destination=roots[root] / Path(dst))
        for src, root, dst in rows
    ]
