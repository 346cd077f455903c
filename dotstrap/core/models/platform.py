"""Platform: the OS family that selects installers and package managers."""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Supported OS families.

    ``ubuntu`` covers the whole Debian family (apt), ``fedora`` the
    RHEL family (dnf), ``mac`` is macOS (Homebrew).
    """

    UBUNTU = "ubuntu"
    FEDORA = "fedora"
    MAC = "mac"

    @property
    def package_manager(self) -> str:
        return {"ubuntu": "apt-get", "fedora": "dnf", "mac": "brew"}[self.value]
