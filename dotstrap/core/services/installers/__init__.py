"""
Installer tasks and the free functions they compose.

    primitives  apt / dnf / brew, privilege, PATH lookups
    fallback    ordered fallback chains + post-install verification
    toolkit     recipes shared across platforms
    ubuntu, fedora, mac   per-platform task classes
    registry    platform → ordered task list
"""

from dotstrap.core.services.installers.errors import (
    InstallError,
    PrivilegeError,
    VerificationError,
)

__all__ = ["InstallError", "PrivilegeError", "VerificationError"]
