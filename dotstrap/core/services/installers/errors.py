"""Installer error taxonomy."""

from __future__ import annotations


class InstallError(Exception):
    """An install method, or a whole fallback chain, failed."""


class PrivilegeError(InstallError):
    """A command needs root and neither root nor sudo is available."""


class VerificationError(Exception):
    """The tool is not usable after install (post-check failed)."""
