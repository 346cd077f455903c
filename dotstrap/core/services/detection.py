"""
Platform detection: which OS family are we bootstrapping?

Read-only and side-effect free apart from reading one metadata file.
Detection never raises: anything unrecognised or unreadable falls
back to the Debian family.
"""

from __future__ import annotations

import logging
import platform as _platform
from pathlib import Path

from dotstrap.core.models.platform import Platform

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")

_FEDORA_FAMILY = {"fedora", "rhel", "centos", "rocky", "almalinux"}
_DEBIAN_FAMILY = {"ubuntu", "debian"}


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines; quotes stripped, keys as-is."""
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields[key.strip()] = value.strip().strip('"').strip("'")
    return fields


def classify_linux(fields: dict[str, str]) -> Platform:
    """Map os-release ``ID``/``ID_LIKE`` to a platform family."""
    distro_id = fields.get("ID", "").strip().lower()
    id_like = fields.get("ID_LIKE", "").strip().lower().split()
    tokens = {distro_id, *id_like}

    # fedora variants (fedora-asahi-remix) and RHEL clones use dnf
    if "fedora" in distro_id or tokens & _FEDORA_FAMILY:
        return Platform.FEDORA
    if tokens & _DEBIAN_FAMILY:
        return Platform.UBUNTU
    return Platform.UBUNTU


def detect_platform(system: str | None = None, os_release: Path = OS_RELEASE) -> Platform:
    """Detect the OS family.

    Args:
        system: Kernel name as reported by ``platform.system()``
            (default: the running system).
        os_release: OS metadata file read on Linux.

    Returns:
        The detected Platform (``ubuntu`` when unsure).
    """
    system = system if system is not None else _platform.system()

    if system == "Darwin":
        return Platform.MAC

    if system == "Linux":
        try:
            text = os_release.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", os_release, e)
            return Platform.UBUNTU
        return classify_linux(parse_os_release(text))

    logger.debug("Unrecognised system %r, assuming Debian family", system)
    return Platform.UBUNTU


def detect_machine() -> str:
    """Raw machine architecture (``x86_64``, ``aarch64``, ``arm64``…)."""
    return _platform.machine() or "unknown"
