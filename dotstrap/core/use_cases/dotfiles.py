"""
Dotfiles use case: link, unlink and inspect the mapping table.

Ties together settings, platform detection and the linker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from dotstrap.core.config.loader import Settings
from dotstrap.core.models.mapping import FileMapping
from dotstrap.core.models.platform import Platform
from dotstrap.core.observability.step_log import StepLogger, get_step_logger
from dotstrap.core.services.detection import detect_platform
from dotstrap.core.services.dotfiles.linker import LinkReport, link_all, link_state, unlink_all
from dotstrap.core.services.dotfiles.mappings import get_file_mappings

logger = logging.getLogger(__name__)


@dataclass
class DotfilesResult:
    """Result of a dotfiles operation."""

    platform: Platform | None = None
    report: LinkReport | None = None
    states: list[tuple[FileMapping, str]] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.platform is not None:
            result["platform"] = self.platform.value
        if self.report is not None:
            result["report"] = self.report.to_dict()
        if self.states:
            result["mappings"] = [
                {
                    "source": str(m.source),
                    "destination": str(m.destination),
                    "state": state,
                }
                for m, state in self.states
            ]
        return result


def link_dotfiles(
    settings: Settings,
    platform: Platform | None = None,
    log: StepLogger | None = None,
) -> DotfilesResult:
    """Symlink every dotfile into place (step ``install-files``)."""
    platform = platform or detect_platform()
    result = DotfilesResult(platform=platform)
    try:
        result.report = link_all(get_file_mappings(settings, platform), log or get_step_logger())
    except OSError as e:
        result.error = str(e)
    return result


def unlink_dotfiles(
    settings: Settings,
    platform: Platform | None = None,
    log: StepLogger | None = None,
) -> DotfilesResult:
    """Remove the symlinks this tool created (step ``uninstall-files``)."""
    platform = platform or detect_platform()
    result = DotfilesResult(platform=platform)
    try:
        result.report = unlink_all(get_file_mappings(settings, platform), log or get_step_logger())
    except OSError as e:
        result.error = str(e)
    return result


def list_dotfiles(settings: Settings, platform: Platform | None = None) -> DotfilesResult:
    """Show each mapping and the current state of its destination."""
    platform = platform or detect_platform()
    mappings = get_file_mappings(settings, platform)
    return DotfilesResult(platform=platform, states=[(m, link_state(m)) for m in mappings])
