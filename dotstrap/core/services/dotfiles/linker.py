"""
Dotfile linker: apply or remove the mapping table.

    link_all    step ``install-files``    idempotent, replaces stale links
    unlink_all  step ``uninstall-files``  removes only links we own
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from dotstrap.adapters.shell.filesystem import (
    ensure_symlink,
    read_link,
    remove_symlink_if_owned,
)
from dotstrap.core.models.mapping import FileMapping
from dotstrap.core.observability.step_log import StepLogger

logger = logging.getLogger(__name__)

LINK_STEP = "install-files"
UNLINK_STEP = "uninstall-files"


@dataclass
class LinkOutcome:
    """What happened to one mapping."""

    mapping: FileMapping
    action: str  # linked | unchanged | replaced | removed | skipped

    def to_dict(self) -> dict:
        return {
            "source": str(self.mapping.source),
            "destination": str(self.mapping.destination),
            "action": self.action,
        }


@dataclass
class LinkReport:
    """Result of a link or unlink pass."""

    step: str
    outcomes: list[LinkOutcome] = field(default_factory=list)

    def count(self, action: str) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    def to_dict(self) -> dict:
        counts: dict[str, int] = {}
        for o in self.outcomes:
            counts[o.action] = counts.get(o.action, 0) + 1
        return {
            "step": self.step,
            "total": len(self.outcomes),
            "counts": counts,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def link_all(mappings: Sequence[FileMapping], log: StepLogger) -> LinkReport:
    """Symlink every destination to its source.

    Raises:
        OSError: A destination cannot be replaced (e.g. it is a directory).
    """
    report = LinkReport(step=LINK_STEP)
    with log.step(LINK_STEP):
        log.info(LINK_STEP, "linking dotfiles…")
        for m in mappings:
            log.debug(LINK_STEP, f"link {m.destination} -> {m.source}")
            action = ensure_symlink(m.source, m.destination)
            report.outcomes.append(LinkOutcome(mapping=m, action=action))
        log.success(LINK_STEP, "done")
    return report


def unlink_all(mappings: Sequence[FileMapping], log: StepLogger) -> LinkReport:
    """Remove destinations that are symlinks pointing at their source."""
    report = LinkReport(step=UNLINK_STEP)
    with log.step(UNLINK_STEP):
        log.info(UNLINK_STEP, "removing dotfile symlinks…")
        for m in mappings:
            if remove_symlink_if_owned(m.source, m.destination):
                log.debug(UNLINK_STEP, f"removed symlink {m.destination}")
                action = "removed"
            else:
                log.debug(UNLINK_STEP, f"skip {m.destination} (not our symlink or missing)")
                action = "skipped"
            report.outcomes.append(LinkOutcome(mapping=m, action=action))
        log.success(UNLINK_STEP, "done")
    return report


def link_state(mapping: FileMapping) -> str:
    """Current state of a destination, without changing anything.

    ``linked`` (our symlink), ``foreign`` (symlink elsewhere),
    ``file`` (something else is there) or ``missing``.
    """
    dest = mapping.destination
    if dest.is_symlink():
        return "linked" if read_link(dest) == str(mapping.source) else "foreign"
    if dest.exists():
        return "file"
    return "missing"
