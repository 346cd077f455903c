"""
Process context: the search path every child process sees.

The search path is computed ONCE at startup by the entry point and
stored here.  It is read-only afterwards:

    - CLI:    main.py → context.set_search_path(harden_search_path(...))
    - Tests:  conftest → context.set_search_path(...) / reset_search_path()

System directories come first so that a broken or hostile shim in a
user-controlled directory (``~/.local/bin/env`` for instance) cannot
shadow a trusted binary while we detect or install tools.  Individual
calls that need extra directories pass them to the command runner
instead of changing this value.

Module-level singleton (not a class), like the rest of the process
context.
"""

from __future__ import annotations

import os
from typing import Optional

SYSTEM_FIRST: tuple[str, ...] = (
    "/usr/bin",
    "/bin",
    "/usr/sbin",
    "/sbin",
    "/opt/homebrew/bin",
    "/usr/local/bin",
)

_search_path: Optional[str] = None


def harden_search_path(current: str | None = None) -> str:
    """Put system directories ahead of the existing PATH entries.

    Duplicates are dropped, first occurrence wins, empty entries are
    ignored.

    Args:
        current: PATH value to harden (default: ``os.environ["PATH"]``).

    Returns:
        The hardened PATH string.
    """
    if current is None:
        current = os.environ.get("PATH", "")

    parts: list[str] = []
    seen: set[str] = set()
    for entry in (*SYSTEM_FIRST, *current.split(os.pathsep)):
        if entry and entry not in seen:
            parts.append(entry)
            seen.add(entry)
    return os.pathsep.join(parts)


def set_search_path(value: str) -> None:
    """Register the search path for the current process."""
    global _search_path
    _search_path = value


def get_search_path() -> str:
    """Return the registered search path, hardening PATH on first use."""
    global _search_path
    if _search_path is None:
        _search_path = harden_search_path()
    return _search_path


def reset_search_path() -> None:
    """Forget the registered search path (tests only)."""
    global _search_path
    _search_path = None
