"""
Diagnostic logging: stdlib ``logging`` setup for all entrypoints.

This is the developer-facing channel (commands executed, config
resolution).  The user-facing step log lives in ``step_log``.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  DOTSTRAP_LOG_LEVEL  >  WARNING

Optional file output via DOTSTRAP_LOG_FILE.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping

# WARNING level: message only
_FMT_MINIMAL = "%(message)s"

# DEBUG/INFO level: timestamped with module context
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the diagnostic level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return (environ or {}).get("DOTSTRAP_LOG_LEVEL", "WARNING")


def setup_logging(level: str = "WARNING", log_file: str | None = None) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a diagnostic log file (always DEBUG).
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    # stderr keeps stdout free for the step log
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)
        effective_level = logging.DEBUG

    root.setLevel(effective_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
