"""Adapters: the only code that touches processes and the filesystem.

Public re-exports for convenient access.
"""

from dotstrap.adapters.shell.command import CommandError, CommandResult, CommandRunner

__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
]
