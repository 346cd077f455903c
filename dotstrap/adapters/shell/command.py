"""
Shell command adapter: execute external commands.

This is the most fundamental adapter and the SINGLE PLACE where
``subprocess.run`` is called.  Every installer primitive is built on
top of it, which is also what makes installers testable: swap the
runner, keep the task.

Invariants:
    - Commands are argument lists, never shell strings.
    - The child sees ``PATH`` = the hardened process search path,
      plus per-call overrides.  ``os.environ`` is never mutated.
    - A missing executable and a non-zero exit raise the same
      ``CommandError``; only the message tells them apart.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from dotstrap.core.context import get_search_path

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a command cannot be started or exits non-zero."""

    def __init__(
        self,
        message: str,
        *,
        cmd: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    cmd: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Run commands with a fixed search path and optional env overrides.

    Args:
        search_path: PATH handed to every child process
            (default: the process-wide hardened search path).
        verbose: Stream output of non-quiet commands.  When False,
            output is captured for every command.
    """

    def __init__(self, search_path: str | None = None, verbose: bool = True):
        self._search_path = search_path
        self._verbose = verbose

    @property
    def verbose(self) -> bool:
        return self._verbose

    @property
    def search_path(self) -> str:
        return self._search_path if self._search_path is not None else get_search_path()

    def environment(self, overrides: Mapping[str, str] | None = None) -> dict[str, str]:
        """Build the child environment for one invocation."""
        env = os.environ.copy()
        env["PATH"] = self.search_path
        if overrides:
            env.update(overrides)
        return env

    def run(
        self,
        cmd: Sequence[str],
        *,
        quiet: bool = False,
        env: Mapping[str, str] | None = None,
        cwd: str | os.PathLike[str] | None = None,
        input: str | None = None,
        capture: bool = False,
    ) -> CommandResult:
        """Run a command and wait for it.

        Args:
            cmd: Argument list; ``cmd[0]`` is resolved on the search path.
            quiet: Suppress the command's output.
            env: Extra environment variables for this call only.
            cwd: Working directory.
            input: Text piped to stdin.
            capture: Capture stdout even when not quiet.

        Returns:
            CommandResult for a zero exit status.

        Raises:
            CommandError: The executable is missing or exits non-zero.
        """
        argv = [str(part) for part in cmd]
        if not argv:
            raise CommandError("empty command")

        pipe_output = quiet or capture or not self._verbose
        logger.debug("Executing: %s (cwd=%s)", argv, cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                cwd=cwd,
                env=self.environment(env),
                input=input,
                text=True,
                stdout=subprocess.PIPE if pipe_output else None,
                stderr=subprocess.PIPE if pipe_output else None,
            )
        except FileNotFoundError as e:
            raise CommandError(f"command not found: {argv[0]}", cmd=argv) from e
        except PermissionError as e:
            raise CommandError(f"command not executable: {argv[0]} ({e})", cmd=argv) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout or ""
        stderr = result.stderr or ""

        if result.returncode != 0:
            detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
            message = f"command failed (exit {result.returncode}): {' '.join(argv)}"
            if detail:
                message = f"{message}: {detail}"
            raise CommandError(
                message,
                cmd=argv,
                returncode=result.returncode,
                stderr=stderr,
            )

        return CommandResult(
            cmd=argv,
            returncode=result.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_ms=elapsed_ms,
        )

    def capture(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: str | os.PathLike[str] | None = None,
    ) -> str:
        """Run quietly and return stdout without trailing whitespace."""
        return self.run(cmd, quiet=True, env=env, cwd=cwd, capture=True).stdout.rstrip()

    def succeeds(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
    ) -> bool:
        """Whether a quiet run of ``cmd`` exits zero."""
        try:
            self.run(cmd, quiet=True, env=env)
        except CommandError:
            return False
        return True

    def which(self, name: str, extra_paths: Sequence[str | os.PathLike[str]] = ()) -> str | None:
        """Resolve ``name`` on the search path, ``extra_paths`` first."""
        path = os.pathsep.join([*(str(p) for p in extra_paths), self.search_path])
        return shutil.which(name, path=path)
