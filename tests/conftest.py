"""
Shared test fixtures and configuration.
"""

import io
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from dotstrap.adapters.shell.command import CommandError, CommandResult, CommandRunner
from dotstrap.core.config.loader import Settings
from dotstrap.core.context import reset_search_path
from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import TaskContext
from dotstrap.core.observability.step_log import StepLogger, reset_step_logger


class FakeRunner(CommandRunner):
    """Records every command instead of running it.

    Rules match on an argv prefix; the most recently added rule wins.
    Unmatched commands succeed with empty output.  ``which`` knows the
    names in ``available`` plus any file present in ``extra_paths``.
    """

    def __init__(self, available: Sequence[str] = ("sudo",)):
        super().__init__(search_path="/usr/bin:/bin")
        self.available: set[str] = set(available)
        self.calls: list[list[str]] = []
        self.envs: list[dict | None] = []
        self.inputs: list[str | None] = []
        self._rules: list[tuple[list[str], dict]] = []

    def on(
        self,
        *prefix: str,
        fail: bool = False,
        stdout: str = "",
        provides: Sequence[str] = (),
        effect: Callable[[list[str]], None] | None = None,
    ) -> "FakeRunner":
        self._rules.append(
            (list(prefix), {"fail": fail, "stdout": stdout, "provides": provides, "effect": effect})
        )
        return self

    def run(self, cmd, *, quiet=False, env=None, cwd=None, input=None, capture=False):
        argv = [str(c) for c in cmd]
        self.calls.append(argv)
        self.envs.append(dict(env) if env else None)
        self.inputs.append(input)

        for prefix, rule in reversed(self._rules):
            if argv[: len(prefix)] == prefix:
                if rule["fail"]:
                    raise CommandError(
                        f"command failed (exit 1): {' '.join(argv)}", cmd=argv, returncode=1
                    )
                if rule["effect"] is not None:
                    rule["effect"](argv)
                self.available.update(rule["provides"])
                return CommandResult(cmd=argv, returncode=0, stdout=rule["stdout"])

        return CommandResult(cmd=argv, returncode=0)

    def which(self, name, extra_paths=()):
        for directory in extra_paths:
            candidate = Path(directory) / name
            if candidate.exists() or candidate.is_symlink():
                return str(candidate)
        if name in self.available:
            return f"/usr/bin/{name}"
        return None

    def called(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.calls)


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Process-wide singletons never leak between tests."""
    yield
    reset_search_path()
    reset_step_logger()


@pytest.fixture(autouse=True)
def _not_root(monkeypatch):
    """Privileged commands go through sudo regardless of who runs the tests."""
    monkeypatch.setattr("dotstrap.core.services.installers.primitives.is_root", lambda: False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def settings(tmp_path: Path, home: Path) -> Settings:
    repo = tmp_path / "repo"
    (repo / "dotfiles").mkdir(parents=True)
    return Settings(
        home=home,
        config_home=home / ".config",
        repo_root=repo,
        log_format="json",
        log_file=tmp_path / "install.jsonl",
        color=False,
        emoji=False,
        shell="/bin/bash",
    )


@pytest.fixture
def pretty_out() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def step_log(settings: Settings, pretty_out: io.StringIO) -> StepLogger:
    return StepLogger(
        log_format="both",
        log_file=settings.log_file,
        color=False,
        emoji=False,
        verbose=True,
        stream=pretty_out,
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_ctx(settings: Settings, runner: FakeRunner, step_log: StepLogger):
    """Build a TaskContext for a given platform."""

    def _make(platform: Platform = Platform.UBUNTU, machine: str = "x86_64") -> TaskContext:
        return TaskContext(
            settings=settings,
            runner=runner,
            log=step_log,
            platform=platform,
            machine=machine,
        )

    return _make


@pytest.fixture
def ctx(make_ctx) -> TaskContext:
    return make_ctx()
