"""
Tests for core models — LogEvent, FileMapping, Platform, InstallerTask.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from dotstrap.core.models.event import EventKind, Level, LogEvent
from dotstrap.core.models.mapping import FileMapping
from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import InstallerTask, TaskContext


class TestLogEvent:
    def test_defaults(self):
        ev = LogEvent(msg="hello")
        assert ev.lvl == Level.INFO
        assert ev.ev == EventKind.LOG
        assert ev.component == "dotstrap"
        assert ev.version == 1
        assert ev.ts

    def test_record_omits_unset_fields(self):
        rec = LogEvent(step="link", msg="done").to_record()
        assert rec["lvl"] == "INFO"
        assert rec["ev"] == "log"
        assert rec["step"] == "link"
        assert "ok" not in rec
        assert "duration_ms" not in rec
        assert "error" not in rec

    def test_step_end_record(self):
        rec = LogEvent(
            ev=EventKind.STEP_END, lvl=Level.ERROR, step="x", ok=False, code=2, duration_ms=15
        ).to_record()
        assert rec["ev"] == "step_end"
        assert rec["ok"] is False
        assert rec["code"] == 2
        assert rec["duration_ms"] == 15
        assert "msg" not in rec

    def test_roundtrip_from_record(self):
        ev = LogEvent(lvl=Level.SUCCESS, step="s", msg="m")
        again = LogEvent.model_validate(ev.to_record())
        assert again == ev


class TestFileMapping:
    def test_absolute_paths(self):
        m = FileMapping(source=Path("/repo/dotfiles/bashrc"), destination=Path("/home/u/.bashrc"))
        assert m.source.name == "bashrc"

    @pytest.mark.parametrize("field", ["source", "destination"])
    def test_relative_rejected(self, field):
        values = {"source": Path("/a"), "destination": Path("/b")}
        values[field] = Path("relative/path")
        with pytest.raises(ValidationError, match="absolute"):
            FileMapping(**values)


class TestPlatform:
    @pytest.mark.parametrize(
        "platform,manager",
        [(Platform.UBUNTU, "apt-get"), (Platform.FEDORA, "dnf"), (Platform.MAC, "brew")],
    )
    def test_package_manager(self, platform, manager):
        assert platform.package_manager == manager

    def test_from_value(self):
        assert Platform("fedora") is Platform.FEDORA


class _Dummy(InstallerTask):
    name = "dummy-fedora"
    tool = "dummy"
    binary = "dummy"

    def run(self):
        pass


class TestInstallerTask:
    def test_step_key(self, make_ctx):
        assert _Dummy(make_ctx(Platform.FEDORA)).step == "install-dummy-fedora"

    def test_should_run_by_default(self, ctx):
        assert _Dummy(ctx).should_run() is True

    @pytest.mark.parametrize("entry", ["dummy", "dummy-fedora"])
    def test_skip_by_tool_or_name(self, ctx, entry):
        ctx.settings.skip = [entry]
        assert _Dummy(ctx).should_run() is False

    def test_abstract_run(self, ctx):
        with pytest.raises(TypeError):
            InstallerTask(ctx)

    def test_post_verifies_binary(self, ctx, runner):
        from dotstrap.core.services.installers.errors import VerificationError

        with pytest.raises(VerificationError):
            _Dummy(ctx).post()
        runner.available.add("dummy")
        _Dummy(ctx).post()

    def test_context_paths(self, ctx, home):
        assert isinstance(ctx, TaskContext)
        assert ctx.bin_dir == home / ".local" / "bin"
        assert ctx.fzf_dir == home / ".fzf"
        assert ctx.extra_paths == [home / ".local" / "bin", home / ".fzf" / "bin"]
