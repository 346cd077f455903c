"""
Tests for the orchestrator: ordering, skip semantics, fail-fast.
"""

import json

import pytest

from dotstrap.core.engine.orchestrator import (
    InstallerRunError,
    RunReport,
    TaskRecord,
    TaskStatus,
    run_tasks,
)
from dotstrap.core.models.task import InstallerTask
from dotstrap.core.services.installers.errors import VerificationError


def make_task(name: str, journal: list, *, fail_in: str | None = None, should_run: bool = True):
    """Build a task class that records each lifecycle call."""

    class _Task(InstallerTask):
        tool = name
        binary = name

        def should_run(self) -> bool:
            journal.append(f"{name}.should_run")
            return should_run and super().should_run()

        def pre(self) -> None:
            journal.append(f"{name}.pre")
            if fail_in == "pre":
                raise RuntimeError(f"{name} pre failed")

        def run(self) -> None:
            journal.append(f"{name}.run")
            if fail_in == "run":
                raise RuntimeError(f"{name} run failed")

        def post(self) -> None:
            journal.append(f"{name}.post")
            if fail_in == "post":
                raise VerificationError(f"verify: {name} missing on PATH")

    _Task.name = name
    return _Task


def _records(settings) -> list[dict]:
    return [json.loads(line) for line in settings.log_file.read_text().splitlines()]


class TestRunTasks:
    def test_runs_in_order_through_lifecycle(self, ctx, step_log):
        journal: list[str] = []
        tasks = [make_task(n, journal)(ctx) for n in ("t1", "t2")]
        report = run_tasks(tasks, step_log)

        assert journal == [
            "t1.should_run", "t1.pre", "t1.run", "t1.post",
            "t2.should_run", "t2.pre", "t2.run", "t2.post",
        ]
        assert report.all_ok
        assert report.status == "succeeded"
        assert [t.status for t in report.tasks] == [TaskStatus.SUCCEEDED] * 2

    def test_fail_fast(self, ctx, step_log, settings):
        journal: list[str] = []
        tasks = [
            make_task("t1", journal)(ctx),
            make_task("t2", journal, fail_in="run")(ctx),
            make_task("t3", journal)(ctx),
        ]
        with pytest.raises(InstallerRunError) as exc:
            run_tasks(tasks, step_log)

        report = exc.value.report
        assert exc.value.task == "t2"
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert [t.status for t in report.tasks] == [
            TaskStatus.SUCCEEDED,
            TaskStatus.FAILED,
            TaskStatus.PENDING,
        ]
        assert not any(entry.startswith("t3.") for entry in journal)
        assert "t2.post" not in journal

        steps = {r.get("step") for r in _records(settings)}
        assert "install-t3" not in steps

    def test_failure_record_carries_error(self, ctx, step_log, settings):
        journal: list[str] = []
        with pytest.raises(InstallerRunError):
            run_tasks([make_task("t1", journal, fail_in="post")(ctx)], step_log)

        records = [r for r in _records(settings) if r.get("step") == "install-t1"]
        error_line = next(r for r in records if r["ev"] == "log" and r["lvl"] == "ERROR")
        assert error_line["msg"] == "failed: verify: t1 missing on PATH"
        end = records[-1]
        assert end["ev"] == "step_end"
        assert end["ok"] is False
        assert "VerificationError" in end["error"]

    def test_should_run_false_skips_lifecycle(self, ctx, step_log, settings):
        journal: list[str] = []
        tasks = [make_task("t1", journal, should_run=False)(ctx), make_task("t2", journal)(ctx)]
        report = run_tasks(tasks, step_log)

        assert "t1.pre" not in journal
        assert "t1.run" not in journal
        assert report.tasks[0].status is TaskStatus.SKIPPED
        assert report.all_ok

        records = [r for r in _records(settings) if r.get("step") == "install-t1"]
        assert [r["ev"] for r in records] == ["step_begin", "log", "step_end"]
        assert records[1]["msg"] == "skipping (should_run=false)"
        assert records[2]["ok"] is True

    def test_skip_list_from_settings(self, make_ctx, step_log, settings):
        ctx = make_ctx()
        ctx.settings = settings.model_copy(update={"skip": ["t2"]})
        journal: list[str] = []
        report = run_tasks([make_task("t1", journal)(ctx), make_task("t2", journal)(ctx)], step_log)
        assert report.record("t2").status is TaskStatus.SKIPPED
        assert "t2.run" not in journal

    def test_every_begin_has_one_end(self, ctx, step_log, settings):
        journal: list[str] = []
        tasks = [make_task(n, journal)(ctx) for n in ("a", "b", "c")]
        run_tasks(tasks, step_log)

        records = [r for r in _records(settings) if r["ev"] in ("step_begin", "step_end")]
        for name in ("a", "b", "c"):
            pair = [r for r in records if r["step"] == f"install-{name}"]
            assert [r["ev"] for r in pair] == ["step_begin", "step_end"]
            assert pair[1]["duration_ms"] >= 0

    def test_empty_list(self, step_log):
        report = run_tasks([], step_log)
        assert report.all_ok
        assert report.to_dict()["total"] == 0


class TestRunReport:
    def test_to_dict(self):
        report = RunReport(
            tasks=[
                TaskRecord(name="jq-ubuntu", tool="jq", status=TaskStatus.SUCCEEDED, duration_ms=3),
                TaskRecord(name="fd-ubuntu", tool="fd", status=TaskStatus.FAILED, error="boom"),
                TaskRecord(name="bat-ubuntu", tool="bat"),
            ]
        )
        d = report.to_dict()
        assert d["status"] == "failed"
        assert (d["succeeded"], d["failed"], d["pending"]) == (1, 1, 1)
        assert d["tasks"][0] == {
            "name": "jq-ubuntu", "tool": "jq", "status": "succeeded", "duration_ms": 3,
        }
        assert d["tasks"][1]["error"] == "boom"
        assert "duration_ms" not in d["tasks"][2]
