"""
Orchestrator: run installer tasks in order, fail fast.

For each task, bracketed by ``install-<name>`` step events:

    should_run() false  → "skipping", successful step_end, nothing else
    otherwise           → pre() → run() → post()
    any exception       → error line + failed step_end (traceback),
                          remaining tasks never begin, InstallerRunError

Per-task state machine (linear, no retries):

    pending → skipped
    pending → running → succeeded | failed
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from dotstrap.core.models.task import InstallerTask
from dotstrap.core.observability.step_log import StepLogger, format_error

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    PENDING = "pending"
    SKIPPED = "skipped"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TaskRecord:
    """Outcome of one task in a run."""

    name: str
    tool: str
    status: TaskStatus = TaskStatus.PENDING
    duration_ms: int | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        result: dict = {"name": self.name, "tool": self.tool, "status": self.status.value}
        if self.duration_ms is not None:
            result["duration_ms"] = self.duration_ms
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class RunReport:
    """Result of running a task list."""

    tasks: list[TaskRecord] = field(default_factory=list)

    def _count(self, status: TaskStatus) -> int:
        return sum(1 for t in self.tasks if t.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(TaskStatus.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self._count(TaskStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(TaskStatus.FAILED)

    @property
    def pending(self) -> int:
        return self._count(TaskStatus.PENDING)

    @property
    def all_ok(self) -> bool:
        return all(t.status in (TaskStatus.SUCCEEDED, TaskStatus.SKIPPED) for t in self.tasks)

    @property
    def status(self) -> str:
        return "succeeded" if self.all_ok else "failed"

    def record(self, name: str) -> TaskRecord | None:
        return next((t for t in self.tasks if t.name == name), None)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total": len(self.tasks),
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "failed": self.failed,
            "pending": self.pending,
            "tasks": [t.to_dict() for t in self.tasks],
        }


class InstallerRunError(Exception):
    """A task failed; the run stopped.  Carries the partial report."""

    def __init__(self, task: str, report: RunReport, cause: BaseException):
        super().__init__(f"{task} failed: {cause}")
        self.task = task
        self.report = report


def run_task(task: InstallerTask, log: StepLogger, record: TaskRecord) -> None:
    """Run one task through its lifecycle, updating ``record``.

    Raises:
        Exception: Whatever the task raised, after logging it.
    """
    step = task.step
    log.step_begin(step)
    start = time.monotonic()

    if not task.should_run():
        log.info(step, "skipping (should_run=false)")
        log.step_end(step, ok=True)
        record.status = TaskStatus.SKIPPED
        return

    record.status = TaskStatus.RUNNING
    try:
        task.pre()
        task.run()
        task.post()
    except Exception as e:
        record.status = TaskStatus.FAILED
        record.duration_ms = int((time.monotonic() - start) * 1000)
        record.error = str(e) or e.__class__.__name__
        log.error(step, f"failed: {record.error}")
        log.step_end(step, ok=False, error=format_error(e))
        raise

    record.status = TaskStatus.SUCCEEDED
    record.duration_ms = int((time.monotonic() - start) * 1000)
    log.step_end(step, ok=True)


def run_tasks(tasks: Sequence[InstallerTask], log: StepLogger) -> RunReport:
    """Run ``tasks`` sequentially in the given order.

    Returns:
        RunReport with every task succeeded or skipped.

    Raises:
        InstallerRunError: A task failed.  Later tasks stay ``pending``.
    """
    report = RunReport(tasks=[TaskRecord(name=t.name, tool=t.tool) for t in tasks])

    for task, record in zip(tasks, report.tasks):
        try:
            run_task(task, log, record)
        except Exception as e:
            logger.debug("Task %s failed, stopping run", task.name, exc_info=True)
            raise InstallerRunError(task.name, report, e) from e

        marker = "✓" if record.status is TaskStatus.SUCCEEDED else "⊘"
        logger.info("%s %s → %s", marker, task.name, record.status.value)

    return report
