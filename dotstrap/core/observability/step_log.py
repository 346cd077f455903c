"""
Step log: dual-sink, step-scoped event emitter.

Two independent sinks, both on by default:

    pretty  → coloured, emoji-decorated lines on stdout (click)
    json    → one JSON object per line appended to LOG_FILE

A *step* is a named unit of work bounded by ``step_begin`` and
``step_end``.  ``step_begin`` records a monotonic start time keyed by
step name; ``step_end`` computes the elapsed milliseconds and clears
the key.  Two live steps with the same name are not supported (the
last begin wins), which is fine because the orchestrator never runs
steps concurrently.

Usage:

    log = get_step_logger()
    with log.step("install-files"):
        log.info("install-files", "linking dotfiles…")
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, TYPE_CHECKING

import click

from dotstrap.core.models.event import EventKind, Level, LogEvent
from dotstrap.core.persistence.event_log import EventLogWriter

if TYPE_CHECKING:
    from dotstrap.core.config.loader import Settings

logger = logging.getLogger(__name__)

_BADGES: dict[Level, tuple[str, str]] = {
    Level.SUCCESS: ("✅ ", "green"),
    Level.INFO: ("ℹ️  ", "cyan"),
    Level.WARN: ("⚠️  ", "yellow"),
    Level.ERROR: ("❌ ", "red"),
    Level.DEBUG: ("🔎 ", "bright_black"),
}


def format_error(exc: BaseException) -> str:
    """Error text for a failed step: traceback when available, else message."""
    if exc.__traceback__ is not None:
        return "".join(traceback.format_exception(exc)).rstrip()
    return str(exc) or exc.__class__.__name__


class StepLogger:
    """Process-wide structured logger with a pretty and a JSONL sink.

    Args:
        log_format: ``pretty``, ``json`` or ``both``.
        log_file: JSONL destination (required for ``json``/``both``).
        color: Allow ANSI colours (still off when the stream is not a TTY).
        emoji: Decorate pretty lines with emoji.
        verbose: Show DEBUG records on the pretty sink.
        component: Value of the ``component`` field.
        stream: Pretty sink (default: stdout).
        clock: Monotonic clock used for step durations.
    """

    def __init__(
        self,
        *,
        log_format: str = "both",
        log_file: Path | None = None,
        color: bool = True,
        emoji: bool = True,
        verbose: bool = False,
        component: str = "dotstrap",
        stream: IO[str] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._stream = stream
        self._pretty = log_format in ("pretty", "both")
        self._writer = (
            EventLogWriter(log_file)
            if log_format in ("json", "both") and log_file is not None
            else None
        )
        self._color = color
        self._emoji = emoji
        self._verbose = verbose
        self._component = component
        self._clock = clock
        self._starts: dict[str, float] = {}

    @property
    def writer(self) -> EventLogWriter | None:
        return self._writer

    # ── Steps ───────────────────────────────────────────────────

    def step_begin(self, step: str) -> None:
        self._starts[step] = self._clock()
        self._emit(LogEvent(lvl=Level.INFO, ev=EventKind.STEP_BEGIN, step=step))

    def step_end(
        self,
        step: str,
        ok: bool,
        code: int | None = None,
        error: str | None = None,
    ) -> None:
        started = self._starts.pop(step, None)
        duration_ms = (
            max(0, int((self._clock() - started) * 1000)) if started is not None else None
        )
        self._emit(
            LogEvent(
                lvl=Level.SUCCESS if ok else Level.ERROR,
                ev=EventKind.STEP_END,
                step=step,
                ok=ok,
                code=code,
                duration_ms=duration_ms,
                error=error,
            )
        )

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        """Bracket a block with step_begin/step_end.

        An exception inside the block is logged (error line + failed
        step_end carrying the traceback) and re-raised.
        """
        self.step_begin(name)
        try:
            yield
        except Exception as e:
            self.error(name, f"failed: {e}")
            self.step_end(name, ok=False, error=format_error(e))
            raise
        self.step_end(name, ok=True)

    # ── Plain records ───────────────────────────────────────────

    def debug(self, step: str | None, msg: str) -> None:
        self._log(Level.DEBUG, step, msg)

    def info(self, step: str | None, msg: str) -> None:
        self._log(Level.INFO, step, msg)

    def warn(self, step: str | None, msg: str) -> None:
        self._log(Level.WARN, step, msg)

    def error(self, step: str | None, msg: str) -> None:
        self._log(Level.ERROR, step, msg)

    def success(self, step: str | None, msg: str) -> None:
        self._log(Level.SUCCESS, step, msg)

    def _log(self, level: Level, step: str | None, msg: str) -> None:
        self._emit(LogEvent(lvl=level, ev=EventKind.LOG, step=step, msg=msg))

    # ── Sinks ───────────────────────────────────────────────────

    def _emit(self, event: LogEvent) -> None:
        event.component = self._component
        if self._pretty and (event.lvl is not Level.DEBUG or self._verbose):
            self._write_pretty(event)
        if self._writer is not None:
            self._writer.write(event)

    def _style(self, text: str, **styles: object) -> str:
        return click.style(text, **styles) if self._color else text

    def _write_pretty(self, event: LogEvent) -> None:
        label = self._style(f"[{event.step or 'step'}]", bold=True)
        parts: list[str] = []

        if event.ev is EventKind.STEP_BEGIN:
            parts += ["🚀" if self._emoji else "", label, "begin"]
        elif event.ev is EventKind.STEP_END:
            mark = "✅" if event.ok else "❌"
            parts += [
                mark if self._emoji else "",
                label,
                self._style("ok", fg="green") if event.ok else self._style("fail", fg="red"),
            ]
            if event.duration_ms is not None:
                parts.append(self._style(f"({event.duration_ms} ms)", dim=True))
        else:
            emoji, fg = _BADGES[event.lvl]
            badge = (emoji if self._emoji else "") + self._style(event.lvl.value, fg=fg)
            parts.append(badge)
            if event.step:
                parts.append(label)
            if event.msg:
                parts.append(event.msg)

        line = " ".join(p for p in parts if p)
        stream = self._stream if self._stream is not None else sys.stdout
        click.echo(line, file=stream, color=self._color)


# ── Process-wide instance ───────────────────────────────────────

_step_logger: StepLogger | None = None


def configure_step_logger(settings: Settings, stream: IO[str] | None = None) -> StepLogger:
    """Build the process-wide step logger from settings (once, at startup)."""
    global _step_logger
    out = stream if stream is not None else sys.stdout
    color = settings.color and bool(getattr(out, "isatty", lambda: False)())
    _step_logger = StepLogger(
        log_format=settings.log_format,
        log_file=settings.log_file,
        color=color,
        emoji=settings.emoji,
        verbose=settings.verbose,
        stream=stream,
    )
    logger.debug("Step log configured (format=%s, file=%s)", settings.log_format, settings.log_file)
    return _step_logger


def get_step_logger() -> StepLogger:
    """Return the process-wide step logger (pretty-only until configured)."""
    global _step_logger
    if _step_logger is None:
        _step_logger = StepLogger(log_format="pretty")
    return _step_logger


def reset_step_logger() -> None:
    """Forget the process-wide step logger (tests only)."""
    global _step_logger
    _step_logger = None
