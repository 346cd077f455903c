"""
dotstrap — CLI entrypoint.

Usage:
    dotstrap --help
    dotstrap install
    dotstrap dotfiles link
    dotstrap software list --platform fedora
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from dotstrap import __version__
from dotstrap.core.observability.logging_config import resolve_level, setup_logging
from dotstrap.ui.cli.common import load_cli_settings


@click.group()
@click.version_option(version=__version__, prog_name="dotstrap")
@click.option("--verbose", "-v", is_flag=True, help="Show debug lines in the step log.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output, including installer command output.")
@click.option("--debug", is_flag=True, help="Enable diagnostic logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to dotstrap.yml (default: auto-detect).",
)
@click.option(
    "--log-format",
    type=click.Choice(["pretty", "json", "both"]),
    default=None,
    help="Step log sinks (default: $LOG_FORMAT or both).",
)
@click.option("--log-file", default=None, help="JSONL step log (default: $LOG_FILE).")
@click.option("--no-color", is_flag=True, help="Disable ANSI colours.")
@click.option("--no-emoji", is_flag=True, help="Disable emoji in the step log.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    log_format: str | None,
    log_file: str | None,
    no_color: bool,
    no_emoji: bool,
) -> None:
    """dotstrap — link dotfiles and install CLI tools on a fresh machine."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["overrides"] = {
        "log_format": log_format,
        "log_file": log_file,
        "color": False if no_color else None,
        "emoji": False if no_emoji else None,
        "verbose": verbose or debug,
        "quiet": quiet,
    }

    # ── Search path (once, at process start) ────────────────────
    from dotstrap.core.context import harden_search_path, set_search_path

    set_search_path(harden_search_path())

    # ── Diagnostic logging ──────────────────────────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet, environ=os.environ),
        log_file=os.environ.get("DOTSTRAP_LOG_FILE"),
    )


@cli.command()
@click.option("--skip", multiple=True, help="Tool or task name to skip (repeatable).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, skip: tuple[str, ...], as_json: bool) -> None:
    """Link dotfiles, then install every tool for this platform."""
    from dotstrap.core.use_cases.install import run_install
    from dotstrap.ui.cli.software import echo_run_report

    result = run_install(load_cli_settings(ctx, skip=skip))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.software is not None and result.software.report is not None:
        click.echo()
        echo_run_report(result.software.report.to_dict())

    if result.error:
        click.secho(f"\n❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho("\n✅ All done", fg="green", bold=True)
    click.echo(f"   Reload your shell: {result.hint}")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def platform(as_json: bool) -> None:
    """Show the detected platform and architecture."""
    from dotstrap.core.services.detection import detect_machine, detect_platform

    detected = detect_platform()
    machine = detect_machine()

    if as_json:
        data = {
            "platform": detected.value,
            "package_manager": detected.package_manager,
            "machine": machine,
        }
        click.echo(json.dumps(data, indent=2))
        return

    click.secho(f"🖥️  {detected.value}", fg="cyan", bold=True)
    click.echo(f"   Package manager: {detected.package_manager}")
    click.echo(f"   Architecture:    {machine}")


@cli.command()
@click.option("--tail", "-n", default=20, show_default=True, help="Number of records.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON lines.")
@click.pass_context
def logs(ctx: click.Context, tail: int, as_json: bool) -> None:
    """Show the most recent step log records."""
    from dotstrap.core.persistence.event_log import EventLogWriter

    settings = load_cli_settings(ctx)
    events = EventLogWriter(settings.log_file).read_recent(tail)

    if as_json:
        for event in events:
            click.echo(json.dumps(event.to_record(), ensure_ascii=False))
        return

    if not events:
        click.secho(f"⚠️  No records in {settings.log_file}", fg="yellow")
        return

    colors = {"SUCCESS": "green", "ERROR": "red", "WARN": "yellow", "DEBUG": "bright_black"}
    for event in events:
        step = f"[{event.step}] " if event.step else ""
        if event.ev.value == "log":
            text = event.msg or ""
        elif event.ev.value == "step_begin":
            text = "begin"
        else:
            text = "ok" if event.ok else "fail"
            if event.duration_ms is not None:
                text += f" ({event.duration_ms} ms)"
        click.echo(f"{event.ts} ", nl=False)
        click.secho(f"{event.lvl.value:<7}", fg=colors.get(event.lvl.value), nl=False)
        click.echo(f" {step}{text}")


# ── Register sub-groups ─────────────────────────────────────────

from dotstrap.ui.cli.dotfiles import dotfiles  # noqa: E402
from dotstrap.ui.cli.software import software  # noqa: E402

cli.add_command(dotfiles)
cli.add_command(software)


if __name__ == "__main__":
    cli()
