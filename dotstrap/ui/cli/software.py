"""
CLI commands for software installation.

Thin wrappers over ``dotstrap.core.use_cases.software``.
"""

from __future__ import annotations

import json
import sys

import click

from dotstrap.core.models.platform import Platform
from dotstrap.ui.cli.common import load_cli_settings

_STATUS_ICONS = {
    "succeeded": "✅",
    "skipped": "⊘",
    "failed": "❌",
    "pending": "⏸️ ",
    "running": "…",
}


def echo_run_report(report_dict: dict) -> None:
    """Print a RunReport summary (shared with the top-level install)."""
    for task in report_dict.get("tasks", []):
        icon = _STATUS_ICONS.get(task["status"], "•")
        duration = f"  {task['duration_ms']} ms" if "duration_ms" in task else ""
        click.echo(f"   {icon} {task['name']:<20} {task['status']}{duration}")


@click.group()
def software() -> None:
    """Software — install and list CLI tools."""


@software.command()
@click.option("--skip", multiple=True, help="Tool or task name to skip (repeatable).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, skip: tuple[str, ...], as_json: bool) -> None:
    """Install every tool for the detected platform."""
    from dotstrap.core.use_cases.software import install_software

    result = install_software(load_cli_settings(ctx, skip=skip))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.report is not None:
        click.echo()
        echo_run_report(result.report.to_dict())

    if result.error:
        click.secho(f"\n❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho("\n✅ Software installed", fg="green", bold=True)


@software.command("list")
@click.option(
    "--platform",
    "platform_name",
    type=click.Choice([p.value for p in Platform]),
    default=None,
    help="Platform to list (default: detected).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_tools(ctx: click.Context, platform_name: str | None, as_json: bool) -> None:
    """List the tasks that would run, in order."""
    from dotstrap.core.services.detection import detect_platform
    from dotstrap.core.use_cases.software import list_software

    settings = load_cli_settings(ctx)
    platform = Platform(platform_name) if platform_name else detect_platform()
    tasks = list_software(settings, platform)

    if as_json:
        click.echo(json.dumps({"platform": platform.value, "tasks": tasks}, indent=2))
        return

    header = f"📦 Tasks for {platform.value} ({platform.package_manager}):"
    click.secho(header, fg="cyan", bold=True)
    for i, task in enumerate(tasks, start=1):
        marker = "  (skipped)" if task["skipped"] else ""
        click.echo(f"   {i}. {task['name']:<20} → {task['binary']}{marker}")
