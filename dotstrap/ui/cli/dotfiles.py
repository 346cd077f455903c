"""
CLI commands for dotfile links.

Thin wrappers over ``dotstrap.core.use_cases.dotfiles``.
"""

from __future__ import annotations

import json
import sys

import click

from dotstrap.ui.cli.common import load_cli_settings

_STATE_ICONS = {"linked": "✅", "foreign": "⚠️ ", "file": "📄", "missing": "⭕"}


@click.group()
def dotfiles() -> None:
    """Dotfiles — link, unlink, list."""


@dotfiles.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def link(ctx: click.Context, as_json: bool) -> None:
    """Symlink every dotfile into place."""
    from dotstrap.core.use_cases.dotfiles import link_dotfiles

    result = link_dotfiles(load_cli_settings(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.report is not None
    click.secho(
        f"🔗 {result.report.count('linked')} linked, "
        f"{result.report.count('replaced')} replaced, "
        f"{result.report.count('unchanged')} unchanged",
        fg="green",
    )


@dotfiles.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def unlink(ctx: click.Context, as_json: bool) -> None:
    """Remove the dotfile symlinks this tool created."""
    from dotstrap.core.use_cases.dotfiles import unlink_dotfiles

    result = unlink_dotfiles(load_cli_settings(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    assert result.report is not None
    click.secho(
        f"🧹 {result.report.count('removed')} removed, "
        f"{result.report.count('skipped')} left alone",
        fg="green",
    )


@dotfiles.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_links(ctx: click.Context, as_json: bool) -> None:
    """Show each mapping and the state of its destination."""
    from dotstrap.core.use_cases.dotfiles import list_dotfiles

    result = list_dotfiles(load_cli_settings(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    label = result.platform.value if result.platform else "?"
    click.secho(f"📋 Dotfiles ({label}):", fg="cyan", bold=True)
    for mapping, state in result.states:
        click.echo(f"   {_STATE_ICONS.get(state, '•')} {mapping.destination}  ({state})")
