"""Helpers shared by CLI command groups."""

from __future__ import annotations

import sys
from collections.abc import Sequence

import click

from dotstrap.core.config.loader import ConfigError, Settings, load_settings
from dotstrap.core.observability.step_log import configure_step_logger


def load_cli_settings(ctx: click.Context, skip: Sequence[str] = ()) -> Settings:
    """Resolve settings from the group options and configure the step log.

    Prints ``❌`` and exits 1 on a configuration error.
    """
    obj = ctx.obj or {}
    overrides = dict(obj.get("overrides", {}))
    if skip:
        overrides["skip"] = list(skip)

    try:
        settings = load_settings(config_path=obj.get("config_path"), overrides=overrides)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    configure_step_logger(settings)
    return settings
