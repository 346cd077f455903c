"""
Configuration loader: environment + optional dotstrap.yml into Settings.

Precedence, highest first:
    CLI overrides  >  environment variables  >  dotstrap.yml  >  defaults

Environment:
    HOME             required and absolute, else a ConfigError
    XDG_CONFIG_HOME  default: $HOME/.config (relative values ignored)
    LOG_FORMAT       pretty | json | both (default: both)
    LOG_FILE         default: <repo>/.logs/install.jsonl
    NO_COLOR         truthy → no ANSI colours
    LOG_EMOJI        falsy  → no emoji
    SHELL            used for the reload hint when nothing better is known
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILE = "dotstrap.yml"
DEFAULT_LOG_FILE = Path(".logs") / "install.jsonl"

LogFormat = Literal["pretty", "json", "both"]

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


class FileConfig(BaseModel):
    """Schema of dotstrap.yml."""

    model_config = ConfigDict(extra="forbid")

    log_format: LogFormat | None = None
    log_file: str | None = None
    skip: list[str] = Field(default_factory=list)


class Settings(BaseModel):
    """Resolved runtime settings."""

    home: Path
    config_home: Path
    repo_root: Path
    log_format: LogFormat = "both"
    log_file: Path
    color: bool = True
    emoji: bool = True
    verbose: bool = False
    quiet: bool = False
    skip: list[str] = Field(default_factory=list)
    shell: str = ""
    config_path: Path | None = None

    @property
    def dotfiles_dir(self) -> Path:
        return self.repo_root / "dotfiles"


def env_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    """Interpret an environment flag (1/true/yes/on)."""
    value = environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for dotstrap.yml starting from ``start_dir``, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to dotstrap.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_file_config(path: Path) -> FileConfig:
    """Load and validate dotstrap.yml.

    Raises:
        ConfigError: If the file is unreadable or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return FileConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return FileConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Resolve settings from the environment, dotstrap.yml and overrides.

    Args:
        config_path: Explicit dotstrap.yml.  If None, searches upward from ``cwd``.
        environ: Environment mapping (default: ``os.environ``).
        cwd: Directory used for discovery and as the fallback repo root.
        overrides: CLI-level values (``log_format``, ``log_file``, ``color``,
            ``emoji``, ``verbose``, ``quiet``, ``skip``).  None values are ignored.

    Returns:
        Validated Settings.

    Raises:
        ConfigError: HOME is unset or relative, or a value is invalid.
    """
    env = os.environ if environ is None else environ
    cwd = (cwd or Path.cwd()).resolve()
    cli = {k: v for k, v in (overrides or {}).items() if v is not None}

    home = env.get("HOME")
    if not home:
        raise ConfigError("HOME not set")
    home_path = Path(home)
    if not home_path.is_absolute():
        raise ConfigError(f"HOME must be an absolute path, got {home!r}")

    if config_path is None:
        config_path = find_config_file(cwd)
    file_cfg = load_file_config(config_path) if config_path else FileConfig()
    repo_root = config_path.parent.resolve() if config_path else cwd

    # relative XDG_CONFIG_HOME values are invalid and ignored
    config_home = env.get("XDG_CONFIG_HOME", "")
    if not config_home or not Path(config_home).is_absolute():
        config_home = str(home_path / ".config")

    log_format = cli.get("log_format") or env.get("LOG_FORMAT") or file_cfg.log_format or "both"

    raw_log_file = cli.get("log_file") or env.get("LOG_FILE") or file_cfg.log_file
    log_file = Path(raw_log_file) if raw_log_file else DEFAULT_LOG_FILE
    if not log_file.is_absolute():
        log_file = repo_root / log_file

    color = cli.get("color", True) and not env_bool(env, "NO_COLOR")
    emoji = cli.get("emoji", True) and env_bool(env, "LOG_EMOJI", default=True)

    skip = [*file_cfg.skip, *cli.get("skip", ())]

    try:
        settings = Settings(
            home=home_path,
            config_home=Path(config_home),
            repo_root=repo_root,
            log_format=log_format,
            log_file=log_file,
            color=color,
            emoji=emoji,
            verbose=bool(cli.get("verbose", False)),
            quiet=bool(cli.get("quiet", False)),
            skip=skip,
            shell=env.get("SHELL", ""),
            config_path=config_path,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info("Settings loaded (repo=%s, log_format=%s)", settings.repo_root, settings.log_format)
    return settings
