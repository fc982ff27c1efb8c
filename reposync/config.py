from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path

from reposync.errors import ConfigError


CONFIG_FILENAME = ".reposync.json"
SNAPSHOT_FILENAME = ".generated_repo_list.json"
ALIAS_FILENAME = ".generated_repo_aliases"
DEFAULT_IDENTITY = "pablothedeveloper"

ALIAS_STYLES = {"fish", "bash"}
SYNC_COMMANDS = {"pull", "gh"}


@dataclass(slots=True)
class ReposyncConfig:
    root: str
    snapshot_file: str
    alias_file: str
    identity: str = DEFAULT_IDENTITY
    alias_style: str = "fish"
    sync_command: str = "pull"
    follow_symlinks: bool = False

    @property
    def root_path(self) -> Path:
        return Path(self.root).expanduser().resolve()

    @property
    def snapshot_path(self) -> Path:
        return Path(self.snapshot_file).expanduser()

    @property
    def alias_path(self) -> Path:
        return Path(self.alias_file).expanduser()


def default_config(home: Path | None = None) -> ReposyncConfig:
    home = home or Path.home()
    return ReposyncConfig(
        root=str(home),
        snapshot_file=str(home / SNAPSHOT_FILENAME),
        alias_file=str(home / ALIAS_FILENAME),
    )


def config_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / CONFIG_FILENAME


def load_config(path: Path | None = None, *, home: Path | None = None) -> ReposyncConfig:
    config = default_config(home)
    path = path or config_path(home)
    if not path.exists():
        return config

    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object.")

    known = {field.name for field in fields(ReposyncConfig)}
    overrides = {key: value for key, value in data.items() if key in known}
    return validate_config(replace(config, **overrides))


def apply_overrides(config: ReposyncConfig, **overrides) -> ReposyncConfig:
    values = {key: value for key, value in overrides.items() if value is not None}
    if not values:
        return validate_config(config)
    return validate_config(replace(config, **values))


def validate_config(config: ReposyncConfig) -> ReposyncConfig:
    for name in ("root", "snapshot_file", "alias_file", "identity"):
        value = getattr(config, name)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"`{name}` must be a non-empty string.")
    if config.alias_style not in ALIAS_STYLES:
        raise ConfigError(
            f"Invalid alias_style {config.alias_style!r}. Use one of: {', '.join(sorted(ALIAS_STYLES))}."
        )
    if config.sync_command not in SYNC_COMMANDS:
        raise ConfigError(
            f"Invalid sync_command {config.sync_command!r}. Use one of: {', '.join(sorted(SYNC_COMMANDS))}."
        )
    if not isinstance(config.follow_symlinks, bool):
        raise ConfigError("`follow_symlinks` must be true or false.")
    return config
