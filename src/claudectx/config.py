"""Path resolution and settings loader for claudectx.

Paths are resolved once at startup into a ``Locations`` value and passed
to every component via dependency injection. Optional tool settings are
loaded from ``~/.claudectx/config.toml`` with sensible defaults when the
file is absent.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

HOME_ENV_VAR = "CLAUDECTX_HOME"

LIVE_CONFIG_NAME = ".claude.json"
BACKUP_SUFFIX = ".bak"
PROFILE_DIR_NAME = ".claudectx"
SETTINGS_FILE_NAME = "config.toml"


class ConfigError(Exception):
    """Raised when paths or settings cannot be resolved."""


def home_directory(environ: Mapping[str, str] | None = None) -> Path:
    """Return the base directory all claudectx paths hang off.

    ``CLAUDECTX_HOME`` wins when set and is used verbatim. It also covers
    platforms where the default home lookup ignores environment overrides
    handed to child processes.
    """
    env = os.environ if environ is None else environ
    override = env.get(HOME_ENV_VAR)
    if override is not None:
        return Path(override)
    try:
        return Path.home()
    except RuntimeError as e:
        raise ConfigError(f"Failed to find home directory: {e}") from e


@dataclass(frozen=True)
class Locations:
    """Resolved filesystem layout for one invocation."""

    home: Path

    @classmethod
    def resolve(cls, environ: Mapping[str, str] | None = None) -> Locations:
        return cls(home=home_directory(environ))

    @property
    def live_config(self) -> Path:
        return self.home / LIVE_CONFIG_NAME

    @property
    def backup_config(self) -> Path:
        return self.home / f"{LIVE_CONFIG_NAME}{BACKUP_SUFFIX}"

    @property
    def profile_dir(self) -> Path:
        return self.home / PROFILE_DIR_NAME

    @property
    def settings_file(self) -> Path:
        return self.profile_dir / SETTINGS_FILE_NAME


@dataclass(frozen=True)
class LauncherConfig:
    """How the wrapped CLI is started."""

    command: str = "claude"
    login_args: list[str] = field(default_factory=lambda: ["/login"])
    default_args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "WARNING"


@dataclass(frozen=True)
class Config:
    """Top-level claudectx settings."""

    launcher: LauncherConfig = field(default_factory=LauncherConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _string_list(raw: object, *, field_name: str, path: Path, default: list[str]) -> list[str]:
    if raw is None:
        return list(default)
    if isinstance(raw, str):
        return [raw]
    if not isinstance(raw, list):
        raise ConfigError(f"Invalid {field_name} in {path}: expected list of strings.")
    return [str(item) for item in raw]


def load_config(path: Path | None) -> Config:
    """Load settings from a TOML file.

    Returns the default config when ``path`` is None or does not exist.
    """
    if path is None or not path.exists():
        return Config()

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    launcher_data = raw.get("launcher", {})
    if not isinstance(launcher_data, dict):
        raise ConfigError(f"Invalid [launcher] section in {path}: expected table.")
    defaults = LauncherConfig()
    command = str(launcher_data.get("command", defaults.command)).strip()
    if not command:
        raise ConfigError(f"Invalid launcher.command in {path}: cannot be empty.")
    launcher = LauncherConfig(
        command=command,
        login_args=_string_list(
            launcher_data.get("login_args"),
            field_name="launcher.login_args",
            path=path,
            default=defaults.login_args,
        ),
        default_args=_string_list(
            launcher_data.get("default_args"),
            field_name="launcher.default_args",
            path=path,
            default=defaults.default_args,
        ),
    )

    log_data = raw.get("logging", {})
    if not isinstance(log_data, dict):
        raise ConfigError(f"Invalid [logging] section in {path}: expected table.")
    logging_cfg = LoggingConfig(
        level=str(log_data.get("level", "WARNING")).strip().upper() or "WARNING",
    )

    return Config(launcher=launcher, logging=logging_cfg)
