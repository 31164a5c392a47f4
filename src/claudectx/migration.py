"""One-shot upgrade from the symlink layout to the patch-in-place layout.

Older releases made ``~/.claude.json`` a symlink to a full-copy profile in
``~/.claudectx``. The current layout keeps a regular live config and slim
profiles holding only account fields. The upgrade fires when the live
config is still such a symlink, and is a no-op otherwise, so running it at
the start of every command is safe.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path

from claudectx.accounts import extract_account_fields
from claudectx.config import BACKUP_SUFFIX
from claudectx.exceptions import FilesystemError, ParseFailureError
from claudectx.profiles import (
    ProfileStore,
    atomic_write_text,
    read_json_document,
    strip_profile_suffix,
    write_json_document,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    """Outcome of one migration check."""

    performed: bool = False
    profiles: list[str] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)
    profile_dir: Path | None = None

    @property
    def notice(self) -> str:
        if not self.performed:
            return ""
        return (
            f"Migrated {len(self.profiles)} profile(s) to the slim format. "
            f"Backups saved as {self.profile_dir}/<name>.claude.json{BACKUP_SUFFIX}"
        )


def backup_path_for(profile_path: Path) -> Path:
    return profile_path.with_name(f"{profile_path.name}{BACKUP_SUFFIX}")


def _materialize_live_config(live_path: Path) -> None:
    """Replace the live config symlink with a regular file of the same content."""
    try:
        content = live_path.read_text(encoding="utf-8")
        mode = stat.S_IMODE(live_path.stat().st_mode)
    except UnicodeDecodeError as e:
        raise ParseFailureError(
            f"Failed to parse Claude config at {live_path}: {e}"
        ) from e
    except OSError as e:
        raise FilesystemError(
            f"Failed to read Claude config through symlink {live_path}: {e}"
        ) from e
    try:
        live_path.unlink()
        atomic_write_text(live_path, content, mode=mode)
    except OSError as e:
        raise FilesystemError(f"Failed to rewrite Claude config at {live_path}: {e}") from e
    logger.info("Replaced symlink %s with a regular file", live_path)


def _slim_profiles(profile_dir: Path) -> tuple[list[str], list[Path]]:
    try:
        entries = sorted(os.listdir(profile_dir))
    except FileNotFoundError:
        return [], []
    except OSError as e:
        raise FilesystemError(f"Failed to read profiles directory {profile_dir}: {e}") from e

    names: list[str] = []
    backups: list[Path] = []
    for entry in entries:
        name = strip_profile_suffix(entry)
        path = profile_dir / entry
        if not name or not path.is_file():
            continue
        backup = backup_path_for(path)
        try:
            shutil.copy(path, backup)
        except OSError as e:
            raise FilesystemError(f"Failed to back up profile {path}: {e}") from e
        slim = extract_account_fields(read_json_document(path, what="profile"))
        write_json_document(path, slim, what="profile")
        logger.info("Slimmed profile %s (backup at %s)", name, backup.name)
        names.append(name)
        backups.append(backup)
    return names, backups


def run_migration(store: ProfileStore) -> MigrationReport:
    """Upgrade a symlink-based install in place.

    The live config symlink is resolved before any profile is slimmed. A
    failure part-way through aborts and is not resumed on the next run,
    since the trigger (the symlink) is already gone; the ``.bak`` copies
    are the way back.
    """
    locations = store.locations
    if store.linked_profile_target() is None:
        return MigrationReport()

    logger.info("Legacy symlinked config detected at %s, migrating", locations.live_config)
    _materialize_live_config(locations.live_config)
    names, backups = _slim_profiles(locations.profile_dir)
    return MigrationReport(
        performed=True,
        profiles=names,
        backups=backups,
        profile_dir=locations.profile_dir,
    )
