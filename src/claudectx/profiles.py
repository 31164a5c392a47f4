"""Profile store over ``~/.claudectx/<slug>.claude.json`` files."""

from __future__ import annotations

import json
import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from claudectx.accounts import account_uuid, extract_account_fields, patch_account_fields
from claudectx.config import Locations
from claudectx.exceptions import (
    FilesystemError,
    InvalidProfileNameError,
    MissingLiveConfigError,
    ParseFailureError,
    ProfileNotFoundError,
)

logger = logging.getLogger(__name__)

PROFILE_SUFFIX = ".claude.json"


def slugify(name: str) -> str:
    """Normalize a profile name into a filesystem-safe identifier.

    "My Work Profile" -> "my-work-profile", "FG@Company" -> "fg-company".
    """
    mapped = "".join(
        ch.lower() if ch.isascii() and ch.isalnum() else "-"
        for ch in name
    )
    return "-".join(part for part in mapped.split("-") if part)


def strip_profile_suffix(filename: str) -> str | None:
    if not filename.endswith(PROFILE_SUFFIX):
        return None
    return filename[: -len(PROFILE_SUFFIX)]


def read_json_document(path: Path, *, what: str) -> Any:
    """Read and parse one JSON file, raising the claudectx error taxonomy."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FilesystemError(f"Failed to read {what} at {path}: {e}") from e
    try:
        # Undecodable bytes surface as UnicodeDecodeError, a ValueError.
        return json.loads(raw)
    except ValueError as e:
        raise ParseFailureError(f"Failed to parse {what} at {path}: {e}") from e


def render_json_document(document: Any) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def atomic_write_text(path: Path, content: str, *, mode: int | None = None) -> None:
    """Replace ``path`` with ``content`` via a temp file and ``os.replace``.

    The permission bits of an existing target are kept; ``mode`` sets them
    explicitly when the target is gone.
    """
    # Write through a symlink the user placed there themselves.
    if path.is_symlink():
        path = path.resolve()
    if mode is None and path.exists():
        mode = stat.S_IMODE(path.stat().st_mode)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp-{os.getpid()}")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    finally:
        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except OSError:
            pass


def write_json_document(path: Path, document: Any, *, what: str) -> None:
    """Pretty-print ``document`` to ``path``, creating parent directories."""
    try:
        atomic_write_text(path, render_json_document(document))
    except OSError as e:
        raise FilesystemError(f"Failed to write {what} at {path}: {e}") from e


class ProfileStore:
    """CRUD over saved profiles plus the operations that touch the live config."""

    def __init__(self, locations: Locations) -> None:
        self._locations = locations

    @property
    def locations(self) -> Locations:
        return self._locations

    # -- Profile files ------------------------------------------------------

    def list_profiles(self) -> list[str]:
        """Names of all saved profiles, sorted. Missing directory means none."""
        profile_dir = self._locations.profile_dir
        try:
            entries = os.listdir(profile_dir)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise FilesystemError(
                f"Failed to read profiles directory {profile_dir}: {e}"
            ) from e
        names = []
        for entry in entries:
            name = strip_profile_suffix(entry)
            if name:
                names.append(name)
        return sorted(names)

    def profile_path(self, name: str) -> Path:
        slug = slugify(name)
        if not slug:
            raise InvalidProfileNameError(
                f"Invalid profile name {name!r}: it must contain letters or digits"
            )
        return self._locations.profile_dir / f"{slug}{PROFILE_SUFFIX}"

    def profile_exists(self, name: str) -> bool:
        return self.profile_path(name).exists()

    def load_profile(self, name: str) -> dict[str, Any]:
        """Parsed content of the profile saved under ``name``."""
        path = self.profile_path(name)
        if not path.exists():
            raise ProfileNotFoundError(slugify(name))
        return self._read_object(path, what="profile")

    def iter_profiles(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(name, document)`` in listing order.

        A malformed profile aborts the whole iteration.
        """
        for name in self.list_profiles():
            path = self._locations.profile_dir / f"{name}{PROFILE_SUFFIX}"
            yield name, read_json_document(path, what="profile")

    def save_profile(self, name: str) -> Path:
        """Snapshot the live config's account fields as profile ``name``.

        The live config itself is only read.
        """
        path = self.profile_path(name)
        document = self.read_live_config()
        slim = extract_account_fields(document)
        write_json_document(path, slim, what="profile")
        logger.info("Saved profile %s (%d account field(s))", path.name, len(slim))
        return path

    def delete_profile(self, name: str) -> Path:
        path = self.profile_path(name)
        if not path.exists():
            raise ProfileNotFoundError(slugify(name))
        try:
            path.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to delete profile at {path}: {e}") from e
        logger.info("Deleted profile %s", path.name)
        return path

    # -- Live config --------------------------------------------------------

    def live_config_exists(self) -> bool:
        return self._locations.live_config.exists()

    def read_live_config(self) -> dict[str, Any]:
        path = self._locations.live_config
        if not path.exists():
            raise MissingLiveConfigError(path)
        return self._read_object(path, what="Claude config")

    def switch_to_profile(self, name: str) -> Path:
        """Patch the live config with profile ``name``'s account fields.

        Portable settings in the live config are preserved; the profile file
        is never written.
        """
        profile = self.load_profile(name)
        live_path = self._locations.live_config
        if live_path.exists():
            live = self.read_live_config()
        else:
            logger.debug("No live config at %s, starting from an empty one", live_path)
            live = {}
        patch_account_fields(live, profile)
        write_json_document(live_path, live, what="Claude config")
        logger.info("Switched live config to profile %s", slugify(name))
        return live_path

    def current_profile(self) -> str | None:
        """Name of the saved profile matching the live config, if any."""
        live_path = self._locations.live_config
        linked = self.linked_profile_target()
        if linked is not None:
            # Pre-migration layout: the link target names the profile.
            return strip_profile_suffix(linked.name)

        try:
            document = json.loads(live_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug("Live config unreadable, no current profile: %s", e)
            return None

        live_uuid = account_uuid(document)
        if live_uuid is None:
            return None
        for name, profile in self.iter_profiles():
            if account_uuid(profile) == live_uuid:
                return name
        return None

    def linked_profile_target(self) -> Path | None:
        """Profile file the live config symlinks to, in the old layout.

        None when the live config is not a symlink, or links elsewhere.
        """
        live_path = self._locations.live_config
        if not live_path.is_symlink():
            return None
        try:
            raw_target = Path(os.readlink(live_path))
        except OSError as e:
            raise FilesystemError(f"Failed to read symlink {live_path}: {e}") from e
        target = raw_target if raw_target.is_absolute() else live_path.parent / raw_target
        if target.parent.resolve() != self._locations.profile_dir.resolve():
            return None
        if strip_profile_suffix(target.name) is None:
            return None
        return target

    def backup_live_config(self) -> bool:
        """Move the live config aside to its ``.bak`` sibling.

        Returns True when there was a config to back up.
        """
        live_path = self._locations.live_config
        backup_path = self._locations.backup_config
        if not live_path.exists():
            return False
        try:
            os.replace(live_path, backup_path)
        except OSError as e:
            raise FilesystemError(
                f"Failed to back up Claude config to {backup_path}: {e}"
            ) from e
        logger.info("Backed up %s to %s", live_path, backup_path)
        return True

    def restore_live_config(self, had_backup: bool) -> None:
        """Undo ``backup_live_config``.

        Without a backup, whatever config appeared meanwhile is removed.
        """
        live_path = self._locations.live_config
        backup_path = self._locations.backup_config
        try:
            if had_backup:
                os.replace(backup_path, live_path)
                logger.info("Restored %s from %s", live_path, backup_path)
            elif live_path.exists():
                live_path.unlink()
                logger.info("Removed temporary config %s", live_path)
        except OSError as e:
            raise FilesystemError(f"Failed to restore Claude config: {e}") from e

    def _read_object(self, path: Path, *, what: str) -> dict[str, Any]:
        document = read_json_document(path, what=what)
        if not isinstance(document, dict):
            raise ParseFailureError(
                f"Failed to parse {what} at {path}: expected a JSON object"
            )
        return document
