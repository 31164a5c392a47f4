"""Shared test fixtures for claudectx."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from claudectx.config import HOME_ENV_VAR, Locations
from claudectx.profiles import ProfileStore
from claudectx.ui import Prompter


def _sample_account(suffix: str) -> dict:
    return {
        "accountUuid": f"uuid-{suffix}",
        "emailAddress": f"user-{suffix}@example.com",
        "organizationUuid": f"org-uuid-{suffix}",
        "displayName": f"User {suffix}",
        "organizationRole": "member",
        "organizationName": f"Org {suffix}",
        "hasExtraUsageEnabled": False,
        "workspaceRole": None,
    }


def _full_config(suffix: str) -> dict:
    return {
        "numStartups": 12,
        "theme": "dark",
        "oauthAccount": _sample_account(suffix),
        "userID": f"user-id-{suffix}",
        "hasCompletedOnboarding": True,
        "subscriptionNoticeCount": 2,
        "projects": {"/work/repo": {"allowedTools": ["Bash"]}},
    }


class ScriptedPrompter(Prompter):
    """Prompter answering from pre-recorded lists and logging every question."""

    def __init__(self, *, confirms=(), texts=(), selections=()) -> None:
        super().__init__()
        self.confirms = list(confirms)
        self.texts = list(texts)
        self.selections = list(selections)
        self.asked: list[str] = []
        self.select_calls: list[tuple[str, list[str], int]] = []

    def select(self, title, items, default=0):
        self.asked.append(title)
        self.select_calls.append((title, list(items), default))
        return self.selections.pop(0)

    def confirm(self, message, *, default=False):
        self.asked.append(message)
        return self.confirms.pop(0)

    def text(self, message):
        self.asked.append(message)
        return self.texts.pop(0)


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Sandboxed home directory, also exported through CLAUDECTX_HOME."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv(HOME_ENV_VAR, str(home_dir))
    return home_dir


@pytest.fixture
def locations(home: Path) -> Locations:
    return Locations(home=home)


@pytest.fixture
def store(locations: Locations) -> ProfileStore:
    return ProfileStore(locations)


@pytest.fixture
def sample_account():
    return _sample_account


@pytest.fixture
def full_config():
    return _full_config


@pytest.fixture
def write_live_config(locations: Locations):
    def _write(document) -> Path:
        path = locations.live_config
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_profile(locations: Locations):
    def _write(name: str, document) -> Path:
        locations.profile_dir.mkdir(parents=True, exist_ok=True)
        path = locations.profile_dir / f"{name}.claude.json"
        if isinstance(document, str):
            path.write_text(document, encoding="utf-8")
        else:
            path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_json():
    def _read(path: Path):
        return json.loads(path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def scripted_prompter():
    return ScriptedPrompter
