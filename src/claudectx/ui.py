"""Interactive prompts and profile rendering for the CLI."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import click
from rich.console import Console
from rich.table import Table

from claudectx.accounts import OAuthAccount
from claudectx.profiles import ProfileStore

logger = logging.getLogger(__name__)

CURRENT_MARKER = " *"


def describe_profile(name: str, document: object) -> str:
    """One-line ``name - Display Name @ Org`` summary of a profile."""
    account = OAuthAccount.from_document(document, source=f"profile '{name}'")
    if account is None:
        logger.warning("Profile %s has no oauthAccount", name)
        return f"{name} - (no account)"
    return f"{name} - {account.label}"


def profile_lines(
    store: ProfileStore,
    current: str | None = None,
    *,
    mark: bool = True,
) -> list[tuple[str, str]]:
    """``(name, description)`` pairs for every profile, current one marked."""
    lines = []
    for name, document in store.iter_profiles():
        text = describe_profile(name, document)
        if mark and name == current:
            text += CURRENT_MARKER
        lines.append((name, text))
    return lines


class Prompter:
    """Terminal prompts: pick one item, yes/no, free text.

    The CLI and the login workflow only talk to this interface, so tests
    can hand in a scripted replacement.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def select(self, title: str, items: Sequence[str], default: int = 0) -> int | None:
        """Index of the chosen item, or None when the user cancels."""
        if not items:
            return None
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("#", justify="right", style="bold cyan")
        table.add_column("Profile")
        for i, item in enumerate(items, 1):
            table.add_row(f"{i}.", item)
        # A table title would wrap at the width of short rows.
        self._console.print(title, style="bold")
        self._console.print(table)
        try:
            choice = click.prompt(
                "Profile",
                type=click.IntRange(1, len(items)),
                default=default + 1,
            )
        except click.Abort:
            return None
        return choice - 1

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return click.confirm(message, default=default)

    def text(self, message: str) -> str:
        return click.prompt(message).strip()


def select_profile(
    store: ProfileStore,
    prompter: Prompter,
    current: str | None = None,
) -> str | None:
    """Let the user pick a saved profile; None if none exist or cancelled."""
    lines = profile_lines(store, current)
    if not lines:
        click.echo("No profiles found. Use 'claudectx save <name>' to create one.")
        return None
    names = [name for name, _text in lines]
    default = names.index(current) if current in names else 0
    index = prompter.select(
        "Select Claude profile",
        [text for _name, text in lines],
        default=default,
    )
    if index is None:
        return None
    return names[index]
