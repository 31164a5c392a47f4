"""Log into a new Claude account and capture it as a profile."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

import click

from claudectx import launcher
from claudectx.accounts import OAuthAccount
from claudectx.config import LauncherConfig
from claudectx.exceptions import LoginError
from claudectx.profiles import ProfileStore, slugify
from claudectx.ui import Prompter, select_profile

logger = logging.getLogger(__name__)


@contextmanager
def live_config_backup(store: ProfileStore) -> Iterator[bool]:
    """Move the live config aside for the duration of the block.

    The original config is put back on every exit path, including errors
    and cancelled prompts. Yields whether a config existed.
    """
    had_backup = store.backup_live_config()
    if had_backup:
        click.echo(f"Backed up existing config to {store.locations.backup_config}")
    try:
        yield had_backup
    finally:
        store.restore_live_config(had_backup)
        if had_backup:
            click.echo("Restored original config.")
        else:
            click.echo("Cleaned up temporary config.")


def run_login_workflow(
    store: ProfileStore,
    launcher_config: LauncherConfig,
    prompter: Prompter,
    *,
    launch: Callable[[str], None],
) -> str | None:
    """Run the login flow and save the new account.

    Returns the slug of the saved profile, or None when the user declined
    to overwrite an existing one. ``launch`` switches to a profile and
    starts the wrapped CLI.
    """
    click.echo("Starting Claude login workflow...\n")

    with live_config_backup(store):
        click.echo("Launching Claude login...\n")
        status = launcher.run_login(launcher_config)
        if status != 0:
            raise LoginError(f"Claude login failed or was cancelled (exit status {status})")
        if not store.live_config_exists():
            raise LoginError("Login did not create a config file")

        account = OAuthAccount.from_document(store.read_live_config())
        if account is not None:
            click.echo(f"\nLogged in as: {account.label}")

        name = prompter.text("Enter a name for this profile")
        slug = slugify(name)
        if store.profile_exists(name) and not prompter.confirm(
            f"Profile '{slug}' already exists. Overwrite?"
        ):
            click.echo("Cancelled. Cleaning up...")
            return None

        store.save_profile(name)
        click.echo(f"Saved profile '{slug}'")

    if prompter.confirm(f"Launch Claude with profile '{slug}'?", default=True):
        launch(name)
        return slug

    if store.list_profiles() and prompter.confirm(
        "Select a different profile to launch?", default=False
    ):
        selected = select_profile(store, prompter, slug)
        if selected is not None:
            launch(selected)
            return slug

    click.echo("\nDone. Use 'claudectx' to launch with any profile.")
    return slug
