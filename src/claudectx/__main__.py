"""CLI entry point for claudectx."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from claudectx import __version__, launcher
from claudectx.accounts import OAuthAccount
from claudectx.config import Config, ConfigError, Locations, load_config
from claudectx.exceptions import ClaudectxError, ProfileNotFoundError
from claudectx.login import run_login_workflow
from claudectx.migration import run_migration
from claudectx.profiles import ProfileStore, slugify
from claudectx.ui import Prompter, profile_lines, select_profile

logger = logging.getLogger(__name__)

_CLAUDE_ARGS_KEY = "claudectx.claude_args"
_DEFAULT_COMMAND = "use"


class _DefaultCommandGroup(click.Group):
    """Group where an unknown first word is a profile name for ``use``.

    Everything after ``--`` is kept aside for the wrapped CLI.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if "--" in args:
            idx = args.index("--")
            ctx.meta[_CLAUDE_ARGS_KEY] = tuple(args[idx + 1:])
            args = args[:idx]
        return super().parse_args(ctx, args)

    def resolve_command(self, ctx: click.Context, args: list[str]):
        if args and self.get_command(ctx, args[0]) is None:
            return _DEFAULT_COMMAND, self.get_command(ctx, _DEFAULT_COMMAND), args
        return super().resolve_command(ctx, args)


def _fail(error: Exception) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _configure_logging(level_name: str, verbose: bool) -> None:
    level = logging.getLevelName(level_name.upper())
    if verbose:
        level = logging.DEBUG
    elif not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _switch_and_launch(ctx: click.Context, name: str, claude_args: tuple[str, ...]) -> None:
    store: ProfileStore = ctx.obj["store"]
    config: Config = ctx.obj["config"]
    store.switch_to_profile(name)
    click.echo(f"Switched to profile '{slugify(name)}'")
    if ctx.obj["no_launch"]:
        return
    launcher.launch_claude(config.launcher, list(claude_args))


def _choose_profile(store: ProfileStore, prompter: Prompter) -> str | None:
    """Interactive pick; prints first-run guidance when nothing is saved."""
    if not store.list_profiles():
        account = OAuthAccount.from_document(store.read_live_config())
        label = account.label if account is not None else "(not logged in)"
        click.echo(f"Current account: {label}")
        click.echo(
            "\nNo profiles saved yet. Use 'claudectx save <name>' to save this profile."
        )
        return None
    selected = select_profile(store, prompter, store.current_profile())
    if selected is None:
        click.echo("No profile selected.")
    return selected


@click.group(cls=_DefaultCommandGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="claudectx")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to settings TOML. Defaults to ~/.claudectx/config.toml.",
)
@click.option(
    "--no-launch",
    is_flag=True,
    default=False,
    help="Switch the profile without starting claude.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    no_launch: bool,
    verbose: bool,
) -> None:
    """Switch Claude Code accounts by patching ~/.claude.json.

    \b
    Usage:
      claudectx                     # pick a profile interactively
      claudectx work                # switch to 'work' and launch claude
      claudectx work -- --resume    # extra args are passed to claude
    """
    ctx.ensure_object(dict)
    try:
        locations = Locations.resolve()
        config = load_config(config_path or locations.settings_file)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    _configure_logging(config.logging.level, verbose)
    logger.debug("Using home %s", locations.home)
    store = ProfileStore(locations)
    ctx.obj["config"] = config
    ctx.obj["store"] = store
    ctx.obj["no_launch"] = no_launch
    ctx.obj.setdefault("prompter", Prompter())

    try:
        report = run_migration(store)
    except ClaudectxError as e:
        _fail(e)
    if report.performed:
        click.echo(report.notice)

    if ctx.invoked_subcommand is None:
        ctx.invoke(use, profile=None)


@cli.command(name=_DEFAULT_COMMAND)
@click.argument("profile", required=False)
@click.pass_context
def use(ctx: click.Context, profile: str | None) -> None:
    """Switch to PROFILE and launch claude (the default command).

    Prompts for a profile when none is given, and offers to save the
    current config when PROFILE does not exist yet.
    """
    store: ProfileStore = ctx.obj["store"]
    prompter: Prompter = ctx.obj["prompter"]
    claude_args = ctx.meta.get(_CLAUDE_ARGS_KEY, ())
    try:
        if profile is None:
            profile = _choose_profile(store, prompter)
            if profile is None:
                return
        elif not store.profile_exists(profile):
            slug = slugify(profile)
            if not prompter.confirm(
                f"Profile '{slug}' not found. Save current config as this profile?"
            ):
                raise ProfileNotFoundError(slug)
            store.save_profile(profile)
            click.echo(f"Profile '{slug}' saved.")
        _switch_and_launch(ctx, profile, claude_args)
    except ClaudectxError as e:
        _fail(e)


@cli.command(name="list")
@click.option("--json", "as_json", is_flag=True, default=False, help="Emit JSON.")
@click.pass_context
def list_command(ctx: click.Context, as_json: bool) -> None:
    """List all saved profiles."""
    store: ProfileStore = ctx.obj["store"]
    try:
        current = store.current_profile()
        lines = profile_lines(store, current, mark=not as_json)
    except ClaudectxError as e:
        _fail(e)

    if as_json:
        payload = {
            "current": current,
            "profiles": [
                {"name": name, "current": name == current, "description": text}
                for name, text in lines
            ],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if not lines:
        click.echo("No profiles found.")
        return
    for _name, text in lines:
        click.echo(text)


@cli.command()
@click.argument("name")
@click.pass_context
def save(ctx: click.Context, name: str) -> None:
    """Save current config as a new profile."""
    store: ProfileStore = ctx.obj["store"]
    prompter: Prompter = ctx.obj["prompter"]
    slug = slugify(name)
    try:
        if store.profile_exists(name) and not prompter.confirm(
            f"Profile '{slug}' already exists. Overwrite?"
        ):
            click.echo("Cancelled.")
            return
        store.save_profile(name)
    except ClaudectxError as e:
        _fail(e)
    click.echo(f"Saved current config as '{slug}'")


@cli.command()
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, name: str) -> None:
    """Delete a profile."""
    store: ProfileStore = ctx.obj["store"]
    try:
        store.delete_profile(name)
    except ClaudectxError as e:
        _fail(e)
    click.echo(f"Deleted profile '{slugify(name)}'")


@cli.command()
@click.pass_context
def login(ctx: click.Context) -> None:
    """Login to a new Claude account and save it as a profile."""
    store: ProfileStore = ctx.obj["store"]
    config: Config = ctx.obj["config"]
    try:
        run_login_workflow(
            store,
            config.launcher,
            ctx.obj["prompter"],
            launch=lambda name: _switch_and_launch(ctx, name, ()),
        )
    except ClaudectxError as e:
        _fail(e)


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
