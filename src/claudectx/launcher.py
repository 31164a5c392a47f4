"""Starting the wrapped ``claude`` CLI."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import NoReturn

from claudectx.config import LauncherConfig
from claudectx.exceptions import LaunchError, LoginError

logger = logging.getLogger(__name__)


def build_argv(launcher: LauncherConfig, extra_args: list[str] | tuple[str, ...]) -> list[str]:
    return [launcher.command, *launcher.default_args, *extra_args]


def launch_claude(launcher: LauncherConfig, extra_args: list[str] | tuple[str, ...]) -> NoReturn:
    """Replace the current process with the wrapped CLI.

    Windows has no real exec, so there the child runs to completion and its
    exit status becomes ours.
    """
    argv = build_argv(launcher, extra_args)
    logger.debug("Launching %s", argv)
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        if os.name == "nt":
            sys.exit(subprocess.run(argv).returncode)
        os.execvp(argv[0], argv)
    except OSError as e:
        raise LaunchError(f"Failed to launch {launcher.command}: {e}") from e
    raise LaunchError(f"Failed to launch {launcher.command}")


def run_login(launcher: LauncherConfig) -> int:
    """Run the wrapped CLI's own login flow and wait for it."""
    argv = [launcher.command, *launcher.login_args]
    logger.debug("Running login command %s", argv)
    try:
        completed = subprocess.run(argv)
    except OSError as e:
        raise LoginError(
            f"Failed to launch '{' '.join(argv)}' - is Claude Code installed? ({e})"
        ) from e
    return completed.returncode
