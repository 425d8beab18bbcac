# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

import logging
import sys

import typer

from ..config import ConfigError, load_config
from ..console import Reporter
from . import env
from .options import CONFIG_OPTION, DEBUG_OPTION, EMOJI_OPTION, HOME_OPTION
from .shared import CLIState

PACKAGE_LOGGER_NAME = "devenv"
DEBUG_HANDLER_MARKER = "_devenv_debug_handler"

app = typer.Typer(
    name="devenv",
    help="Install and manage versions of developer runtimes.",
    no_args_is_help=True,
)


@app.callback()
def root_callback(
    ctx: typer.Context,
    home: HOME_OPTION = None,
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Load configuration once and share it with sub-commands."""

    if debug:
        enable_debug_logging()
    try:
        loaded = load_config(home=home, config_path=config)
    except ConfigError as exc:
        Reporter(emoji=emoji).fail(str(exc))
        raise typer.Exit(code=1) from exc
    ctx.obj = CLIState(config=loaded, emoji=emoji, debug=debug)


def enable_debug_logging() -> None:
    """Stream ``devenv`` log records, including catalog and swap decisions, to stderr."""

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if any(getattr(handler, DEBUG_HANDLER_MARKER, False) for handler in logger.handlers):
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    setattr(handler, DEBUG_HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


env.register(app)


def main() -> None:
    """Run the ``devenv`` console script."""

    app(prog_name="devenv")


__all__ = ["app", "enable_debug_logging", "main"]
