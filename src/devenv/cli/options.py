# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Reusable Typer parameter declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

ENGINE_ARGUMENT = Annotated[str, typer.Argument(help="Engine name, e.g. node or php.")]
VERSION_ARGUMENT = Annotated[str, typer.Argument(help="Version request: latest, 7, 7.0 or 7.0.4.")]
ARCH_OPTION = Annotated[
    str | None,
    typer.Option("--arch", "-a", help="Target architecture (defaults to the host)."),
]
PLATFORM_OPTION = Annotated[
    str | None,
    typer.Option("--platform", "-p", help="Target platform (defaults to the host)."),
]
ENGINE_OPTIONS_OPTION = Annotated[
    list[str] | None,
    typer.Option(
        "--option",
        "-o",
        help="Engine-specific option as key=value (repeatable), e.g. -o lts or -o nts=true.",
    ),
]
FORCE_OPTION = Annotated[
    bool,
    typer.Option("--force", "-f", help="Reinstall even when the version is already installed."),
]
REFRESH_OPTION = Annotated[
    bool,
    typer.Option("--refresh", help="Ignore the cached version catalog and fetch it again."),
]
HOME_OPTION = Annotated[
    Path | None,
    typer.Option("--home", help="Dev home directory (defaults to ~/.devenv)."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file (defaults to <home>/config.toml)."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Stream diagnostic log records to stderr."),
]

__all__ = [
    "ARCH_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "ENGINE_ARGUMENT",
    "ENGINE_OPTIONS_OPTION",
    "FORCE_OPTION",
    "HOME_OPTION",
    "PLATFORM_OPTION",
    "REFRESH_OPTION",
    "VERSION_ARGUMENT",
]
