# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``devenv env`` commands: install, uninstall, list, test, and versions."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import typer
from rich.table import Table

from ..engines.base import EngineOption
from ..errors import DevEnvError
from ..manager import InstallStatus
from ..platform import normalize_arch, normalize_platform
from ..resolver import LATEST
from .options import (
    ARCH_OPTION,
    ENGINE_ARGUMENT,
    ENGINE_OPTIONS_OPTION,
    FORCE_OPTION,
    PLATFORM_OPTION,
    REFRESH_OPTION,
    VERSION_ARGUMENT,
)
from .shared import CLIError, abort, create_manager, get_state, parse_engine_options


def install_command(
    ctx: typer.Context,
    engine: ENGINE_ARGUMENT,
    version: VERSION_ARGUMENT = LATEST,
    arch: ARCH_OPTION = None,
    platform: PLATFORM_OPTION = None,
    option: ENGINE_OPTIONS_OPTION = None,
    force: FORCE_OPTION = False,
    refresh: REFRESH_OPTION = False,
) -> None:
    """Install the newest version of ENGINE matching VERSION."""

    state = get_state(ctx)
    reporter = state.reporter
    try:
        options = _engine_options(option, arch=arch, platform=platform)
        manager = create_manager(state)
        reporter.info(f"Resolving {engine} {version}")
        result = manager.install(engine, version, options, force=force, refresh=refresh, progress=reporter.progress)
    except (DevEnvError, CLIError) as exc:
        abort(reporter, exc)

    if result.status is InstallStatus.ALREADY_INSTALLED:
        reporter.ok(f"{result.engine} {result.version} is already installed at {result.path}")
    elif result.status is InstallStatus.REINSTALLED:
        reporter.ok(f"{result.engine} {result.version} reinstalled into {result.path}")
    else:
        reporter.ok(f"{result.engine} {result.version} installed into {result.path}")


def uninstall_command(
    ctx: typer.Context,
    engine: ENGINE_ARGUMENT,
    version: VERSION_ARGUMENT,
) -> None:
    """Remove the newest installed version of ENGINE matching VERSION."""

    state = get_state(ctx)
    reporter = state.reporter
    try:
        removed = create_manager(state).uninstall(engine, version)
    except DevEnvError as exc:
        abort(reporter, exc)
    reporter.ok(f"{engine} {removed} uninstalled")


def list_command(
    ctx: typer.Context,
    engine: ENGINE_ARGUMENT,
) -> None:
    """List the installed versions of ENGINE."""

    state = get_state(ctx)
    reporter = state.reporter
    try:
        versions = create_manager(state).installed_versions(engine)
    except DevEnvError as exc:
        abort(reporter, exc)
    if not versions:
        reporter.warn(f"No {engine} versions installed")
        return
    for installed in versions:
        reporter.echo(installed)


def check_command(
    ctx: typer.Context,
    engine: ENGINE_ARGUMENT,
    version: VERSION_ARGUMENT,
    option: ENGINE_OPTIONS_OPTION = None,
) -> None:
    """Exit successfully when a verified installation of ENGINE VERSION exists."""

    state = get_state(ctx)
    reporter = state.reporter
    try:
        found = create_manager(state).is_installed(engine, version, parse_engine_options(option))
    except (DevEnvError, CLIError) as exc:
        abort(reporter, exc)
    if found is None:
        reporter.fail(f"{engine} {version} is not installed")
        raise typer.Exit(code=1)
    reporter.ok(f"{engine} {found} is installed")


def versions_command(
    ctx: typer.Context,
    engine: ENGINE_ARGUMENT,
    arch: ARCH_OPTION = None,
    platform: PLATFORM_OPTION = None,
    option: ENGINE_OPTIONS_OPTION = None,
    refresh: REFRESH_OPTION = False,
) -> None:
    """Show the catalog versions of ENGINE installable on the target platform."""

    state = get_state(ctx)
    reporter = state.reporter
    try:
        options = _engine_options(option, arch=arch, platform=platform)
        entries = create_manager(state).available(engine, options, refresh=refresh)
    except (DevEnvError, CLIError) as exc:
        abort(reporter, exc)
    if not entries:
        reporter.warn(f"No {engine} versions available for this platform")
        return

    table = Table(title=f"{engine} versions")
    table.add_column("Version", style="bold")
    table.add_column("Platforms")
    for entry in entries:
        platforms = ", ".join(f"{name}/{'|'.join(archs)}" for name, archs in entry.platforms.items())
        table.add_row(entry.version, platforms)
    reporter.render(table)


def _engine_options(
    values: list[str] | None,
    *,
    arch: str | None,
    platform: str | None,
) -> dict[str, EngineOption]:
    options = parse_engine_options(values)
    if arch:
        options["arch"] = normalize_arch(arch)
    if platform:
        options["platform"] = normalize_platform(platform)
    return options


_COMMANDS: tuple[tuple[str, Callable[..., Any], tuple[str, ...]], ...] = (
    ("install", install_command, ("i", "in")),
    ("uninstall", uninstall_command, ("u", "un")),
    ("list", list_command, ("l", "li")),
    ("test", check_command, ("t", "ts")),
    ("versions", versions_command, ()),
)


def build_env_app() -> typer.Typer:
    """Return the ``env`` command group with its hidden short aliases."""

    env_app = typer.Typer(help="Install and inspect runtime environments.", no_args_is_help=True)
    for name, callback, aliases in _COMMANDS:
        env_app.command(name=name)(callback)
        for alias in aliases:
            env_app.command(name=alias, hidden=True)(callback)
    return env_app


def register(app: typer.Typer) -> None:
    """Register the ``env`` command group on ``app``."""

    app.add_typer(build_env_app(), name="env")


__all__ = ["build_env_app", "register"]
