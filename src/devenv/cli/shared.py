# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared CLI state, engine option parsing and failure reporting."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import NoReturn

import typer

from ..config import DevEnvConfig
from ..console import Reporter
from ..engines.base import EngineOption
from ..errors import DevEnvError
from ..manager import EnvironmentManager

_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLIState:
    """Values parsed from the global options, shared with every sub-command."""

    config: DevEnvConfig
    emoji: bool = True
    debug: bool = False
    reporter: Reporter = field(init=False)

    def __post_init__(self) -> None:
        self.reporter = Reporter(emoji=self.emoji)


def get_state(ctx: typer.Context) -> CLIState:
    """Return the :class:`CLIState` stored by the root callback."""

    state = ctx.find_object(CLIState)
    if state is None:
        raise CLIError("devenv global options were not initialised")
    return state


def create_manager(state: CLIState) -> EnvironmentManager:
    """Return the environment manager used by CLI commands."""

    return EnvironmentManager(state.config)


def parse_engine_options(values: Sequence[str] | None) -> dict[str, EngineOption]:
    """Parse repeated ``key=value`` option flags into an engine option bag.

    A bare ``key`` means ``True``; ``true/false`` words and integers are
    converted, everything else stays a string.

    Raises:
        CLIError: If an entry has an empty key.
    """

    parsed: dict[str, EngineOption] = {}
    for raw in values or ():
        key, sep, value = raw.partition("=")
        key = key.strip().lower()
        if not key:
            raise CLIError(f"invalid engine option '{raw}', expected key=value")
        parsed[key] = _coerce(value.strip()) if sep else True
    return parsed


def _coerce(value: str) -> EngineOption:
    lowered = value.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    if value.isdigit():
        return int(value)
    return value


def abort(reporter: Reporter, exc: DevEnvError | CLIError) -> NoReturn:
    """Report ``exc`` and exit with a failure status."""

    reporter.fail(str(exc))
    exit_code = exc.exit_code if isinstance(exc, CLIError) else 1
    raise typer.Exit(code=exit_code) from exc


__all__ = [
    "CLIError",
    "CLIState",
    "abort",
    "create_manager",
    "get_state",
    "parse_engine_options",
]
