# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal output for devenv commands and install progress."""

from __future__ import annotations

import sys
from typing import Final

from rich.console import Console, RenderableType
from rich.text import Text

# Status kind -> (emoji prefix, colour).
STATUS_STYLES: Final[dict[str, tuple[str, str]]] = {
    "info": ("ℹ️ ", "cyan"),
    "ok": ("✅ ", "green"),
    "warn": ("⚠️ ", "yellow"),
    "fail": ("❌ ", "red"),
}

# Pipeline stage -> verb shown while the stage runs.
STAGE_LABELS: Final[dict[str, str]] = {
    "download": "Downloading",
    "extract": "Extracting",
    "layout": "Installing",
    "verify": "Verifying",
    "commit": "Activating",
}

PROGRESS_EMOJI: Final[str] = "⏳ "


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


class Reporter:
    """Write the user-facing output of one devenv invocation.

    Status lines, pipeline progress and tables go through a single rich
    console, so the ``--emoji`` choice and terminal colour detection apply to
    everything a command prints. The console writes to whatever
    ``sys.stdout`` is current when printing.

    Args:
        emoji: Prefix status and progress lines with emoji.
        color: Force colour on or off; defaults to terminal detection.
        console: Console to write to instead of a new stdout console.
    """

    def __init__(self, *, emoji: bool = True, color: bool | None = None, console: Console | None = None) -> None:
        self._emoji = emoji
        self._color = detect_tty() if color is None else color
        self._console = console or Console(
            color_system="auto" if self._color else None,
            no_color=not self._color,
            emoji=emoji,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def console(self) -> Console:
        return self._console

    def info(self, message: str) -> None:
        self._status("info", message)

    def ok(self, message: str) -> None:
        self._status("ok", message)

    def warn(self, message: str) -> None:
        self._status("warn", message)

    def fail(self, message: str) -> None:
        self._status("fail", message)

    def echo(self, message: str) -> None:
        """Write ``message`` without prefix or styling."""

        self._console.print(Text(message))

    def render(self, renderable: RenderableType) -> None:
        """Print a rich renderable such as a table."""

        self._console.print(renderable)

    def progress(self, stage: str, subject: str) -> None:
        """Show that pipeline ``stage`` started working on ``subject``.

        Matches the pipeline's progress callback signature. Unknown stages
        are shown under their capitalised name.
        """

        label = STAGE_LABELS.get(stage, stage.capitalize())
        text = Text(PROGRESS_EMOJI if self._emoji else "")
        text.append(label, style="cyan" if self._color else "")
        text.append(" ")
        text.append(subject, style="bold" if self._color else "")
        self._console.print(text)

    def _status(self, kind: str, message: str) -> None:
        prefix, style = STATUS_STYLES[kind]
        text = Text(f"{prefix if self._emoji else ''}{message}")
        if self._color:
            text.stylize(style)
        self._console.print(text)


__all__ = ["PROGRESS_EMOJI", "Reporter", "STAGE_LABELS", "STATUS_STYLES", "detect_tty"]
