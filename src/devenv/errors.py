# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Error hierarchy shared by catalog, resolver, and installation components."""

from __future__ import annotations

from typing import TypeVar

ErrorT = TypeVar("ErrorT", bound="DevEnvError")


class DevEnvError(RuntimeError):
    """Base class for every fatal error raised by devenv operations.

    The message is composed from optional context (engine, version, and the
    pipeline stage that failed) so that errors surfaced to the user always name
    where the failure happened.
    """

    def __init__(
        self,
        message: str,
        *,
        engine: str | None = None,
        version: str | None = None,
        stage: str | None = None,
    ) -> None:
        """Initialise the error with a message and optional context.

        Args:
            message: Human-readable description of the failure.
            engine: Name of the engine involved in the failing operation.
            version: Version string involved in the failing operation.
            stage: Pipeline or command stage that failed.
        """

        super().__init__(message)
        self.message = message
        self.engine = engine
        self.version = version
        self.stage = stage

    def __str__(self) -> str:
        prefix_parts = [part for part in (self.engine, self.version) if part]
        text = self.message
        if self.stage:
            text = f"{self.stage}: {text}"
        if prefix_parts:
            text = f"[{' '.join(prefix_parts)}] {text}"
        return text


class FormatError(DevEnvError):
    """Raised for malformed catalogs, version requests, or engine contract violations."""


class NotFoundError(DevEnvError):
    """Raised when no version satisfies a request."""


class NetworkError(DevEnvError):
    """Raised when a catalog fetch or artifact download fails."""


class VerificationError(DevEnvError):
    """Raised when an engine rejects the tree it has just laid out."""


class FilesystemError(DevEnvError):
    """Raised when a required path cannot be created, renamed, or removed."""


class ConfigError(DevEnvError):
    """Raised when configuration input is invalid."""


def annotate(
    error: ErrorT,
    *,
    engine: str | None = None,
    version: str | None = None,
    stage: str | None = None,
) -> ErrorT:
    """Fill in missing context on ``error`` without replacing existing values.

    Args:
        error: Error instance that should carry additional context.
        engine: Engine name to record when the error has none.
        version: Version string to record when the error has none.
        stage: Stage name to record when the error has none.

    Returns:
        ErrorT: The same error instance, so callers can ``raise annotate(...)``.
    """

    if error.engine is None:
        error.engine = engine
    if error.version is None:
        error.version = version
    if error.stage is None:
        error.stage = stage
    return error


__all__ = [
    "ConfigError",
    "DevEnvError",
    "FilesystemError",
    "FormatError",
    "NetworkError",
    "NotFoundError",
    "VerificationError",
    "annotate",
]
