# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host platform and architecture identifiers used by catalogs."""

from __future__ import annotations

import platform as _platform
import sys
from typing import Final

PLATFORM_ALIASES: Final[dict[str, str]] = {
    "linux": "linux",
    "darwin": "osx",
    "macos": "osx",
    "osx": "osx",
    "win32": "win",
    "windows": "win",
    "cygwin": "win",
    "win": "win",
    "aix": "aix",
    "sunos5": "sunos",
    "sunos": "sunos",
    "freebsd": "freebsd",
}

ARCH_ALIASES: Final[dict[str, str]] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "x86",
    "i686": "x86",
    "ia32": "x86",
    "x86": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv7l",
    "armv6l": "armv6l",
    "ppc64le": "ppc64le",
    "ppc64": "ppc64",
    "s390x": "s390x",
}


def normalize_platform(value: str) -> str:
    """Return the catalog platform identifier for ``value``.

    Args:
        value: Raw platform name such as ``sys.platform`` or ``"Darwin"``.

    Returns:
        str: Identifier used in catalog ``platforms`` maps (``linux``, ``osx``,
        ``win``...); unknown names are lower-cased and returned unchanged.
    """

    lowered = value.strip().lower()
    if lowered.startswith("freebsd"):
        return "freebsd"
    if lowered.startswith("linux"):
        return "linux"
    return PLATFORM_ALIASES.get(lowered, lowered)


def normalize_arch(value: str) -> str:
    """Return the catalog architecture identifier for ``value``.

    Args:
        value: Raw machine name such as ``platform.machine()``.

    Returns:
        str: Identifier used in catalog ``platforms`` maps (``x64``, ``x86``,
        ``arm64``...).
    """

    lowered = value.strip().lower()
    return ARCH_ALIASES.get(lowered, lowered)


def current_platform() -> str:
    """Return the catalog identifier of the running platform."""

    return normalize_platform(sys.platform)


def current_arch() -> str:
    """Return the catalog identifier of the running architecture."""

    return normalize_arch(_platform.machine())


__all__ = [
    "current_arch",
    "current_platform",
    "normalize_arch",
    "normalize_platform",
]
