# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem layout of the dev home directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .config import DevEnvConfig

ENV_SUBDIR: Final[str] = "env"
CACHE_SUBDIR: Final[str] = "cache"
CACHE_ENV_SUBDIR: Final[str] = "env"
TMP_SUBDIR: Final[str] = "tmp"
STAGING_SUFFIX: Final[str] = "_new"
BACKUP_SUFFIX: Final[str] = "_old"


@dataclass(frozen=True, slots=True)
class DevHomeLayout:
    """Locations derived from the dev home root.

    ``<root>/env/<engine>/<version>`` holds installed versions,
    ``<root>/cache/env`` the catalog snapshots and ``<root>/tmp`` the
    per-install working areas.
    """

    root: Path

    @classmethod
    def from_config(cls, config: DevEnvConfig) -> DevHomeLayout:
        """Return the layout rooted at ``config.home``."""

        return cls(root=config.home)

    @property
    def env_dir(self) -> Path:
        """Return the directory containing one sub-directory per engine."""

        return self.root / ENV_SUBDIR

    @property
    def catalog_cache_dir(self) -> Path:
        """Return the directory holding ``<engine>-versions.cache.json`` files."""

        return self.root / CACHE_SUBDIR / CACHE_ENV_SUBDIR

    @property
    def tmp_dir(self) -> Path:
        """Return the parent directory for temporary installation working areas."""

        return self.root / TMP_SUBDIR

    def engine_root(self, engine_name: str) -> Path:
        """Return the install root for ``engine_name``."""

        return self.env_dir / engine_name

    def version_path(self, engine_name: str, version: str) -> Path:
        """Return the canonical final path of ``version`` for ``engine_name``."""

        return self.engine_root(engine_name) / version


__all__ = [
    "BACKUP_SUFFIX",
    "DevHomeLayout",
    "STAGING_SUFFIX",
]
