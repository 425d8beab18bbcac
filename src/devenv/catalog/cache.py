# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Time-boxed on-disk snapshots of remote version catalogs."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from ..errors import FilesystemError
from .models import VersionCatalog
from .normalize import normalize_catalog

LOGGER = logging.getLogger(__name__)

CACHE_FILE_TEMPLATE: Final[str] = "{engine}-versions.cache.json"

Clock = Callable[[], float]


class VersionCatalogCache:
    """Persist one normalised catalog per engine and serve it while fresh.

    Freshness is judged from the cache file's modification time, so editing
    the file by hand also resets its age.
    """

    def __init__(self, cache_dir: Path, *, ttl_seconds: int, clock: Clock = time.time) -> None:
        """Initialise the cache.

        Args:
            cache_dir: Directory holding the cache files.
            ttl_seconds: Maximum age in seconds before a snapshot is refetched.
            clock: Callable returning the current wall-clock time in seconds.
        """

        self._cache_dir = cache_dir
        self._ttl = ttl_seconds
        self._clock = clock

    def path_for(self, engine_name: str) -> Path:
        """Return the cache file path used for ``engine_name``."""

        return self._cache_dir / CACHE_FILE_TEMPLATE.format(engine=engine_name)

    def load(self, engine_name: str) -> VersionCatalog | None:
        """Return the cached catalog for ``engine_name`` when present and fresh.

        Args:
            engine_name: Engine whose catalog is requested.

        Returns:
            VersionCatalog | None: Cached catalog, or ``None`` when the file is
            missing, older than the TTL, or unreadable.
        """

        path = self.path_for(engine_name)
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.debug("catalog cache %s not accessible: %s", path, exc)
            return None

        age = self._clock() - mtime
        if age > self._ttl:
            LOGGER.debug("catalog cache %s expired (%.0fs old, ttl %ss)", path, age, self._ttl)
            return None

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            catalog = VersionCatalog.model_validate(payload)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            LOGGER.debug("catalog cache %s unreadable, treating as miss: %s", path, exc)
            return None
        if catalog.engine_name != engine_name:
            LOGGER.debug("catalog cache %s belongs to %s, treating as miss", path, catalog.engine_name)
            return None
        return catalog

    def save(self, engine_name: str, raw_catalog: Any) -> VersionCatalog:
        """Normalise ``raw_catalog``, persist it, and return the normalised catalog.

        Args:
            engine_name: Engine the catalog belongs to.
            raw_catalog: Raw catalog returned by the engine's ``get_versions``.

        Returns:
            VersionCatalog: Normalised catalog as written to disk.

        Raises:
            FormatError: If the raw catalog is malformed.
            FilesystemError: If the cache file cannot be written.
        """

        catalog = normalize_catalog(engine_name, raw_catalog)
        path = self.path_for(engine_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(catalog.to_json_payload(), indent=4), encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(
                f"cannot write catalog cache {path}: {exc}",
                engine=engine_name,
                stage="catalog",
            ) from exc
        LOGGER.debug("cached %d versions for %s in %s", len(catalog.versions), engine_name, path)
        return catalog

    def invalidate(self, engine_name: str) -> None:
        """Remove the cached catalog so the next request refetches it."""

        path = self.path_for(engine_name)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise FilesystemError(
                f"cannot remove catalog cache {path}: {exc}",
                engine=engine_name,
                stage="catalog",
            ) from exc


__all__ = ["CACHE_FILE_TEMPLATE", "VersionCatalogCache"]
