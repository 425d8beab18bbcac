# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn raw engine catalogs into sorted, de-duplicated :class:`VersionCatalog` objects."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any, Final

from ..errors import FormatError
from .models import VersionCatalog, VersionEntry, canonical_version

LOGGER = logging.getLogger(__name__)

ENVIRONMENT_KEY: Final[str] = "environment"
VERSIONS_KEY: Final[str] = "versions"
VERSION_KEY: Final[str] = "version"
FILES_KEY: Final[str] = "files"
PLATFORMS_KEY: Final[str] = "platforms"

_ARTIFACT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?P<platform>[a-z][a-z0-9]*)-(?P<arch>[a-z0-9_]+)")


def normalize_catalog(engine_name: str, raw_catalog: Any) -> VersionCatalog:
    """Validate and normalise ``raw_catalog`` produced by an engine.

    Args:
        engine_name: Name of the engine the catalog must belong to.
        raw_catalog: Raw mapping returned by the engine's ``get_versions`` hook.

    Returns:
        VersionCatalog: Entries with resolvable platforms only, sorted
        descending by numeric version triple.

    Raises:
        FormatError: If the catalog belongs to another engine, has no version
            list, or lists the same version twice with different platforms.
    """

    if not isinstance(raw_catalog, Mapping):
        raise FormatError("version catalog must be an object", engine=engine_name, stage="catalog")
    if raw_catalog.get(ENVIRONMENT_KEY) != engine_name:
        raise FormatError(
            f"version catalog declares environment {raw_catalog.get(ENVIRONMENT_KEY)!r}",
            engine=engine_name,
            stage="catalog",
        )
    raw_versions = raw_catalog.get(VERSIONS_KEY)
    if not isinstance(raw_versions, Sequence) or isinstance(raw_versions, (str, bytes, bytearray)):
        raise FormatError("version catalog 'versions' must be a list", engine=engine_name, stage="catalog")

    by_version: dict[str, VersionEntry] = {}
    for raw_entry in raw_versions:
        entry = _normalize_entry(raw_entry)
        if entry is None:
            continue
        existing = by_version.get(entry.version)
        if existing is not None and existing.platforms != entry.platforms:
            raise FormatError(
                f"version {entry.version} is listed more than once with different platforms",
                engine=engine_name,
                stage="catalog",
            )
        by_version[entry.version] = entry

    ordered = sorted(by_version.values(), key=lambda item: item.triple, reverse=True)
    return VersionCatalog(engine_name=engine_name, versions=tuple(ordered))


def platforms_from_artifacts(artifacts: Sequence[Any]) -> dict[str, set[str]]:
    """Derive a platform → architectures map from artifact names.

    Names such as ``linux-x64`` or ``osx-x64-tar`` contribute one
    platform/architecture pair; names without that prefix (``headers``,
    ``src``) are ignored.

    Args:
        artifacts: Per-platform artifact names attached to a catalog entry.

    Returns:
        dict[str, set[str]]: Architectures keyed by platform identifier.
    """

    platforms: dict[str, set[str]] = {}
    for artifact in artifacts:
        if not isinstance(artifact, str):
            continue
        match = _ARTIFACT_PATTERN.match(artifact.strip().lower())
        if match is None:
            continue
        platforms.setdefault(match.group("platform"), set()).add(match.group("arch"))
    return platforms


def _normalize_entry(raw_entry: Any) -> VersionEntry | None:
    if not isinstance(raw_entry, Mapping):
        return None
    raw_version = raw_entry.get(VERSION_KEY)
    if not isinstance(raw_version, str):
        return None
    try:
        version = canonical_version(raw_version)
    except ValueError:
        LOGGER.debug("dropping catalog entry %r: not a release version", raw_version)
        return None

    platforms = _entry_platforms(raw_entry)
    if not platforms:
        LOGGER.debug("dropping catalog entry %s without platforms", version)
        return None
    return VersionEntry(version=version, platforms={name: tuple(archs) for name, archs in platforms.items()})


def _entry_platforms(raw_entry: Mapping[str, Any]) -> dict[str, set[str]]:
    declared = raw_entry.get(PLATFORMS_KEY)
    if isinstance(declared, Mapping):
        platforms: dict[str, set[str]] = {}
        for name, archs in declared.items():
            if isinstance(archs, str):
                archs = [archs]
            if not isinstance(archs, Sequence):
                continue
            values = {str(arch).lower() for arch in archs if arch}
            if values:
                platforms[str(name).lower()] = values
        return platforms
    files = raw_entry.get(FILES_KEY)
    if isinstance(files, Sequence) and not isinstance(files, (str, bytes, bytearray)):
        return platforms_from_artifacts(files)
    return {}


__all__ = ["normalize_catalog", "platforms_from_artifacts"]
