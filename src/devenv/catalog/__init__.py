# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Version catalog models, normalisation, and on-disk caching."""

from __future__ import annotations

from .cache import CACHE_FILE_TEMPLATE, VersionCatalogCache
from .models import (
    VersionCatalog,
    VersionEntry,
    VersionTriple,
    canonical_version,
    format_triple,
    parse_triple,
)
from .normalize import normalize_catalog, platforms_from_artifacts

__all__ = [
    "CACHE_FILE_TEMPLATE",
    "VersionCatalog",
    "VersionCatalogCache",
    "VersionEntry",
    "VersionTriple",
    "canonical_version",
    "format_triple",
    "normalize_catalog",
    "parse_triple",
    "platforms_from_artifacts",
]
