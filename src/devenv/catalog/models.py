# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models describing normalised version catalogs."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final

from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, ConfigDict, Field, field_validator

VersionTriple = tuple[int, int, int]
TRIPLE_LENGTH: Final[int] = 3


def parse_triple(raw: str) -> VersionTriple:
    """Return the numeric ``(major, minor, patch)`` triple for ``raw``.

    A leading ``v`` marker is accepted and missing components count as ``0``.
    Only plain numeric releases qualify: pre-release, post-release,
    development and local segments are rejected, as are versions with more
    than three components.

    Args:
        raw: Version string such as ``"v7.0.4"`` or ``"7.0"``.

    Returns:
        VersionTriple: Numeric triple used for ordering and matching.

    Raises:
        ValueError: If ``raw`` is not a plain numeric release version.
    """

    try:
        parsed = Version(raw.strip())
    except InvalidVersion as exc:
        raise ValueError(f"'{raw}' is not a valid version") from exc
    if parsed.is_prerelease or parsed.is_postrelease or parsed.local is not None or parsed.epoch:
        raise ValueError(f"'{raw}' is not a release version")
    release = parsed.release
    if len(release) > TRIPLE_LENGTH:
        raise ValueError(f"'{raw}' has more than {TRIPLE_LENGTH} components")
    padded = tuple(release) + (0,) * (TRIPLE_LENGTH - len(release))
    return (padded[0], padded[1], padded[2])


def format_triple(triple: Sequence[int]) -> str:
    """Return the canonical ``X.Y.Z`` string for ``triple``."""

    return ".".join(str(part) for part in triple)


def canonical_version(raw: str) -> str:
    """Return ``raw`` in canonical ``X.Y.Z`` form without leading markers."""

    return format_triple(parse_triple(raw))


class VersionEntry(BaseModel):
    """One catalog entry: a canonical version and where builds exist."""

    model_config = ConfigDict(frozen=True)

    version: str
    platforms: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def _canonical(cls, value: str) -> str:
        return canonical_version(value)

    @field_validator("platforms")
    @classmethod
    def _sorted_archs(cls, value: Mapping[str, Sequence[str]]) -> dict[str, tuple[str, ...]]:
        return {str(name): tuple(sorted({str(arch) for arch in archs})) for name, archs in sorted(value.items())}

    @property
    def triple(self) -> VersionTriple:
        """Return the numeric triple of this entry."""

        return parse_triple(self.version)

    def supports(self, platform: str, arch: str) -> bool:
        """Return ``True`` when a build exists for ``platform``/``arch``."""

        return arch in self.platforms.get(platform, ())


class VersionCatalog(BaseModel):
    """Normalised catalog for one engine, sorted descending by version."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    engine_name: str = Field(alias="engineName")
    versions: tuple[VersionEntry, ...] = ()

    def to_json_payload(self) -> dict[str, object]:
        """Return the persisted JSON shape ``{engineName, versions}``."""

        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "VersionCatalog",
    "VersionEntry",
    "VersionTriple",
    "canonical_version",
    "format_triple",
    "parse_triple",
]
