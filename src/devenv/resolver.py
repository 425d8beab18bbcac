# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve partial version requests against a descending-sorted catalog."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final

from .catalog.models import VersionCatalog, VersionTriple, parse_triple
from .errors import FormatError, NotFoundError

if TYPE_CHECKING:
    from .engines.base import EngineOption, EnvironmentEngine

LOGGER = logging.getLogger(__name__)

LATEST: Final[str] = "latest"
_COMPONENT: Final[re.Pattern[str]] = re.compile(r"^\d+$")
_MAX_COMPONENTS: Final[int] = 3


class PartialMatch(str, Enum):
    """Outcome of comparing a requested partial version with a catalog entry."""

    MATCH = "match"
    ENTRY_HIGHER = "entry-higher"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class VersionRequest:
    """A user request for one engine version on one platform/architecture."""

    spec: str
    platform: str
    arch: str
    options: Mapping[str, EngineOption] = field(default_factory=dict)


def parse_version_spec(spec: str) -> tuple[int, ...]:
    """Return the numeric components requested by ``spec``.

    Args:
        spec: ``"latest"`` or one to three dot-separated numbers, optionally
            prefixed with ``v``.

    Returns:
        tuple[int, ...]: Requested components; empty for ``"latest"``.

    Raises:
        FormatError: If ``spec`` is empty, non-numeric, or has more than three
            components.
    """

    text = spec.strip().lower()
    if text == LATEST:
        return ()
    if text.startswith("v"):
        text = text[1:]
    parts = text.split(".")
    if not text or len(parts) > _MAX_COMPONENTS or not all(_COMPONENT.match(part) for part in parts):
        raise FormatError(f"'{spec}' is not a valid version request", stage="resolve")
    return tuple(int(part) for part in parts)


def compare_partial(requested: tuple[int, ...], triple: VersionTriple) -> PartialMatch:
    """Compare ``requested`` with ``triple`` from the most significant component.

    The first differing component decides: a higher requested component
    means every remaining (lower) catalog entry is out of reach, a higher
    entry component means this entry is too new.
    """

    for wanted, actual in zip(requested, triple):
        if wanted > actual:
            return PartialMatch.EXHAUSTED
        if actual > wanted:
            return PartialMatch.ENTRY_HIGHER
    return PartialMatch.MATCH


def resolve(request: VersionRequest, catalog: VersionCatalog, engine: EnvironmentEngine) -> str | None:
    """Return the newest catalog version satisfying ``request``.

    Args:
        request: Requested spec plus target platform and architecture.
        catalog: Catalog sorted descending by version.
        engine: Engine supplying the validity filter and canonical naming.

    Returns:
        str | None: Canonical version from ``engine.get_full_version_number``
        or ``None`` when nothing matches.

    Raises:
        FormatError: If the requested spec is malformed.
    """

    requested = parse_version_spec(request.spec)
    for entry in catalog.versions:
        outcome = compare_partial(requested, entry.triple)
        if outcome is PartialMatch.EXHAUSTED:
            break
        if outcome is PartialMatch.ENTRY_HIGHER:
            continue
        if not entry.supports(request.platform, request.arch):
            LOGGER.debug("%s %s has no %s/%s build", catalog.engine_name, entry.version, request.platform, request.arch)
            continue
        if not engine.version_is_valid(entry):
            LOGGER.debug("%s rejected %s", catalog.engine_name, entry.version)
            continue
        return engine.get_full_version_number(entry.version)
    return None


def resolve_or_raise(request: VersionRequest, catalog: VersionCatalog, engine: EnvironmentEngine) -> str:
    """Return :func:`resolve` or raise :class:`NotFoundError` naming the request."""

    version = resolve(request, catalog, engine)
    if version is None:
        raise NotFoundError(
            f"no version matches '{request.spec}' for {request.platform}/{request.arch}",
            engine=catalog.engine_name,
            stage="resolve",
        )
    return version


def matches_spec(spec: str, version: str) -> bool:
    """Return ``True`` when ``version`` satisfies the partial ``spec``."""

    try:
        triple = parse_triple(version)
    except ValueError:
        return False
    return compare_partial(parse_version_spec(spec), triple) is PartialMatch.MATCH


def best_match(spec: str, versions: Iterable[str]) -> str | None:
    """Return the highest version in ``versions`` satisfying ``spec``."""

    candidates: list[tuple[VersionTriple, str]] = []
    for version in versions:
        if matches_spec(spec, version):
            candidates.append((parse_triple(version), version))
    if not candidates:
        return None
    return max(candidates)[1]


__all__ = [
    "LATEST",
    "PartialMatch",
    "VersionRequest",
    "best_match",
    "compare_partial",
    "matches_spec",
    "parse_version_spec",
    "resolve",
    "resolve_or_raise",
]
