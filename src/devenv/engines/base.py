# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Capability contract every environment engine implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, TypeAlias

from ..catalog.models import VersionEntry
from ..config import DevEnvConfig
from ..errors import FormatError
from ..install.download import Downloader
from ..paths import DevHomeLayout

EngineOption: TypeAlias = str | bool | int
EngineOptions: TypeAlias = Mapping[str, EngineOption]

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class EngineContext:
    """Invocation context handed to :meth:`EnvironmentEngine.init`."""

    config: DevEnvConfig
    layout: DevHomeLayout
    platform: str
    arch: str
    downloader: Downloader


class EnvironmentEngine(ABC):
    """Strategy object describing how to fetch and lay out one runtime.

    The core treats every engine identically: it asks for a raw catalog,
    filters entries through :meth:`version_is_valid`, requests download URLs,
    and delegates the final directory layout and its verification.
    """

    name: ClassVar[str]

    def __init__(self) -> None:
        self._context: EngineContext | None = None
        self._options: dict[str, EngineOption] = {}

    @property
    def context(self) -> EngineContext:
        """Return the context supplied through :meth:`init`."""

        if self._context is None:
            raise FormatError("engine used before init()", engine=self.name, stage="init")
        return self._context

    @property
    def options(self) -> Mapping[str, EngineOption]:
        """Return the engine-specific option bag supplied through :meth:`init`."""

        return self._options

    @property
    def platform(self) -> str:
        """Return the target platform, honouring a ``platform`` option."""

        return str(self._options.get("platform") or self.context.platform)

    @property
    def arch(self) -> str:
        """Return the target architecture, honouring an ``arch`` option."""

        return str(self._options.get("arch") or self.context.arch)

    def flag(self, key: str) -> bool:
        """Return option ``key`` as a boolean, accepting textual forms such as ``"yes"``."""

        value = self._options.get(key)
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_WORDS
        return bool(value)

    def init(self, context: EngineContext, options: EngineOptions) -> None:
        """Store the invocation context and parsed options for later calls."""

        self._context = context
        self._options = dict(options)

    @abstractmethod
    def get_versions(self) -> Mapping[str, Any]:
        """Return the raw catalog ``{"environment": name, "versions": [...]}``."""

    @abstractmethod
    def version_is_valid(self, entry: VersionEntry) -> bool:
        """Return ``True`` when ``entry`` is acceptable for installation."""

    @abstractmethod
    def get_full_version_number(self, version: str) -> str:
        """Return the canonical version string for a matched catalog version."""

    @abstractmethod
    def get_download_file_list(self, version: str) -> Sequence[str]:
        """Return the ordered artifact URLs required to install ``version``."""

    @abstractmethod
    def install_files(self, download_dir: Path, extract_dir: Path, install_path: Path, version: str) -> None:
        """Lay out the final directory tree of ``version`` inside ``install_path``."""

    @abstractmethod
    def successfully_installed(self, version: str, install_path: Path) -> bool:
        """Return ``True`` when ``install_path`` holds a usable installation."""


REQUIRED_CAPABILITIES: tuple[str, ...] = (
    "init",
    "get_versions",
    "version_is_valid",
    "get_full_version_number",
    "get_download_file_list",
    "install_files",
    "successfully_installed",
)


def ensure_engine_contract(engine: object, *, expected_name: str | None = None) -> EnvironmentEngine:
    """Check that ``engine`` exposes every capability of the engine contract.

    Built-in engines subclass :class:`EnvironmentEngine`; engines contributed
    by plugins are checked here, before any filesystem mutation happens.

    Args:
        engine: Object produced by an engine factory.
        expected_name: Name the engine was requested under, if any.

    Returns:
        EnvironmentEngine: ``engine`` typed as an engine.

    Raises:
        FormatError: If the name is missing, mismatched, or a capability is
            not callable.
    """

    name = getattr(engine, "name", None)
    label = expected_name or (name if isinstance(name, str) else type(engine).__name__)
    if not isinstance(name, str) or not name or name != name.lower():
        raise FormatError("engine does not declare a lowercase 'name'", engine=label, stage="contract")
    if expected_name is not None and name != expected_name:
        raise FormatError(f"engine declares name '{name}'", engine=expected_name, stage="contract")
    for capability in REQUIRED_CAPABILITIES:
        if not callable(getattr(engine, capability, None)):
            raise FormatError(f"engine does not implement {capability}()", engine=name, stage="contract")
    return engine  # type: ignore[return-value]


__all__ = [
    "EngineContext",
    "EngineOption",
    "EngineOptions",
    "EnvironmentEngine",
    "REQUIRED_CAPABILITIES",
    "ensure_engine_contract",
]
