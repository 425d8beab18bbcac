# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""High-level operations tying engines, catalogs, resolution, and installs together."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .catalog import VersionCatalog, VersionCatalogCache, VersionEntry, parse_triple
from .config import DevEnvConfig
from .engines.base import EngineContext, EngineOptions, EnvironmentEngine
from .engines.registry import EngineRegistry, default_registry
from .errors import DevEnvError, FilesystemError, NotFoundError, annotate
from .install.download import Downloader
from .install.pipeline import InstallationPipeline, Progress
from .install.swap import DirectorySwapManager
from .paths import BACKUP_SUFFIX, STAGING_SUFFIX, DevHomeLayout
from .platform import current_arch, current_platform
from .resolver import LATEST, VersionRequest, best_match, matches_spec, resolve_or_raise

LOGGER = logging.getLogger(__name__)


class InstallStatus(str, Enum):
    """Outcome of :meth:`EnvironmentManager.install`."""

    INSTALLED = "installed"
    ALREADY_INSTALLED = "already-installed"
    REINSTALLED = "reinstalled"


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Summary of one install request."""

    engine: str
    version: str
    path: Path
    status: InstallStatus

    @property
    def changed(self) -> bool:
        """Return ``True`` when files were written by the request."""

        return self.status is not InstallStatus.ALREADY_INSTALLED


class EnvironmentManager:
    """Run environment commands against one dev home.

    Args:
        config: Loaded configuration; ``config.home`` selects the dev home.
        registry: Engine registry; defaults to built-ins plus entry points.
        downloader: Download primitive shared by engines and the pipeline.
        clock: Time source used for catalog freshness checks.
        platform: Target platform; defaults to the running host.
        arch: Target architecture; defaults to the running host.
    """

    def __init__(
        self,
        config: DevEnvConfig,
        *,
        registry: EngineRegistry | None = None,
        downloader: Downloader | None = None,
        clock: Callable[[], float] = time.time,
        platform: str | None = None,
        arch: str | None = None,
    ) -> None:
        self._config = config
        self._layout = DevHomeLayout.from_config(config)
        self._registry = registry if registry is not None else default_registry()
        self._downloader = downloader or Downloader(config.download)
        self._platform = platform or current_platform()
        self._arch = arch or current_arch()
        self._cache = VersionCatalogCache(
            self._layout.catalog_cache_dir,
            ttl_seconds=config.cache.version_info_expires,
            clock=clock,
        )
        self._swap = DirectorySwapManager()
        self._pipeline = InstallationPipeline(self._layout, downloader=self._downloader, swap=self._swap)

    @property
    def layout(self) -> DevHomeLayout:
        """Return the dev home layout used by this manager."""

        return self._layout

    @property
    def registry(self) -> EngineRegistry:
        """Return the engine registry."""

        return self._registry

    def load_engine(self, name: str, options: EngineOptions | None = None) -> EnvironmentEngine:
        """Create and initialise the engine registered under ``name``.

        Raises:
            NotFoundError: If no engine is registered under ``name``.
            FormatError: If the engine violates the engine contract.
        """

        engine = self._registry.create(name)
        engine.init(self._context_for(options), dict(options or {}))
        return engine

    def _context_for(self, options: EngineOptions | None) -> EngineContext:
        # ``platform``/``arch`` options retarget one invocation.
        bag = options or {}
        return EngineContext(
            config=self._config,
            layout=self._layout,
            platform=str(bag.get("platform") or self._platform),
            arch=str(bag.get("arch") or self._arch),
            downloader=self._downloader,
        )

    def catalog(self, engine: EnvironmentEngine, *, refresh: bool = False) -> VersionCatalog:
        """Return the cached catalog of ``engine``, fetching it when stale or absent."""

        if refresh:
            self._cache.invalidate(engine.name)
        else:
            cached = self._cache.load(engine.name)
            if cached is not None:
                return cached
        LOGGER.debug("fetching version catalog for %s", engine.name)
        try:
            raw = engine.get_versions()
        except DevEnvError as exc:
            raise annotate(exc, engine=engine.name, stage="catalog")
        return self._cache.save(engine.name, raw)

    def resolve(
        self,
        engine: EnvironmentEngine,
        spec: str = LATEST,
        options: EngineOptions | None = None,
        *,
        refresh: bool = False,
    ) -> str:
        """Return the concrete version of ``engine`` satisfying ``spec``.

        ``options`` must be the bag ``engine`` was initialised with; its
        ``platform`` and ``arch`` keys select the target the catalog is
        filtered for.

        Raises:
            FormatError: If ``spec`` is malformed.
            NotFoundError: If no catalog entry matches.
        """

        context = self._context_for(options)
        request = VersionRequest(
            spec=spec,
            platform=context.platform,
            arch=context.arch,
            options=dict(options or {}),
        )
        catalog = self.catalog(engine, refresh=refresh)
        try:
            return resolve_or_raise(request, catalog, engine)
        except DevEnvError as exc:
            raise annotate(exc, engine=engine.name, stage="resolve")

    def install(
        self,
        name: str,
        spec: str = LATEST,
        options: EngineOptions | None = None,
        *,
        force: bool = False,
        refresh: bool = False,
        progress: Progress | None = None,
    ) -> InstallResult:
        """Resolve ``spec`` and install the matching version of engine ``name``.

        An existing, verified installation is left untouched unless ``force``
        is set, in which case it stays recoverable until the new tree passes
        verification. A non-empty installation that fails verification is a
        stale partial install and is deleted before installing again.

        Returns:
            InstallResult: Resolved version, final path, and outcome.

        Raises:
            DevEnvError: If resolution or any pipeline stage fails.
        """

        engine = self.load_engine(name, options)
        version = self.resolve(engine, spec, options, refresh=refresh)
        install_root = self._layout.engine_root(engine.name)
        try:
            status = self._inspect_existing(engine, version, install_root, force=force)
        except DevEnvError as exc:
            raise annotate(exc, engine=engine.name, version=version, stage="recover")
        if status is InstallStatus.ALREADY_INSTALLED:
            path = self._layout.version_path(engine.name, version)
            LOGGER.debug("%s %s already installed at %s", engine.name, version, path)
            return InstallResult(engine.name, version, path, status)

        path = self._pipeline.install(engine, version, install_root, progress=progress)
        return InstallResult(engine.name, version, path, status)

    def _inspect_existing(
        self,
        engine: EnvironmentEngine,
        version: str,
        install_root: Path,
        *,
        force: bool,
    ) -> InstallStatus:
        target = self._swap.target_for(install_root, version)
        self._swap.recover(target)
        if not target.final_path.exists():
            return InstallStatus.INSTALLED
        if _has_entries(target.final_path) and engine.successfully_installed(version, target.final_path):
            return InstallStatus.REINSTALLED if force else InstallStatus.ALREADY_INSTALLED
        LOGGER.debug("removing unusable installation %s", target.final_path)
        self._swap.discard(target)
        return InstallStatus.REINSTALLED

    def installed_versions(self, name: str) -> list[str]:
        """Return versions of ``name`` present under the dev home, newest first."""

        engine_name = self._require_engine(name)
        root = self._layout.engine_root(engine_name)
        if not root.is_dir():
            return []
        try:
            children = list(root.iterdir())
        except OSError as exc:
            raise FilesystemError(f"cannot list {root}: {exc}", engine=engine_name, stage="list") from exc
        found: list[tuple[tuple[int, int, int], str]] = []
        for child in children:
            if not child.is_dir() or child.name.endswith((STAGING_SUFFIX, BACKUP_SUFFIX)):
                continue
            try:
                found.append((parse_triple(child.name), child.name))
            except ValueError:
                LOGGER.debug("ignoring unexpected directory %s", child)
        return [version for _, version in sorted(found, reverse=True)]

    def uninstall(self, name: str, spec: str) -> str:
        """Remove the newest installed version of ``name`` matching ``spec``.

        Returns:
            str: Removed version.

        Raises:
            NotFoundError: If no installed version matches.
        """

        engine_name = self._require_engine(name)
        version = best_match(spec, self.installed_versions(engine_name))
        if version is None:
            raise NotFoundError(f"no installed version matches '{spec}'", engine=engine_name, stage="uninstall")
        target = self._swap.target_for(self._layout.engine_root(engine_name), version)
        try:
            self._swap.discard(target)
        except DevEnvError as exc:
            raise annotate(exc, engine=engine_name, version=version, stage="uninstall")
        LOGGER.debug("removed %s %s", engine_name, version)
        return version

    def is_installed(self, name: str, spec: str, options: EngineOptions | None = None) -> str | None:
        """Return the newest installed and verified version matching ``spec``, if any."""

        engine = self.load_engine(name, options)
        for version in self.installed_versions(engine.name):
            if not matches_spec(spec, version):
                continue
            path = self._layout.version_path(engine.name, version)
            if engine.successfully_installed(version, path):
                return version
        return None

    def available(
        self,
        name: str,
        options: EngineOptions | None = None,
        *,
        refresh: bool = False,
    ) -> tuple[VersionEntry, ...]:
        """Return catalog entries installable on the target platform, newest first."""

        engine = self.load_engine(name, options)
        target = self._context_for(options)
        catalog = self.catalog(engine, refresh=refresh)
        return tuple(
            entry
            for entry in catalog.versions
            if entry.supports(target.platform, target.arch) and engine.version_is_valid(entry)
        )

    def _require_engine(self, name: str) -> str:
        key = name.strip().lower()
        if key not in self._registry:
            raise NotFoundError(f"unknown engine '{name}'", engine=key, stage="lookup")
        return key


def _has_entries(path: Path) -> bool:
    try:
        return any(path.iterdir())
    except OSError as exc:
        raise FilesystemError(f"cannot list {path}: {exc}") from exc


__all__ = ["EnvironmentManager", "InstallResult", "InstallStatus"]
