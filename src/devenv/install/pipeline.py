# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Download, extract, lay out, verify, and commit one engine version."""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from ..errors import DevEnvError, FilesystemError, FormatError, VerificationError, annotate
from ..paths import DevHomeLayout
from .archives import ArchiveExtractor, archive_stem
from .download import Downloader, filename_from_url
from .swap import DirectorySwapManager, InstallationTarget

if TYPE_CHECKING:
    from ..engines.base import EnvironmentEngine

LOGGER = logging.getLogger(__name__)

DOWNLOADED_SUBDIR: Final[str] = "downloaded"
EXTRACTED_SUBDIR: Final[str] = "extracted"

# Receives (stage, subject), e.g. ("download", url).
Progress = Callable[[str, str], None]


@dataclass(frozen=True, slots=True)
class WorkingArea:
    """Temporary directories used by a single installation."""

    root: Path

    @property
    def downloaded(self) -> Path:
        return self.root / DOWNLOADED_SUBDIR

    @property
    def extracted(self) -> Path:
        return self.root / EXTRACTED_SUBDIR


class InstallationPipeline:
    """Materialise one engine version under its install root.

    A previous installation of the same version stays recoverable in the
    backup path until the new tree has passed the engine's verification; any
    failure restores it and re-raises the original error.
    """

    def __init__(
        self,
        layout: DevHomeLayout,
        *,
        downloader: Downloader,
        extractor: ArchiveExtractor | None = None,
        swap: DirectorySwapManager | None = None,
    ) -> None:
        self._layout = layout
        self._downloader = downloader
        self._extractor = extractor or ArchiveExtractor()
        self._swap = swap or DirectorySwapManager()

    def install(
        self,
        engine: EnvironmentEngine,
        version: str,
        install_root: Path,
        *,
        progress: Progress | None = None,
    ) -> Path:
        """Install ``version`` of ``engine`` below ``install_root``.

        Args:
            engine: Initialised engine supplying URLs, layout, and verification.
            version: Concrete version to install.
            install_root: Engine install root (``<home>/env/<engine>``).
            progress: Optional callback receiving ``(stage, subject)`` events.

        Returns:
            Path: Final installation path.

        Raises:
            DevEnvError: Annotated with engine, version, and failing stage.
            Exception: Errors raised by the engine propagate unchanged after
                rollback.
        """

        report = progress or _ignore_progress
        stage = "download-list"
        area: WorkingArea | None = None
        target: InstallationTarget | None = None
        prepared = False
        try:
            urls = list(engine.get_download_file_list(version))
            if not urls:
                raise FormatError("engine returned an empty download file list")

            area = self._create_working_area(engine.name, version)

            stage = "download"
            artifacts = self._download_all(urls, area.downloaded, report)

            stage = "extract"
            self._extract_all(artifacts, area.extracted, report)

            stage = "prepare"
            target = self._swap.target_for(install_root, version)
            self._swap.prepare(install_root, version)
            prepared = True

            stage = "layout"
            report(stage, f"{engine.name} {version}")
            engine.install_files(area.downloaded, area.extracted, target.staging_path, version)

            stage = "verify"
            report(stage, f"{engine.name} {version}")
            if not engine.successfully_installed(version, target.staging_path):
                raise VerificationError("installed files failed verification")

            stage = "commit"
            report(stage, str(target.final_path))
            self._swap.commit(target)
        except DevEnvError as exc:
            LOGGER.debug("install of %s %s failed during %s: %s", engine.name, version, stage, exc)
            self._abort(target, area, prepared=prepared)
            raise annotate(exc, engine=engine.name, version=version, stage=stage)
        except BaseException:
            LOGGER.debug("install of %s %s failed during %s", engine.name, version, stage, exc_info=True)
            self._abort(target, area, prepared=prepared)
            raise

        self._remove_working_area(area)
        LOGGER.debug("installed %s %s into %s", engine.name, version, target.final_path)
        return target.final_path

    def _create_working_area(self, engine_name: str, version: str) -> WorkingArea:
        try:
            self._layout.tmp_dir.mkdir(parents=True, exist_ok=True)
            root = Path(tempfile.mkdtemp(prefix=f"{engine_name}-{version}-", dir=self._layout.tmp_dir))
            area = WorkingArea(root=root)
            area.downloaded.mkdir()
            area.extracted.mkdir()
        except OSError as exc:
            raise FilesystemError(f"cannot create working area: {exc}") from exc
        return area

    def _download_all(self, urls: Sequence[str], directory: Path, report: Progress) -> list[Path]:
        artifacts: list[Path] = []
        used: set[str] = set()
        for index, url in enumerate(urls, start=1):
            name = filename_from_url(url)
            if name in used:
                name = f"{index}-{name}"
            used.add(name)
            report("download", url)
            artifacts.append(self._downloader.download(url, directory / name))
        return artifacts

    def _extract_all(self, artifacts: Sequence[Path], directory: Path, report: Progress) -> None:
        for artifact in artifacts:
            if not self._extractor.is_archive(artifact):
                LOGGER.debug("leaving %s unextracted", artifact.name)
                continue
            report("extract", artifact.name)
            self._extractor.extract(artifact, directory / archive_stem(artifact))

    def _abort(self, target: InstallationTarget | None, area: WorkingArea | None, *, prepared: bool) -> None:
        try:
            if target is not None and prepared:
                self._swap.rollback(target)
            elif target is not None:
                self._swap.recover(target)
        finally:
            self._remove_working_area(area)

    @staticmethod
    def _remove_working_area(area: WorkingArea | None) -> None:
        if area is None:
            return
        shutil.rmtree(area.root, ignore_errors=True)


def _ignore_progress(stage: str, subject: str) -> None:
    del stage, subject


__all__ = ["InstallationPipeline", "WorkingArea"]
