# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Archive recognition and extraction primitive."""

from __future__ import annotations

import logging
import tarfile
import zipfile
from collections.abc import Iterable
from pathlib import Path, PurePosixPath
from typing import Final

from ..errors import FilesystemError, FormatError

LOGGER = logging.getLogger(__name__)

ZIP_SUFFIXES: Final[tuple[str, ...]] = (".zip",)
TAR_SUFFIXES: Final[dict[str, str]] = {
    ".tar.gz": "r:gz",
    ".tgz": "r:gz",
    ".tar.xz": "r:xz",
    ".txz": "r:xz",
    ".tar.bz2": "r:bz2",
    ".tbz2": "r:bz2",
    ".tar": "r:",
}


def archive_suffix(path: Path | str) -> str | None:
    """Return the recognised archive suffix of ``path`` or ``None``.

    Args:
        path: Artifact file name or path.

    Returns:
        str | None: Suffix such as ``".tar.gz"`` when the artifact is an
        archive this module can extract.
    """

    name = Path(path).name.lower()
    for suffix in (*TAR_SUFFIXES, *ZIP_SUFFIXES):
        if name.endswith(suffix) and len(name) > len(suffix):
            return suffix
    return None


def archive_stem(path: Path | str) -> str:
    """Return the artifact name without its archive suffix."""

    name = Path(path).name
    suffix = archive_suffix(name)
    return name[: -len(suffix)] if suffix else name


class ArchiveExtractor:
    """Extract zip and tar archives while refusing members that escape the destination."""

    def is_archive(self, path: Path) -> bool:
        """Return ``True`` when ``path`` has a recognised archive extension."""

        return archive_suffix(path) is not None

    def extract(self, archive: Path, destination: Path) -> Path:
        """Extract ``archive`` into ``destination``.

        Args:
            archive: Archive file to unpack.
            destination: Directory receiving the archive contents.

        Returns:
            Path: ``destination``.

        Raises:
            FormatError: If the archive is corrupt, unsupported, or contains
                unsafe member paths.
            FilesystemError: If the destination cannot be written.
        """

        suffix = archive_suffix(archive)
        if suffix is None:
            raise FormatError(f"{archive.name} is not a recognised archive", stage="extract")
        LOGGER.debug("extracting %s -> %s", archive, destination)
        try:
            destination.mkdir(parents=True, exist_ok=True)
            if suffix in ZIP_SUFFIXES:
                self._extract_zip(archive, destination)
            else:
                self._extract_tar(archive, destination, mode=TAR_SUFFIXES[suffix])
        except (zipfile.BadZipFile, tarfile.TarError, EOFError) as exc:
            raise FormatError(f"cannot extract {archive.name}: {exc}", stage="extract") from exc
        except OSError as exc:
            raise FilesystemError(f"cannot extract {archive.name} into {destination}: {exc}", stage="extract") from exc
        return destination

    @staticmethod
    def _extract_zip(archive: Path, destination: Path) -> None:
        with zipfile.ZipFile(archive) as bundle:
            _ensure_safe_members(bundle.namelist(), archive=archive)
            bundle.extractall(destination)

    @staticmethod
    def _extract_tar(archive: Path, destination: Path, *, mode: str) -> None:
        with tarfile.open(archive, mode) as bundle:  # type: ignore[call-overload]
            members = bundle.getmembers()
            _ensure_safe_members((member.name for member in members), archive=archive)
            if hasattr(tarfile, "data_filter"):
                bundle.extractall(destination, members=members, filter="data")
            else:  # pragma: no cover - interpreters without extraction filters
                bundle.extractall(destination, members=members)


def _ensure_safe_members(names: Iterable[str], *, archive: Path) -> None:
    for name in names:
        candidate = PurePosixPath(name.replace("\\", "/"))
        if candidate.is_absolute() or ".." in candidate.parts:
            raise FormatError(f"{archive.name} contains unsafe member path '{name}'", stage="extract")


__all__ = ["ArchiveExtractor", "archive_stem", "archive_suffix"]
