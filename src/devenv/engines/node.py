# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Node.js engine backed by the official ``nodejs.org/dist`` index."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from ..catalog.models import VersionEntry
from ..errors import FilesystemError, FormatError
from .base import EnvironmentEngine

LOGGER = logging.getLogger(__name__)

NODE_INDEX_URL: Final[str] = "https://nodejs.org/dist/index.json"
NODE_DIST_URL: Final[str] = "https://nodejs.org/dist"
EXECUTABLE_MODE: Final[int] = 0o750
WINDOWS_ZIP_SINCE: Final[tuple[int, int, int]] = (6, 2, 1)

# Download archives name macOS ``darwin`` while the index calls it ``osx``.
_ARCHIVE_PLATFORMS: Final[dict[str, str]] = {"osx": "darwin"}


class NodeEngine(EnvironmentEngine):
    """Install Node.js binary distributions.

    Options:
        lts: Only accept releases the index marks with an LTS codename.
        arch: Override the target architecture.
        platform: Override the target platform.
    """

    name = "node"

    def __init__(self) -> None:
        super().__init__()
        self._lts_versions: frozenset[str] | None = None

    def get_versions(self) -> Mapping[str, Any]:
        releases = self._fetch_index()
        versions: list[dict[str, Any]] = []
        for release in releases:
            versions.append(
                {
                    "version": _release_version(release),
                    "files": list(release.get("files") or ()),
                },
            )
        LOGGER.debug("node index lists %d releases", len(versions))
        return {"environment": self.name, "versions": versions}

    def version_is_valid(self, entry: VersionEntry) -> bool:
        if self.platform == "win" and entry.triple < WINDOWS_ZIP_SINCE:
            return False
        if not self.flag("lts"):
            return True
        if self._lts_versions is None:
            self._fetch_index()
        return entry.version in (self._lts_versions or frozenset())

    def get_full_version_number(self, version: str) -> str:
        return version

    def get_download_file_list(self, version: str) -> Sequence[str]:
        suffix = "zip" if self.platform == "win" else "tar.gz"
        return [f"{NODE_DIST_URL}/v{version}/{self.distribution_name(version)}.{suffix}"]

    def distribution_name(self, version: str) -> str:
        """Return the top-level directory name of the release archive."""

        platform = _ARCHIVE_PLATFORMS.get(self.platform, self.platform)
        return f"node-v{version}-{platform}-{self.arch}"

    def install_files(self, download_dir: Path, extract_dir: Path, install_path: Path, version: str) -> None:
        del download_dir
        source = _find_distribution(extract_dir, self.distribution_name(version))
        try:
            shutil.copytree(source, install_path, symlinks=True, dirs_exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"cannot copy {source} into {install_path}: {exc}") from exc
        if self.platform == "win":
            return
        for executable in _executables(install_path, self.platform):
            if executable.exists():
                executable.chmod(EXECUTABLE_MODE)

    def successfully_installed(self, version: str, install_path: Path) -> bool:
        del version
        node, npm = _executables(install_path, self.platform)
        modules = install_path / "node_modules" if self.platform == "win" else install_path / "lib" / "node_modules"
        if not (node.is_file() and npm.exists() and modules.is_dir()):
            return False
        if self.platform == "win":
            return True
        return all(stat.S_IMODE(os.stat(path).st_mode) == EXECUTABLE_MODE for path in (node, npm))

    def _fetch_index(self) -> list[Mapping[str, Any]]:
        # Catalog snapshots keep only versions and platforms, so the LTS
        # codenames are remembered here whenever the index is read.
        index = self.context.downloader.fetch_json(NODE_INDEX_URL)
        if not isinstance(index, list):
            raise FormatError("node release index is not a list", engine=self.name, stage="catalog")
        releases = [
            release for release in index if isinstance(release, Mapping) and isinstance(release.get("version"), str)
        ]
        self._lts_versions = frozenset(_release_version(release) for release in releases if release.get("lts"))
        return releases


def _release_version(release: Mapping[str, Any]) -> str:
    return str(release["version"]).lstrip("v")


def _executables(install_path: Path, platform: str) -> tuple[Path, Path]:
    if platform == "win":
        return install_path / "node.exe", install_path / "npm.cmd"
    return install_path / "bin" / "node", install_path / "bin" / "npm"


def _find_distribution(extract_dir: Path, folder: str) -> Path:
    for candidate in sorted(extract_dir.glob(f"*/{folder}")) + [extract_dir / folder]:
        if candidate.is_dir():
            return candidate
    raise FormatError(f"extracted files do not contain '{folder}'")


__all__ = ["NODE_INDEX_URL", "NodeEngine"]
