# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""PHP engine installing the official Windows builds from windows.php.net."""

from __future__ import annotations

import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from ..catalog.models import VersionEntry
from ..errors import FilesystemError, FormatError, NotFoundError
from ..install.archives import archive_stem
from .base import EnvironmentEngine

RELEASES_URL: Final[str] = "https://windows.php.net/downloads/releases"
ARCHIVES_URL: Final[str] = "https://windows.php.net/downloads/releases/archives"


@dataclass(frozen=True, slots=True)
class WindowsBuild:
    """Published Windows build of one PHP release."""

    version: str
    vc: str
    archs: tuple[str, ...]
    nts: bool = True
    archived: bool = False


WINDOWS_BUILDS: Final[tuple[WindowsBuild, ...]] = (
    WindowsBuild("7.0.4", "14", ("x64", "x86")),
    WindowsBuild("7.0.3", "14", ("x64", "x86"), archived=True),
    WindowsBuild("7.0.2", "14", ("x64", "x86"), archived=True),
    WindowsBuild("7.0.1", "14", ("x64", "x86"), archived=True),
    WindowsBuild("5.6.19", "11", ("x64", "x86")),
    WindowsBuild("5.6.18", "11", ("x64", "x86"), archived=True),
    WindowsBuild("5.5.33", "11", ("x64", "x86")),
    WindowsBuild("5.5.32", "11", ("x64", "x86"), archived=True),
    WindowsBuild("5.4.45", "9", ("x86",)),
)


class PhpEngine(EnvironmentEngine):
    """Install PHP from the static list of published Windows builds.

    Options:
        nts: Install the non-thread-safe build.
        arch: Override the target architecture.
    """

    name = "php"

    def get_versions(self) -> Mapping[str, Any]:
        return {
            "environment": self.name,
            "versions": [
                {"version": build.version, "files": [f"win-{arch}" for arch in build.archs]}
                for build in WINDOWS_BUILDS
            ],
        }

    def version_is_valid(self, entry: VersionEntry) -> bool:
        build = _find_build(entry.version)
        if build is None:
            return False
        return build.nts or not self.flag("nts")

    def get_full_version_number(self, version: str) -> str:
        return version

    def get_download_file_list(self, version: str) -> Sequence[str]:
        build = _find_build(version)
        if build is None:
            raise NotFoundError(f"no Windows build metadata for PHP {version}")
        if self.arch not in build.archs:
            raise NotFoundError(f"PHP {version} is not built for {self.arch}")
        base = ARCHIVES_URL if build.archived else RELEASES_URL
        return [f"{base}/{self.package_name(build)}"]

    def package_name(self, build: WindowsBuild) -> str:
        """Return the zip file name of ``build`` for the selected arch and thread model."""

        nts = "-nts" if self.flag("nts") else ""
        return f"php-{build.version}{nts}-Win32-VC{build.vc}-{self.arch}.zip"

    def install_files(self, download_dir: Path, extract_dir: Path, install_path: Path, version: str) -> None:
        del download_dir
        build = _find_build(version)
        if build is None:
            raise NotFoundError(f"no Windows build metadata for PHP {version}")
        source = extract_dir / archive_stem(self.package_name(build))
        if not source.is_dir():
            raise FormatError(f"extracted files do not contain '{source.name}'")
        try:
            shutil.copytree(source, install_path, dirs_exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"cannot copy {source} into {install_path}: {exc}") from exc

    def successfully_installed(self, version: str, install_path: Path) -> bool:
        del version
        return (install_path / "php.exe").is_file()


def _find_build(version: str) -> WindowsBuild | None:
    for build in WINDOWS_BUILDS:
        if build.version == version:
            return build
    return None


__all__ = ["ARCHIVES_URL", "PhpEngine", "RELEASES_URL", "WINDOWS_BUILDS", "WindowsBuild"]
