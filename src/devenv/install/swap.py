# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Staging/backup directory swaps that make installs look atomic.

Every installation works with three sibling paths under an engine's install
root: the final ``<version>`` directory, the ``<version>_new`` staging
directory, and the ``<version>_old`` backup directory. This module is the only
place that creates, renames, or deletes them.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from ..errors import FilesystemError
from ..paths import BACKUP_SUFFIX, STAGING_SUFFIX

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InstallationTarget:
    """Final, staging, and backup paths for one version."""

    final_path: Path
    staging_path: Path
    backup_path: Path

    @property
    def version(self) -> str:
        """Return the version directory name."""

        return self.final_path.name


class DirectorySwapManager:
    """Prepare, commit, and roll back directory swaps around an install target."""

    def target_for(self, install_root: Path, version: str) -> InstallationTarget:
        """Return the deterministic paths for ``version`` under ``install_root``."""

        return InstallationTarget(
            final_path=install_root / version,
            staging_path=install_root / f"{version}{STAGING_SUFFIX}",
            backup_path=install_root / f"{version}{BACKUP_SUFFIX}",
        )

    def recover(self, target: InstallationTarget) -> None:
        """Clear leftovers of an interrupted operation on ``target``.

        A staging directory never holds a promoted install and is always
        removed. A backup without a final directory is the last committed
        install and is moved back into place; a backup next to a final
        directory is superseded and removed.

        Args:
            target: Paths to inspect.

        Raises:
            FilesystemError: If a leftover path cannot be removed or restored.
        """

        if _exists(target.staging_path):
            LOGGER.debug("removing stale staging directory %s", target.staging_path)
            _remove(target.staging_path)
        if not _exists(target.backup_path):
            return
        if _exists(target.final_path):
            LOGGER.debug("removing superseded backup %s", target.backup_path)
            _remove(target.backup_path)
        else:
            LOGGER.debug("restoring interrupted backup %s", target.backup_path)
            _rename(target.backup_path, target.final_path)

    def prepare(self, install_root: Path, version: str) -> InstallationTarget:
        """Return a target with an empty staging directory ready for layout.

        Leftovers from earlier attempts are swept first, then an existing final
        directory is moved aside to the backup path by rename.

        Args:
            install_root: Engine install root (``<home>/env/<engine>``).
            version: Concrete version being installed.

        Returns:
            InstallationTarget: Paths for the swap.

        Raises:
            FilesystemError: If any required path operation fails.
        """

        target = self.target_for(install_root, version)
        self.recover(target)
        if _exists(target.final_path):
            _rename(target.final_path, target.backup_path)
        try:
            target.staging_path.mkdir(parents=True)
        except OSError as exc:
            raise FilesystemError(f"cannot create staging directory {target.staging_path}: {exc}") from exc
        return target

    def commit(self, target: InstallationTarget) -> None:
        """Promote the staging directory and drop the backup.

        Once the rename succeeds the new install is in place, so a backup
        that cannot be removed is only logged; the next :meth:`recover` on
        this target deletes it.

        Raises:
            FilesystemError: If the staging directory cannot be promoted.
        """

        _rename(target.staging_path, target.final_path)
        if not _exists(target.backup_path):
            return
        try:
            _remove(target.backup_path)
        except FilesystemError as exc:
            LOGGER.warning("leaving superseded backup in place: %s", exc)

    def rollback(self, target: InstallationTarget) -> None:
        """Discard the staging directory and restore the backup, if any."""

        if _exists(target.staging_path):
            _remove(target.staging_path)
        if _exists(target.backup_path):
            if _exists(target.final_path):
                _remove(target.final_path)
            _rename(target.backup_path, target.final_path)

    def discard(self, target: InstallationTarget) -> None:
        """Delete the final, staging, and backup directories of ``target``."""

        for path in (target.staging_path, target.backup_path, target.final_path):
            if _exists(path):
                _remove(path)


def _exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


def _remove(path: Path) -> None:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        raise FilesystemError(f"cannot remove {path}: {exc}") from exc


def _rename(source: Path, destination: Path) -> None:
    try:
        source.rename(destination)
    except OSError as exc:
        raise FilesystemError(f"cannot rename {source} to {destination}: {exc}") from exc


__all__ = ["DirectorySwapManager", "InstallationTarget"]
