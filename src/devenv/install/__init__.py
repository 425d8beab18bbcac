# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Download, extraction, and directory swap primitives plus the install pipeline."""

from __future__ import annotations

from .archives import ArchiveExtractor, archive_stem, archive_suffix
from .download import Downloader, filename_from_url
from .pipeline import InstallationPipeline, WorkingArea
from .swap import DirectorySwapManager, InstallationTarget

__all__ = [
    "ArchiveExtractor",
    "DirectorySwapManager",
    "Downloader",
    "InstallationPipeline",
    "InstallationTarget",
    "WorkingArea",
    "archive_stem",
    "archive_suffix",
    "filename_from_url",
]
