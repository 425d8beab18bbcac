# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Blocking HTTP download primitive backed by ``requests``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Final
from urllib.parse import unquote, urlparse

import requests

from ..config import DownloadSettings
from ..errors import FilesystemError, NetworkError

LOGGER = logging.getLogger(__name__)

USER_AGENT: Final[str] = "devenv/0.1"


class Downloader:
    """Fetch remote resources fully before returning.

    Non-2xx responses, transport errors, and timeouts are reported as
    :class:`NetworkError`; a partially written file is removed before the
    error propagates.
    """

    def __init__(
        self,
        settings: DownloadSettings | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        """Initialise the downloader.

        Args:
            settings: Timeout and chunk size settings.
            session: Optional HTTP session; a new ``requests.Session`` is
                created when omitted.
        """

        self._settings = settings or DownloadSettings()
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)

    def download(self, url: str, destination: Path) -> Path:
        """Write the resource at ``url`` to ``destination``.

        Args:
            url: Artifact URL.
            destination: File path to create; parent directories are created.

        Returns:
            Path: ``destination`` once the body has been written completely.

        Raises:
            NetworkError: If the request fails or returns a non-2xx status.
            FilesystemError: If ``destination`` cannot be written.
        """

        LOGGER.debug("downloading %s -> %s", url, destination)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(f"cannot create {destination.parent}: {exc}", stage="download") from exc

        try:
            with self._session.get(url, stream=True, timeout=self._settings.timeout) as response:
                response.raise_for_status()
                with destination.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=self._settings.chunk_size):
                        if chunk:
                            handle.write(chunk)
        except requests.RequestException as exc:
            destination.unlink(missing_ok=True)
            raise NetworkError(f"download of {url} failed: {exc}", stage="download") from exc
        except OSError as exc:
            destination.unlink(missing_ok=True)
            raise FilesystemError(f"cannot write {destination}: {exc}", stage="download") from exc
        return destination

    def fetch_json(self, url: str) -> Any:
        """Return the decoded JSON document served at ``url``.

        Raises:
            NetworkError: If the request fails or the body is not JSON.
        """

        LOGGER.debug("fetching %s", url)
        try:
            response = self._session.get(url, timeout=self._settings.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise NetworkError(f"request to {url} failed: {exc}", stage="catalog") from exc
        except ValueError as exc:
            raise NetworkError(f"response from {url} is not valid JSON: {exc}", stage="catalog") from exc


def filename_from_url(url: str) -> str:
    """Return the last path component of ``url`` (``"download"`` when empty)."""

    name = unquote(Path(urlparse(url).path).name)
    return name or "download"


__all__ = ["Downloader", "filename_from_url"]
