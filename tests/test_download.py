# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the requests-backed download primitive."""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from devenv.config import DownloadSettings
from devenv.errors import NetworkError
from devenv.install.download import USER_AGENT, Downloader, filename_from_url

URL = "https://downloads.example.test/files/tool-1.0.0.tar.gz"


def test_download_streams_body_to_destination(tmp_path: Path, fake_session_factory) -> None:
    session = fake_session_factory({URL: b"0123456789" * 10})
    downloader = Downloader(DownloadSettings(chunk_size=7), session=session)

    target = downloader.download(URL, tmp_path / "nested" / "tool.tar.gz")

    assert target.read_bytes() == b"0123456789" * 10
    assert session.requested == [URL]
    assert session.headers["User-Agent"] == USER_AGENT


def test_http_error_removes_partial_file(tmp_path: Path, fake_session_factory) -> None:
    downloader = Downloader(session=fake_session_factory())
    destination = tmp_path / "missing.tar.gz"

    with pytest.raises(NetworkError) as excinfo:
        downloader.download(URL, destination)

    assert excinfo.value.stage == "download"
    assert "404" in str(excinfo.value)
    assert not destination.exists()


def test_transport_error_becomes_network_error(tmp_path: Path, fake_session_factory) -> None:
    session = fake_session_factory(errors={URL: requests.ConnectTimeout("timed out")})
    downloader = Downloader(session=session)

    with pytest.raises(NetworkError, match="timed out"):
        downloader.download(URL, tmp_path / "tool.tar.gz")


def test_fetch_json(fake_session_factory) -> None:
    index_url = "https://downloads.example.test/index.json"
    session = fake_session_factory(payloads={index_url: [{"version": "v1.0.0"}]})

    assert Downloader(session=session).fetch_json(index_url) == [{"version": "v1.0.0"}]


def test_fetch_json_rejects_non_json(fake_session_factory) -> None:
    index_url = "https://downloads.example.test/index.json"
    session = fake_session_factory({index_url: b"<html>"})

    with pytest.raises(NetworkError) as excinfo:
        Downloader(session=session).fetch_json(index_url)
    assert excinfo.value.stage == "catalog"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (URL, "tool-1.0.0.tar.gz"),
        ("https://example.test/dl/php%207.zip?mirror=1", "php 7.zip"),
        ("https://example.test/", "download"),
    ],
)
def test_filename_from_url(url: str, expected: str) -> None:
    assert filename_from_url(url) == expected
