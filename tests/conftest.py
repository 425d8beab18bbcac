# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures: configuration, fake HTTP sessions, and a sample engine."""

from __future__ import annotations

import io
import shutil
import tarfile
import zipfile
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
import requests

from devenv.catalog.models import VersionEntry
from devenv.config import DevEnvConfig
from devenv.engines.base import EngineContext, EnvironmentEngine
from devenv.engines.registry import EngineRegistry
from devenv.install.download import Downloader
from devenv.paths import DevHomeLayout


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(self, url: str, *, body: bytes = b"", status_code: int = 200, payload: Any = None) -> None:
        self.url = url
        self.status_code = status_code
        self._body = body
        self._payload = payload

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for {self.url}")

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """Serve canned bodies keyed by URL and record every request."""

    def __init__(
        self,
        bodies: Mapping[str, bytes] | None = None,
        *,
        payloads: Mapping[str, Any] | None = None,
        errors: Mapping[str, Exception] | None = None,
    ) -> None:
        self.headers: dict[str, str] = {}
        self.bodies = dict(bodies or {})
        self.payloads = dict(payloads or {})
        self.errors = dict(errors or {})
        self.requested: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        del kwargs
        self.requested.append(url)
        if url in self.errors:
            raise self.errors[url]
        if url in self.payloads:
            return FakeResponse(url, payload=self.payloads[url])
        if url in self.bodies:
            return FakeResponse(url, body=self.bodies[url])
        return FakeResponse(url, status_code=404)


def build_tarball(files: Mapping[str, bytes], *, modes: Mapping[str, int] | None = None) -> bytes:
    """Return a gzip tarball holding ``files`` keyed by member path."""

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = (modes or {}).get(name, 0o644)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_zip(files: Mapping[str, bytes]) -> bytes:
    """Return a zip archive holding ``files`` keyed by member path."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buffer.getvalue()


SAMPLE_BASE_URL = "https://downloads.example.test/sample"

SAMPLE_VERSIONS: list[dict[str, Any]] = [
    {"version": "v6.4.0", "files": ["linux-x64", "osx-x64-tar"]},
    {"version": "7.0.4", "files": ["linux-x64", "linux-x86", "win-x64"], "date": "2016-03-03"},
    {"version": "7.0.3", "files": ["linux-x64"]},
    {"version": "7.1.0", "files": ["win-x64"]},
    {"version": "5.6.19", "files": ["linux-x64", "headers"]},
    {"version": "8.0.0-rc1", "files": ["linux-x64", "src"]},
]


class SampleEngine(EnvironmentEngine):
    """Engine used by tests: every version ships one tarball with ``bin/sample``."""

    name = "sample"

    def __init__(self, versions: Sequence[Mapping[str, Any]] | None = None) -> None:
        super().__init__()
        self.versions = list(SAMPLE_VERSIONS if versions is None else versions)
        self.rejected: set[str] = set()
        self.fetches = 0
        self.layout_calls: list[tuple[Path, Path, Path, str]] = []
        self.fail_layout: Exception | None = None
        self.fail_verify = False
        self.download_urls: list[str] | None = None

    def get_versions(self) -> Mapping[str, Any]:
        self.fetches += 1
        return {"environment": self.name, "versions": [dict(item) for item in self.versions]}

    def version_is_valid(self, entry: VersionEntry) -> bool:
        return entry.version not in self.rejected

    def get_full_version_number(self, version: str) -> str:
        return version

    def get_download_file_list(self, version: str) -> Sequence[str]:
        if self.download_urls is not None:
            return list(self.download_urls)
        return [f"{SAMPLE_BASE_URL}/{sample_artifact(version, self.platform, self.arch)}"]

    def install_files(self, download_dir: Path, extract_dir: Path, install_path: Path, version: str) -> None:
        self.layout_calls.append((download_dir, extract_dir, install_path, version))
        if self.fail_layout is not None:
            raise self.fail_layout
        source = extract_dir / f"sample-{version}-{self.platform}-{self.arch}"
        shutil.copytree(source, install_path, dirs_exist_ok=True)

    def successfully_installed(self, version: str, install_path: Path) -> bool:
        if self.fail_verify:
            return False
        marker = install_path / "bin" / "sample"
        return marker.is_file() and marker.read_text(encoding="utf-8") == version


def sample_artifact(version: str, platform: str = "linux", arch: str = "x64") -> str:
    return f"sample-{version}-{platform}-{arch}.tar.gz"


def sample_tarball(version: str) -> bytes:
    return build_tarball({"bin/sample": version.encode("utf-8"), "README": b"sample runtime\n"})


@pytest.fixture
def config(tmp_path: Path) -> DevEnvConfig:
    """Return a configuration rooted in a temporary dev home."""

    return DevEnvConfig(home=tmp_path / "devhome")


@pytest.fixture
def layout(config: DevEnvConfig) -> DevHomeLayout:
    return DevHomeLayout.from_config(config)


@pytest.fixture
def fake_session_factory() -> type[FakeSession]:
    return FakeSession


@pytest.fixture
def sample_session() -> FakeSession:
    """Return a session serving tarballs for every sample version on linux/x64."""

    bodies = {
        f"{SAMPLE_BASE_URL}/{sample_artifact(version)}": sample_tarball(version)
        for version in ("7.0.4", "7.0.3", "6.4.0", "5.6.19")
    }
    return FakeSession(bodies)


@pytest.fixture
def downloader(sample_session: FakeSession, config: DevEnvConfig) -> Downloader:
    return Downloader(config.download, session=sample_session)  # type: ignore[arg-type]


@pytest.fixture
def sample_engine_factory() -> type[SampleEngine]:
    return SampleEngine


@pytest.fixture
def sample_engine(config: DevEnvConfig, layout: DevHomeLayout, downloader: Downloader) -> SampleEngine:
    """Return an initialised sample engine targeting linux/x64."""

    engine = SampleEngine()
    engine.init(
        EngineContext(config=config, layout=layout, platform="linux", arch="x64", downloader=downloader),
        {},
    )
    return engine


@pytest.fixture
def sample_registry() -> Callable[..., EngineRegistry]:
    """Return a factory building registries whose ``sample`` engine is ``engine``."""

    def build(engine: SampleEngine | None = None) -> EngineRegistry:
        instance = engine or SampleEngine()
        return EngineRegistry({"sample": lambda: instance})

    return build


@pytest.fixture
def tarball_builder() -> Callable[..., bytes]:
    return build_tarball


@pytest.fixture
def zip_builder() -> Callable[[Mapping[str, bytes]], bytes]:
    return build_zip


@pytest.fixture
def sample_tarball_builder() -> Callable[[str], bytes]:
    return sample_tarball


@pytest.fixture
def sample_url() -> Callable[..., str]:
    def build(version: str, platform: str = "linux", arch: str = "x64") -> str:
        return f"{SAMPLE_BASE_URL}/{sample_artifact(version, platform, arch)}"

    return build
