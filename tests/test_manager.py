# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end tests for :class:`devenv.manager.EnvironmentManager`."""

from __future__ import annotations

import time
from pathlib import Path

import pytest

from devenv.engines import EngineRegistry
from devenv.errors import NetworkError, NotFoundError
from devenv.manager import EnvironmentManager, InstallStatus


@pytest.fixture
def engine(sample_engine_factory):
    return sample_engine_factory()


@pytest.fixture
def manager(config, downloader, sample_registry, engine) -> EnvironmentManager:
    return EnvironmentManager(
        config,
        registry=sample_registry(engine),
        downloader=downloader,
        platform="linux",
        arch="x64",
    )


def _write_install(root: Path, version: str, content: str | None = None) -> Path:
    final = root / version
    (final / "bin").mkdir(parents=True)
    (final / "bin" / "sample").write_text(content or version, encoding="utf-8")
    return final


def test_install_resolves_partial_spec(manager: EnvironmentManager, engine) -> None:
    result = manager.install("sample", "7")

    assert result.version == "7.0.4"
    assert result.status is InstallStatus.INSTALLED
    assert result.changed
    assert result.path == manager.layout.version_path("sample", "7.0.4")
    assert (result.path / "bin" / "sample").read_text(encoding="utf-8") == "7.0.4"
    assert engine.fetches == 1


def test_install_latest_skips_versions_without_host_build(manager: EnvironmentManager) -> None:
    # 7.1.0 ships only for win; the rc entry is not a release.
    assert manager.install("sample").version == "7.0.4"


def test_second_install_is_a_no_op(manager: EnvironmentManager, engine) -> None:
    manager.install("sample", "7.0")

    again = manager.install("sample", "7.0")

    assert again.status is InstallStatus.ALREADY_INSTALLED
    assert not again.changed
    assert engine.fetches == 1
    assert len(engine.layout_calls) == 1


def test_force_reinstalls_verified_version(manager: EnvironmentManager, engine) -> None:
    manager.install("sample", "6")

    result = manager.install("sample", "6", force=True)

    assert result.version == "6.4.0"
    assert result.status is InstallStatus.REINSTALLED
    assert len(engine.layout_calls) == 2


def test_rejected_versions_are_skipped(manager: EnvironmentManager, engine) -> None:
    engine.rejected = {"7.0.4"}

    assert manager.install("sample", "7").version == "7.0.3"


def test_broken_installation_is_replaced(manager: EnvironmentManager) -> None:
    root = manager.layout.engine_root("sample")
    _write_install(root, "7.0.4", content="garbage")

    result = manager.install("sample", "7.0.4")

    assert result.status is InstallStatus.REINSTALLED
    assert (result.path / "bin" / "sample").read_text(encoding="utf-8") == "7.0.4"


def test_empty_installation_directory_is_replaced(manager: EnvironmentManager) -> None:
    (manager.layout.engine_root("sample") / "5.6.19").mkdir(parents=True)

    result = manager.install("sample", "5")

    assert result.version == "5.6.19"
    assert result.status is InstallStatus.REINSTALLED


def test_interrupted_swap_is_recovered_before_install(manager: EnvironmentManager, engine) -> None:
    root = manager.layout.engine_root("sample")
    _write_install(root, "7.0.4_old", content="7.0.4")
    (root / "7.0.4_new").mkdir()

    result = manager.install("sample", "7")

    assert result.status is InstallStatus.ALREADY_INSTALLED
    assert sorted(path.name for path in root.iterdir()) == ["7.0.4"]
    assert engine.layout_calls == []


def test_unknown_version_reports_resolve_stage(manager: EnvironmentManager) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        manager.install("sample", "9")

    assert excinfo.value.engine == "sample"
    assert excinfo.value.stage == "resolve"
    assert "'9'" in str(excinfo.value)


def test_unknown_engine(manager: EnvironmentManager) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        manager.install("ruby", "3")
    assert excinfo.value.stage == "lookup"

    with pytest.raises(NotFoundError):
        manager.installed_versions("ruby")


def test_catalog_is_cached_until_refresh(manager: EnvironmentManager, engine) -> None:
    manager.available("sample")
    manager.available("sample")
    assert engine.fetches == 1

    manager.available("sample", refresh=True)
    assert engine.fetches == 2


def test_expired_catalog_is_refetched(config, downloader, sample_registry, engine) -> None:
    now = [time.time()]
    manager = EnvironmentManager(
        config,
        registry=sample_registry(engine),
        downloader=downloader,
        clock=lambda: now[0],
        platform="linux",
        arch="x64",
    )

    manager.available("sample")
    now[0] += config.cache.version_info_expires + 60
    manager.available("sample")

    assert engine.fetches == 2


def test_catalog_fetch_failure_is_annotated(manager: EnvironmentManager, engine, monkeypatch) -> None:
    def offline() -> dict[str, object]:
        raise NetworkError("connection refused")

    monkeypatch.setattr(engine, "get_versions", offline)

    with pytest.raises(NetworkError) as excinfo:
        manager.install("sample", "7")

    assert (excinfo.value.engine, excinfo.value.stage) == ("sample", "catalog")


def test_available_filters_by_platform(manager: EnvironmentManager, engine) -> None:
    engine.rejected = {"5.6.19"}

    linux = [entry.version for entry in manager.available("sample")]
    windows = [entry.version for entry in manager.available("sample", {"platform": "win"})]

    assert linux == ["7.0.4", "7.0.3", "6.4.0"]
    assert windows == ["7.1.0", "7.0.4"]


def test_installed_versions_ignores_swap_and_foreign_directories(manager: EnvironmentManager) -> None:
    manager.install("sample", "6")
    manager.install("sample", "7.0.3")
    root = manager.layout.engine_root("sample")
    (root / "7.0.4_new").mkdir()
    (root / "notes").mkdir()
    (root / "README").write_text("not a version", encoding="utf-8")

    assert manager.installed_versions("sample") == ["7.0.3", "6.4.0"]


def test_installed_versions_without_installs(manager: EnvironmentManager) -> None:
    assert manager.installed_versions("sample") == []


def test_uninstall_removes_best_match(manager: EnvironmentManager) -> None:
    manager.install("sample", "7.0.3")
    manager.install("sample", "7.0.4")

    removed = manager.uninstall("sample", "7")

    assert removed == "7.0.4"
    assert manager.installed_versions("sample") == ["7.0.3"]


def test_uninstall_without_match(manager: EnvironmentManager) -> None:
    manager.install("sample", "6")

    with pytest.raises(NotFoundError) as excinfo:
        manager.uninstall("sample", "7")

    assert excinfo.value.stage == "uninstall"
    assert manager.installed_versions("sample") == ["6.4.0"]


def test_is_installed_requires_verification(manager: EnvironmentManager) -> None:
    result = manager.install("sample", "7")

    assert manager.is_installed("sample", "7") == "7.0.4"
    assert manager.is_installed("sample", "6") is None

    (result.path / "bin" / "sample").write_text("truncated", encoding="utf-8")
    assert manager.is_installed("sample", "7") is None


class PluginEngine:
    """Engine that implements the contract without subclassing the base class."""

    name = "sample"

    def __init__(self, delegate) -> None:
        self._delegate = delegate

    def init(self, context, options) -> None:
        self._delegate.init(context, options)

    def get_versions(self):
        return self._delegate.get_versions()

    def version_is_valid(self, entry) -> bool:
        return self._delegate.version_is_valid(entry)

    def get_full_version_number(self, version: str) -> str:
        return self._delegate.get_full_version_number(version)

    def get_download_file_list(self, version: str):
        return self._delegate.get_download_file_list(version)

    def install_files(self, download_dir: Path, extract_dir: Path, install_path: Path, version: str) -> None:
        self._delegate.install_files(download_dir, extract_dir, install_path, version)

    def successfully_installed(self, version: str, install_path: Path) -> bool:
        return self._delegate.successfully_installed(version, install_path)


def test_contract_only_engine_installs(config, downloader, engine) -> None:
    plugin = PluginEngine(engine)
    manager = EnvironmentManager(
        config,
        registry=EngineRegistry({"sample": lambda: plugin}),
        downloader=downloader,
        platform="linux",
        arch="x64",
    )

    result = manager.install("sample", "7")
    windows = [entry.version for entry in manager.available("sample", {"platform": "win"})]

    assert not hasattr(plugin, "platform")
    assert result.version == "7.0.4"
    assert result.status is InstallStatus.INSTALLED
    assert windows == ["7.1.0", "7.0.4"]
    assert manager.is_installed("sample", "7") == "7.0.4"
