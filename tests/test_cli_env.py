# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the ``devenv env`` command group."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from devenv.cli.app import app
from devenv.cli.shared import CLIError, CLIState, parse_engine_options
from devenv.manager import EnvironmentManager


@pytest.fixture
def engine(sample_engine_factory):
    return sample_engine_factory()


@pytest.fixture
def invoke(monkeypatch, tmp_path: Path, sample_registry, downloader, engine):
    runner = CliRunner()
    home = tmp_path / "cli-home"

    def fake_create_manager(state: CLIState) -> EnvironmentManager:
        return EnvironmentManager(
            state.config,
            registry=sample_registry(engine),
            downloader=downloader,
            platform="linux",
            arch="x64",
        )

    monkeypatch.setattr("devenv.cli.env.create_manager", fake_create_manager)

    def run(*args: str, emoji: bool = False):
        flags = ["--home", str(home)] + ([] if emoji else ["--no-emoji"])
        return runner.invoke(app, [*flags, *args])

    return run


def test_install_reports_outcomes(invoke) -> None:
    first = invoke("env", "install", "sample", "7")
    second = invoke("env", "i", "sample", "7")
    forced = invoke("env", "in", "sample", "7", "--force")

    assert first.exit_code == 0, first.output
    assert "Extracting sample-7.0.4-linux-x64.tar.gz" in first.output
    assert "sample 7.0.4 installed into" in first.output
    assert second.exit_code == 0
    assert "sample 7.0.4 is already installed at" in second.output
    assert forced.exit_code == 0
    assert "sample 7.0.4 reinstalled into" in forced.output


def test_install_defaults_to_latest(invoke) -> None:
    result = invoke("env", "install", "sample")

    assert result.exit_code == 0, result.output
    assert "sample 7.0.4 installed into" in result.output


def test_install_normalises_arch_option(invoke, engine) -> None:
    result = invoke("env", "install", "sample", "6", "--arch", "amd64", "-o", "channel=stable")

    assert result.exit_code == 0, result.output
    assert engine.options == {"channel": "stable", "arch": "x64"}


def test_install_failure_exits_non_zero(invoke) -> None:
    result = invoke("env", "install", "sample", "9")

    assert result.exit_code == 1
    assert "[sample] resolve: no version matches '9' for linux/x64" in result.output


def test_unknown_engine(invoke) -> None:
    result = invoke("env", "list", "ruby")

    assert result.exit_code == 1
    assert "unknown engine 'ruby'" in result.output


def test_invalid_engine_option(invoke) -> None:
    result = invoke("env", "install", "sample", "7", "--option", "=x")

    assert result.exit_code == 1
    assert "invalid engine option '=x'" in result.output


def test_list_uninstall_and_test(invoke) -> None:
    invoke("env", "install", "sample", "7.0.3")
    invoke("env", "install", "sample", "6")

    listed = invoke("env", "l", "sample")
    assert listed.exit_code == 0
    assert listed.output.splitlines() == ["7.0.3", "6.4.0"]

    present = invoke("env", "test", "sample", "7")
    assert present.exit_code == 0
    assert "sample 7.0.3 is installed" in present.output

    removed = invoke("env", "un", "sample", "7")
    assert removed.exit_code == 0
    assert "sample 7.0.3 uninstalled" in removed.output

    missing = invoke("env", "ts", "sample", "7")
    assert missing.exit_code == 1
    assert "sample 7 is not installed" in missing.output

    invoke("env", "u", "sample", "6")
    empty = invoke("env", "li", "sample")
    assert empty.exit_code == 0
    assert "No sample versions installed" in empty.output


def test_uninstall_without_match(invoke) -> None:
    result = invoke("env", "uninstall", "sample", "7")

    assert result.exit_code == 1
    assert "uninstall: no installed version matches '7'" in result.output


def test_versions_table(invoke) -> None:
    linux = invoke("env", "versions", "sample")
    windows = invoke("env", "versions", "sample", "--platform", "windows")

    assert linux.exit_code == 0, linux.output
    assert "7.0.4" in linux.output
    assert "7.1.0" not in linux.output
    assert "7.1.0" in windows.output


def test_emoji_prefixes(invoke) -> None:
    decorated = invoke("env", "install", "sample", "7", emoji=True)
    plain = invoke("env", "install", "sample", "7")

    assert "✅" in decorated.output
    assert "✅" not in plain.output


def test_missing_config_file_is_reported(invoke, tmp_path: Path) -> None:
    result = invoke("--config", str(tmp_path / "absent.toml"), "env", "list", "sample")

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_config_file_is_loaded(invoke, tmp_path: Path) -> None:
    config_path = tmp_path / "devenv.toml"
    config_path.write_text("[cache]\nversionInfoExpires = 0\n", encoding="utf-8")

    result = invoke("--config", str(config_path), "env", "list", "sample")

    assert result.exit_code == 0, result.output


def test_env_aliases_are_hidden(invoke) -> None:
    result = invoke("env", "--help")

    assert result.exit_code == 0
    for command in ("install", "uninstall", "list", "test", "versions"):
        assert command in result.output
    assert " ts " not in result.output


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        (None, {}),
        (["lts"], {"lts": True}),
        (["LTS=no"], {"lts": False}),
        (["nts=yes", "jobs=4"], {"nts": True, "jobs": 4}),
        (["mirror=https://example.test/a=b"], {"mirror": "https://example.test/a=b"}),
    ],
)
def test_parse_engine_options(values: list[str] | None, expected: dict[str, object]) -> None:
    assert parse_engine_options(values) == expected


def test_parse_engine_options_rejects_empty_key() -> None:
    with pytest.raises(CLIError):
        parse_engine_options([" =1"])
