# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Layered configuration loading: defaults, TOML file, then environment."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from ..errors import ConfigError
from .models import HOME_ENV_VAR, DevEnvConfig, default_home

CONFIG_FILENAME: Final[str] = "config.toml"
VERSION_INFO_EXPIRES_ENV_VAR: Final[str] = "DEVENV_CACHE_VERSION_INFO_EXPIRES"


def load_config(
    *,
    home: Path | None = None,
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> DevEnvConfig:
    """Build a :class:`DevEnvConfig` from defaults, a TOML file, and the environment.

    Args:
        home: Explicit dev home directory; overrides ``DEVENV_HOME``.
        config_path: Explicit configuration file; defaults to
            ``<home>/config.toml``.
        env: Environment mapping used for overrides. Defaults to
            :data:`os.environ`.

    Returns:
        DevEnvConfig: Validated configuration.

    Raises:
        ConfigError: If the file is not valid TOML or a value fails validation.
    """

    environ = os.environ if env is None else env
    if home is not None:
        resolved_home = home.expanduser()
    elif environ.get(HOME_ENV_VAR):
        resolved_home = Path(environ[HOME_ENV_VAR]).expanduser()
    else:
        resolved_home = default_home()

    document: dict[str, Any] = {}
    source = config_path if config_path is not None else resolved_home / CONFIG_FILENAME
    document = _deep_merge(document, _read_toml(source, required=config_path is not None))
    document = _deep_merge(document, _environment_overrides(environ))
    document["home"] = resolved_home

    try:
        return DevEnvConfig.model_validate(document)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration in {source}: {exc}", stage="config") from exc


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    """Return the TOML document stored at ``path``.

    Args:
        path: Location of the configuration file.
        required: When ``True`` a missing file is an error.

    Returns:
        dict[str, Any]: Parsed document, empty when the file is absent.
    """

    if not path.is_file():
        if required:
            raise ConfigError(f"configuration file {path} does not exist", stage="config")
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"configuration file {path} is not valid TOML: {exc}", stage="config") from exc
    except OSError as exc:
        raise ConfigError(f"configuration file {path} could not be read: {exc}", stage="config") from exc
    if not isinstance(data, MutableMapping):
        raise ConfigError(f"configuration at {path} must be a table", stage="config")
    data.pop("home", None)
    return dict(data)


def _environment_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    expires = env.get(VERSION_INFO_EXPIRES_ENV_VAR)
    if expires:
        overrides["cache"] = {"versionInfoExpires": expires}
    return overrides


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            merged[key] = _deep_merge(existing, value)
        else:
            merged[key] = value
    return merged


__all__ = ["CONFIG_FILENAME", "VERSION_INFO_EXPIRES_ENV_VAR", "load_config"]
