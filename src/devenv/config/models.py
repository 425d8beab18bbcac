# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the devenv version manager."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field

HOME_ENV_VAR: Final[str] = "DEVENV_HOME"
DEFAULT_HOME_DIRNAME: Final[str] = ".devenv"

# In seconds. Default 24h: 60 * 60 * 24
DEFAULT_VERSION_INFO_EXPIRES: Final[int] = 86_400
DEFAULT_DOWNLOAD_TIMEOUT: Final[float] = 60.0
DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024


def default_home() -> Path:
    """Return the dev home directory honouring ``DEVENV_HOME``.

    Returns:
        Path: Directory holding installed environments, caches, and config.
    """

    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_HOME_DIRNAME


class CacheSettings(BaseModel):
    """Settings controlling the remote version catalog cache."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    version_info_expires: int = Field(
        default=DEFAULT_VERSION_INFO_EXPIRES,
        alias="versionInfoExpires",
        ge=0,
    )


class DownloadSettings(BaseModel):
    """Settings controlling artifact downloads."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    timeout: float = Field(default=DEFAULT_DOWNLOAD_TIMEOUT, gt=0)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, alias="chunkSize", gt=0)


class DevEnvConfig(BaseModel):
    """Top-level configuration passed explicitly into every component."""

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    home: Path = Field(default_factory=default_home)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    download: DownloadSettings = Field(default_factory=DownloadSettings)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under a dotted ``key`` such as ``cache.versionInfoExpires``.

        Both field names and their camel-case aliases are accepted for each
        segment.

        Args:
            key: Dotted configuration key.
            default: Value returned when any segment is unknown.

        Returns:
            Any: Resolved configuration value or ``default``.
        """

        current: Any = self
        for segment in key.split("."):
            if not isinstance(current, BaseModel):
                return default
            field_name = _field_for(current, segment)
            if field_name is None:
                return default
            current = getattr(current, field_name)
        return current

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping using the public key aliases."""

        return self.model_dump(mode="json", by_alias=True)


def _field_for(model: BaseModel, segment: str) -> str | None:
    """Return the attribute name on ``model`` addressed by ``segment``."""

    fields: Mapping[str, Any] = type(model).model_fields
    if segment in fields:
        return segment
    for name, info in fields.items():
        if info.alias == segment:
            return name
    return None


__all__ = [
    "CacheSettings",
    "DEFAULT_VERSION_INFO_EXPIRES",
    "DevEnvConfig",
    "DownloadSettings",
    "HOME_ENV_VAR",
    "default_home",
]
