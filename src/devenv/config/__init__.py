# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration models and loaders."""

from __future__ import annotations

from ..errors import ConfigError
from .loader import CONFIG_FILENAME, VERSION_INFO_EXPIRES_ENV_VAR, load_config
from .models import (
    DEFAULT_VERSION_INFO_EXPIRES,
    HOME_ENV_VAR,
    CacheSettings,
    DevEnvConfig,
    DownloadSettings,
    default_home,
)

__all__ = [
    "CONFIG_FILENAME",
    "CacheSettings",
    "ConfigError",
    "DEFAULT_VERSION_INFO_EXPIRES",
    "DevEnvConfig",
    "DownloadSettings",
    "HOME_ENV_VAR",
    "VERSION_INFO_EXPIRES_ENV_VAR",
    "default_home",
    "load_config",
]
