# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Environment engines and the registry used to look them up."""

from __future__ import annotations

from .base import (
    REQUIRED_CAPABILITIES,
    EngineContext,
    EngineOption,
    EngineOptions,
    EnvironmentEngine,
    ensure_engine_contract,
)
from .registry import ENGINE_ENTRY_POINT_GROUP, EngineRegistry, builtin_factories, default_registry

__all__ = [
    "ENGINE_ENTRY_POINT_GROUP",
    "REQUIRED_CAPABILITIES",
    "EngineContext",
    "EngineOption",
    "EngineOptions",
    "EngineRegistry",
    "EnvironmentEngine",
    "builtin_factories",
    "default_registry",
    "ensure_engine_contract",
]
