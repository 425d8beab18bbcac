# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Engine lookup by name.

Built-in engines are registered explicitly; third-party packages contribute
engines through the ``devenv.engines`` entry-point group, where each entry
point resolves to a zero-argument factory (usually the engine class).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from importlib import metadata
from importlib.metadata import EntryPoint, EntryPoints
from typing import TypeAlias, cast

from ..errors import NotFoundError
from .base import EnvironmentEngine, ensure_engine_contract

LOGGER = logging.getLogger(__name__)

ENGINE_ENTRY_POINT_GROUP = "devenv.engines"

EngineFactory: TypeAlias = Callable[[], object]

_EntryPointSource: TypeAlias = EntryPoints | Mapping[str, Sequence[EntryPoint]]


class EngineRegistry:
    """Map engine names to factories producing fresh engine instances."""

    def __init__(self, factories: Mapping[str, EngineFactory] | None = None) -> None:
        self._factories: dict[str, EngineFactory] = {}
        for name, factory in (factories or {}).items():
            self.register(name, factory)

    def register(self, name: str, factory: EngineFactory, *, replace: bool = False) -> None:
        """Register ``factory`` under ``name``.

        Args:
            name: Lowercase engine identifier.
            factory: Callable returning a new engine instance.
            replace: Allow overriding an existing registration.

        Raises:
            ValueError: If ``name`` is already registered and ``replace`` is
                ``False``.
        """

        key = name.strip().lower()
        if key in self._factories and not replace:
            raise ValueError(f"engine '{key}' is already registered")
        self._factories[key] = factory

    def names(self) -> tuple[str, ...]:
        """Return the registered engine names in sorted order."""

        return tuple(sorted(self._factories))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self._factories

    def create(self, name: str) -> EnvironmentEngine:
        """Return a new engine instance for ``name``.

        Raises:
            NotFoundError: If no engine is registered under ``name``.
            FormatError: If the produced object violates the engine contract.
        """

        key = name.strip().lower()
        factory = self._factories.get(key)
        if factory is None:
            known = ", ".join(self.names()) or "none"
            raise NotFoundError(f"unknown engine '{name}' (available: {known})", engine=key, stage="lookup")
        return ensure_engine_contract(factory(), expected_name=key)

    def load_entry_points(self, entries: _EntryPointSource | None = None) -> tuple[str, ...]:
        """Register engines advertised under :data:`ENGINE_ENTRY_POINT_GROUP`.

        Built-in registrations win over plugins with the same name. Entry
        points that fail to import are logged and skipped.

        Args:
            entries: Entry-point container to inspect; defaults to the
                installed distributions.

        Returns:
            tuple[str, ...]: Names registered by this call.
        """

        source = entries if entries is not None else cast(_EntryPointSource, metadata.entry_points())
        added: list[str] = []
        for entry in _select_entry_points(source, ENGINE_ENTRY_POINT_GROUP):
            name = entry.name.strip().lower()
            if name in self._factories:
                LOGGER.debug("engine '%s' from %s shadowed by an existing registration", name, entry.value)
                continue
            try:
                factory = cast(EngineFactory, entry.load())
            except (AttributeError, ImportError, ValueError, RuntimeError) as exc:
                LOGGER.debug("skipping engine entry point %s: %s", entry.value, exc)
                continue
            self._factories[name] = factory
            added.append(name)
        return tuple(added)


def _select_entry_points(entries: _EntryPointSource, group: str) -> Iterable[EntryPoint]:
    if isinstance(entries, Mapping):
        return entries.get(group, ())
    if hasattr(entries, "select"):
        return entries.select(group=group)
    return ()


def builtin_factories() -> dict[str, EngineFactory]:
    """Return the factories of the engines shipped with devenv."""

    from .node import NodeEngine
    from .php import PhpEngine

    return {NodeEngine.name: NodeEngine, PhpEngine.name: PhpEngine}


def default_registry(*, discover: bool = True) -> EngineRegistry:
    """Return a registry holding the built-in engines and, optionally, plugins."""

    registry = EngineRegistry(builtin_factories())
    if discover:
        registry.load_entry_points()
    return registry


__all__ = [
    "ENGINE_ENTRY_POINT_GROUP",
    "EngineFactory",
    "EngineRegistry",
    "builtin_factories",
    "default_registry",
]
