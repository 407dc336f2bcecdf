"""Tests for the registry builder table."""

from __future__ import annotations

from typing import Any

import pytest

from zonectl.infrastructure.registries.builders import (
    BUILTIN_BUILDERS,
    REGISTRY_BUILDERS,
    load_registry_builders,
)
from zonectl.infrastructure.registries.memory import MemoryRegistry, build_memory_registry
from zonectl.plugins.hookspecs import hookimpl
from zonectl.plugins.manager import PluginManager


def _custom_builder(params: dict[str, Any]) -> MemoryRegistry:
    return MemoryRegistry()


class _CustomPlugin:
    @hookimpl
    def register_registry_builders(self) -> dict[str, Any]:
        return {"custom": _custom_builder}


class _ShadowingPlugin:
    @hookimpl
    def register_registry_builders(self) -> dict[str, Any]:
        return {"memory": _custom_builder}


class TestBuiltinBuilders:
    def test_builtin_identifiers(self) -> None:
        assert set(BUILTIN_BUILDERS) == {"memory", "sqlite"}
        assert REGISTRY_BUILDERS is BUILTIN_BUILDERS

    def test_read_only(self) -> None:
        with pytest.raises(TypeError):
            BUILTIN_BUILDERS["other"] = _custom_builder  # type: ignore[index]


class TestLoadRegistryBuilders:
    def test_without_plugins(self) -> None:
        table = load_registry_builders()
        assert dict(table) == dict(BUILTIN_BUILDERS)

    def test_plugin_contribution(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_CustomPlugin())
        table = load_registry_builders(pm)
        assert table["custom"] is _custom_builder
        assert "memory" in table

    def test_plugin_cannot_shadow_builtin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_ShadowingPlugin())
        table = load_registry_builders(pm)
        assert table["memory"] is build_memory_registry

    def test_result_is_frozen(self) -> None:
        table = load_registry_builders(PluginManager())
        with pytest.raises(TypeError):
            table["x"] = _custom_builder  # type: ignore[index]
