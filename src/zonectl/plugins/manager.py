"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``[plugins] local_dir``.
Capabilities: registry builder contributions.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from typing import TYPE_CHECKING

import pluggy

from zonectl.plugins.hookspecs import ZonectlHookSpec

if TYPE_CHECKING:
    from pathlib import Path

    from zonectl.infrastructure.registries.base import Builder

PROJECT_NAME = "zonectl"

logger = logging.getLogger(__name__)


class PluginManager:
    """Discovers plugins and collects their registry builders."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ZonectlHookSpec)

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Uses pluggy's native setuptools entry_point discovery for the
        ``zonectl.plugins`` group, then scans *local_dir* for single-file
        Python plugins.

        Returns the names of all registered plugins.
        """
        self._pm.load_setuptools_entrypoints("zonectl.plugins")
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        names = [self._plugin_name(p) for p in self._pm.get_plugins()]
        logger.debug("Plugins loaded: %s", ", ".join(names) or "none")
        return names

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def _plugin_name(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    # ------------------------------------------------------------------
    # Builder contributions
    # ------------------------------------------------------------------

    def collect_registry_builders(self) -> dict[str, tuple[str, Builder]]:
        """Gather builders from every plugin as ``{builder_id: (plugin, builder)}``.

        A plugin whose hook raises or returns something other than a dict of
        callables is skipped with a warning. The first plugin to claim an
        identifier keeps it.
        """
        collected: dict[str, tuple[str, Builder]] = {}
        for plugin in self._pm.get_plugins():
            plugin_name = self._plugin_name(plugin)
            hook = getattr(plugin, "register_registry_builders", None)
            if hook is None:
                continue

            try:
                builder_map = hook()
            except Exception:
                logger.warning(
                    "Failed to collect registry builders from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            if builder_map is None:
                continue
            if not isinstance(builder_map, dict):
                logger.warning(
                    "Plugin %s returned non-dict registry builder registrations",
                    plugin_name,
                )
                continue

            for builder_id, builder in builder_map.items():
                if not isinstance(builder_id, str) or not builder_id.strip():
                    logger.warning("Plugin %s returned an empty builder id", plugin_name)
                    continue
                if not callable(builder):
                    logger.warning(
                        "Skipping non-callable builder %r from plugin %s",
                        builder_id,
                        plugin_name,
                    )
                    continue
                if builder_id in collected:
                    logger.warning(
                        "Builder %r from plugin %s already provided by %s",
                        builder_id,
                        plugin_name,
                        collected[builder_id][0],
                    )
                    continue
                collected[builder_id] = (plugin_name, builder)
        return collected

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised: a broken local plugin
        must not prevent the rest of the system from starting.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"zonectl_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=module_name)
                    logger.debug("Loaded local plugin %s from %s", obj.__name__, py_file)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("zonectl")`` sets a ``zonectl_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "zonectl_impl", None):
                return True
        return False
