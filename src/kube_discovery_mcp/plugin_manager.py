"""Plugin registry for the discovery server.

Core plugins are registered directly; external ones are found through the
``kube_discovery_mcp.plugins`` entry point group. The manager remembers the
outcome of the last health check so the status resource can report it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pluggy

from kube_discovery_mcp.hooks import PROJECT_NAME, DiscoveryHookSpec

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kube_discovery_mcp.plugin import PluginMetadata
    from kube_discovery_mcp.server import DiscoveryServer

logger = logging.getLogger(__name__)

PLUGIN_ENTRY_POINT_GROUP = "kube_discovery_mcp.plugins"

HealthResult = tuple[bool, str]


def _plugin_name(plugin: Any) -> str:
    get_metadata = getattr(plugin, "kube_get_plugin_metadata", None)
    if get_metadata is not None:
        return get_metadata().name
    return type(plugin).__name__


class PluginManager:
    """Registers discovery plugins and dispatches their hooks."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(DiscoveryHookSpec)
        self._registered_plugins: dict[str, Any] = {}
        self._healthy_plugins: dict[str, Any] = {}
        self._health_results: dict[str, HealthResult] = {}

    @property
    def hook(self) -> Any:
        return self._pm.hook

    @property
    def registered_plugins(self) -> dict[str, Any]:
        return self._registered_plugins

    @property
    def healthy_plugins(self) -> dict[str, Any]:
        """Plugins whose last health check passed."""
        return self._healthy_plugins

    def register_plugin(self, plugin: Any, name: str | None = None) -> str:
        """Register a plugin instance and return the name it was registered under.

        Without an explicit name the plugin's metadata name is used, falling
        back to its class name.
        """
        name = name or _plugin_name(plugin)
        self._pm.register(plugin, name=name)
        self._registered_plugins[name] = plugin
        logger.debug(f"Registered plugin: {name}")
        return name

    def load_core_plugins(self) -> int:
        from kube_discovery_mcp.domains.registry import get_core_plugins

        plugins = get_core_plugins()
        for plugin in plugins:
            self.register_plugin(plugin)
        logger.info(f"Loaded {len(plugins)} core plugins")
        return len(plugins)

    def load_entrypoint_plugins(self) -> int:
        """Load plugins advertised by installed packages.

        Returns:
            Number of entry points loaded.
        """
        count = self._pm.load_setuptools_entrypoints(PLUGIN_ENTRY_POINT_GROUP)
        for plugin in self._pm.get_plugins():
            name = self._pm.get_name(plugin)
            if name and name not in self._registered_plugins:
                self._registered_plugins[name] = plugin
                logger.info(f"Loaded external plugin: {name}")
        if count:
            logger.info(f"Loaded {count} external plugins from entry points")
        return count

    def get_all_metadata(self) -> list[PluginMetadata]:
        return [meta for meta in self.hook.kube_get_plugin_metadata() if meta is not None]

    def register_all_tools(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        self.hook.kube_register_tools(mcp=mcp, server=server)
        logger.info(f"Registered tools from {len(self._registered_plugins)} plugins")

    def register_all_resources(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        self.hook.kube_register_resources(mcp=mcp, server=server)
        logger.info(f"Registered resources from {len(self._registered_plugins)} plugins")

    @staticmethod
    def _check_plugin(plugin: Any, server: DiscoveryServer) -> HealthResult:
        check = getattr(plugin, "kube_health_check", None)
        if check is None:
            return True, "No health check defined"
        try:
            return check(server=server)
        except Exception as e:
            return False, f"Health check error: {e}"

    def run_health_checks(self, server: DiscoveryServer) -> dict[str, HealthResult]:
        """Check every registered plugin and rebuild ``healthy_plugins``.

        A plugin whose check raises is reported unhealthy with the error
        message; the other plugins are still checked.
        """
        self._healthy_plugins.clear()
        self._health_results = {}

        for name, plugin in self._registered_plugins.items():
            healthy, message = self._check_plugin(plugin, server)
            self._health_results[name] = (healthy, message)
            if healthy:
                self._healthy_plugins[name] = plugin
                logger.info(f"Plugin {name} healthy: {message}")
            else:
                logger.warning(f"Plugin {name} unavailable: {message}")

        return dict(self._health_results)

    def plugin_status(self) -> list[dict[str, Any]]:
        """Metadata of each plugin with the outcome of its last health check.

        ``healthy`` and ``message`` are None until health checks have run.
        """
        status = []
        for meta in self.get_all_metadata():
            healthy, message = self._health_results.get(meta.name, (None, None))
            status.append(
                {
                    "name": meta.name,
                    "version": meta.version,
                    "description": meta.description,
                    "healthy": healthy,
                    "message": message,
                }
            )
        return sorted(status, key=lambda entry: entry["name"])
