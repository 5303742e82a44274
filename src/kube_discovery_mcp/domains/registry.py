"""Core domain plugins.

Each domain registers its MCP tools through pluggy hooks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from kube_discovery_mcp.hooks import hookimpl
from kube_discovery_mcp.plugin import BasePlugin, PluginMetadata

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kube_discovery_mcp.server import DiscoveryServer


class ApiSearchPlugin(BasePlugin):
    """Plugin for searching the Kubernetes client method catalog."""

    def __init__(self) -> None:
        super().__init__(
            PluginMetadata(
                name="api-search",
                version="1.0.0",
                description="Ranked, faceted search over Kubernetes client API methods",
                maintainer="kube-discovery-mcp maintainers",
            )
        )

    @hookimpl
    def kube_register_tools(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        from kube_discovery_mcp.domains.search.tools import register_tools

        register_tools(mcp, server)

    @hookimpl
    def kube_health_check(self, server: DiscoveryServer) -> tuple[bool, str]:
        count = len(server.method_catalog)
        if count == 0:
            return False, "No API methods found in the registry"
        return True, f"{count} API methods available"


class TypeDefinitionsPlugin(BasePlugin):
    """Plugin for type lookup and property path navigation."""

    def __init__(self) -> None:
        super().__init__(
            PluginMetadata(
                name="type-definitions",
                version="1.0.0",
                description="Kubernetes type definitions by name or property path",
                maintainer="kube-discovery-mcp maintainers",
            )
        )

    @hookimpl
    def kube_register_tools(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        from kube_discovery_mcp.domains.types.tools import register_tools

        register_tools(mcp, server)

    @hookimpl
    def kube_health_check(self, server: DiscoveryServer) -> tuple[bool, str]:
        return server.type_resolver.store.source.is_available()


def get_core_plugins() -> list[BasePlugin]:
    """Return instances of all core domain plugins."""
    return [
        ApiSearchPlugin(),
        TypeDefinitionsPlugin(),
    ]
