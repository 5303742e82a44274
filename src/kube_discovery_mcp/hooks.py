"""Pluggy hook specifications for discovery server plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kube_discovery_mcp.plugin import PluginMetadata
    from kube_discovery_mcp.server import DiscoveryServer

PROJECT_NAME = "kube_discovery_mcp"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class DiscoveryHookSpec:
    """Hooks a discovery server plugin may implement."""

    @hookspec
    def kube_get_plugin_metadata(self) -> PluginMetadata:  # type: ignore[empty-body]
        """Return metadata identifying the plugin."""

    @hookspec
    def kube_register_tools(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        """Register MCP tools with the server."""

    @hookspec
    def kube_register_resources(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        """Register MCP resources with the server."""

    @hookspec
    def kube_health_check(self, server: DiscoveryServer) -> tuple[bool, str]:  # type: ignore[empty-body]
        """Report whether the plugin can serve requests, with a message."""
