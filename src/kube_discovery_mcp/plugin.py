"""Plugin interface for discovery server components.

This module defines the plugin base class and metadata that all discovery
server plugins use to integrate with the server via pluggy hooks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kube_discovery_mcp.hooks import hookimpl

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from kube_discovery_mcp.server import DiscoveryServer


@dataclass
class PluginMetadata:
    """Metadata describing a discovery server plugin."""

    name: str
    """Unique plugin name, e.g., 'api-search'."""

    version: str
    """Plugin version following semver, e.g., '1.0.0'."""

    description: str
    """Human-readable description of what this plugin provides."""

    maintainer: str
    """Maintainer email or team."""


class BasePlugin:
    """Base implementation of a discovery server plugin.

    Plugins extend this class to get default implementations of the hook
    methods. All hook methods are decorated with @hookimpl to register them
    with pluggy.

    Example entry point in pyproject.toml for external plugins:
        [project.entry-points."kube_discovery_mcp.plugins"]
        my_plugin = "my_package.plugin:MyPlugin"
    """

    def __init__(self, metadata: PluginMetadata) -> None:
        self._metadata = metadata

    @property
    def metadata(self) -> PluginMetadata:
        return self._metadata

    @hookimpl
    def kube_get_plugin_metadata(self) -> PluginMetadata:
        """Return plugin metadata."""
        return self._metadata

    @hookimpl
    def kube_register_tools(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        """Register MCP tools. Override in subclass."""

    @hookimpl
    def kube_register_resources(self, mcp: FastMCP, server: DiscoveryServer) -> None:
        """Register MCP resources. Override in subclass."""

    @hookimpl
    def kube_health_check(self, server: DiscoveryServer) -> tuple[bool, str]:  # noqa: ARG002
        """Check plugin health. Plugins without requirements are always healthy."""
        return True, "No requirements"
