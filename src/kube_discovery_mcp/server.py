"""FastMCP server definition for Kubernetes API discovery with plugin discovery."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

from kube_discovery_mcp.config import DeclarationSourceMode, KubeDiscoveryConfig, get_config
from kube_discovery_mcp.domains.methods.extractor import MethodExtractor
from kube_discovery_mcp.domains.methods.models import ApiGrouping, MethodRecord
from kube_discovery_mcp.domains.methods.registry import load_groupings
from kube_discovery_mcp.domains.search.index import SearchIndex
from kube_discovery_mcp.domains.types.resolver import TypePathResolver
from kube_discovery_mcp.domains.types.sources import (
    DeclarationSource,
    DirectoryDeclarationSource,
    KubernetesModelSource,
)
from kube_discovery_mcp.domains.types.store import TypeDescriptorStore
from kube_discovery_mcp.plugin_manager import PluginManager
from kube_discovery_mcp.utils.lazy import Lazy

logger = logging.getLogger(__name__)


class DiscoveryServer:
    """Discovery MCP server with plugin-based tool registration.

    The method catalog, search index and type resolver are built once, on
    first use or at startup when pre-warming is enabled, and shared by all
    requests.
    """

    def __init__(self, config: KubeDiscoveryConfig | None = None) -> None:
        self._config = config or get_config()
        self._mcp: FastMCP | None = None
        self._plugin_manager: PluginManager | None = None
        self._groupings: Lazy[list[ApiGrouping]] = Lazy(self._load_groupings, "API grouping registry")
        self._catalog: Lazy[list[MethodRecord]] = Lazy(self._build_catalog, "method catalog")
        self._search_index: Lazy[SearchIndex] = Lazy(self._build_search_index, "search index")
        self._type_resolver: Lazy[TypePathResolver] = Lazy(self._build_type_resolver, "type resolver")

    @property
    def config(self) -> KubeDiscoveryConfig:
        return self._config

    @property
    def mcp(self) -> FastMCP:
        """Get the MCP server instance.

        Raises:
            RuntimeError: If server is not initialized.
        """
        if self._mcp is None:
            raise RuntimeError("Server not initialized.")
        return self._mcp

    @property
    def plugin_manager(self) -> PluginManager | None:
        return self._plugin_manager

    @property
    def groupings(self) -> list[ApiGrouping]:
        return self._groupings.get()

    @property
    def method_catalog(self) -> list[MethodRecord]:
        return self._catalog.get()

    @property
    def search_index(self) -> SearchIndex:
        return self._search_index.get()

    @property
    def type_resolver(self) -> TypePathResolver:
        return self._type_resolver.get()

    def _load_groupings(self) -> list[ApiGrouping]:
        return load_groupings(self._config.registry_path)

    def _build_catalog(self) -> list[MethodRecord]:
        return MethodExtractor(self.groupings).extract()

    def _build_search_index(self) -> SearchIndex:
        return SearchIndex.build(self.method_catalog, tolerance=self._config.search_tolerance)

    def _create_declaration_source(self) -> DeclarationSource:
        if self._config.declaration_source == DeclarationSourceMode.DIRECTORY:
            if self._config.declarations_path is None:
                raise ValueError("declarations_path is required for the directory declaration source")
            return DirectoryDeclarationSource(self._config.declarations_path)
        return KubernetesModelSource()

    def _build_type_resolver(self) -> TypePathResolver:
        store = TypeDescriptorStore(
            self._create_declaration_source(),
            share_across_requests=self._config.cache_types_across_requests,
        )
        return TypePathResolver(
            store,
            max_properties=self._config.max_type_properties,
            max_expansion_depth=self._config.max_expansion_depth,
        )

    def startup(self) -> None:
        """Build shared state and run plugin health checks."""
        if self._config.prewarm_index:
            index = self.search_index
            logger.info(f"Search index ready with {len(index)} methods")

        if self._plugin_manager is not None:
            self._plugin_manager.run_health_checks(self)
            logger.info(
                f"Discovery MCP server started with "
                f"{len(self._plugin_manager.healthy_plugins)}/"
                f"{len(self._plugin_manager.registered_plugins)} plugins active"
            )

    def _create_lifespan(self) -> Callable[[Any], AbstractAsyncContextManager[None]]:
        """Create the lifespan context manager for the MCP server."""
        server_self = self

        @asynccontextmanager
        async def lifespan(_app: Any) -> AsyncIterator[None]:
            logger.info("Starting Kubernetes discovery MCP server...")
            server_self.startup()
            try:
                yield
            finally:
                logger.info("Kubernetes discovery MCP server shut down")

        return lifespan

    def create_mcp(self) -> FastMCP:
        """Create and configure the FastMCP server."""
        self._plugin_manager = PluginManager()
        self._plugin_manager.load_core_plugins()
        self._plugin_manager.load_entrypoint_plugins()

        mcp = FastMCP(
            name="kube-discovery-mcp",
            instructions="MCP server for discovering the Kubernetes Python client API. "
            "Search for client methods by resource type, then inspect request and "
            "response types by name or property path.",
            lifespan=self._create_lifespan(),
            host=self._config.host,
            port=self._config.port,
        )
        self._mcp = mcp

        self._plugin_manager.register_all_tools(mcp, self)
        self._plugin_manager.register_all_resources(mcp, self)
        self._register_core_resources(mcp)

        return mcp

    def _register_core_resources(self, mcp: FastMCP) -> None:
        """Register core MCP resources describing the server state."""

        @mcp.resource("kube-discovery://status")
        def discovery_status() -> dict:
            """Get discovery server status.

            Returns catalog and index sizes, type cache usage and plugin health.
            """
            result: dict = {
                "catalog_loaded": self._catalog.is_initialized,
                "index_ready": self._search_index.is_initialized,
                "methods": len(self.method_catalog) if self._catalog.is_initialized else None,
                "indexed_methods": len(self.search_index)
                if self._search_index.is_initialized
                else None,
                "declaration_source": self._config.declaration_source.value,
                "cached_types": self.type_resolver.store.shared_count
                if self._type_resolver.is_initialized
                else 0,
                "plugins": [],
            }
            if self._plugin_manager is not None:
                result["plugins"] = self._plugin_manager.plugin_status()
            return result

        @mcp.resource("kube-discovery://groupings")
        def discovery_groupings() -> list[dict]:
            """Get the API groupings that are searched.

            Returns each client API class with its description and method count.
            """
            counts: dict[str, int] = {}
            for record in self.method_catalog:
                counts[record.grouping_id] = counts.get(record.grouping_id, 0) + 1
            return [
                {
                    "grouping_id": grouping.grouping_id,
                    "description": grouping.description,
                    "methods": counts.get(grouping.grouping_id, 0),
                }
                for grouping in self.groupings
            ]

        logger.info("Registered core MCP resources")


# Global server instance
_server: DiscoveryServer | None = None


def get_server() -> DiscoveryServer:
    """Get the global server instance."""
    global _server
    if _server is None:
        _server = DiscoveryServer()
    return _server


def create_server(config: KubeDiscoveryConfig | None = None) -> FastMCP:
    """Create and return the MCP server instance.

    This is the main entry point for creating the server.
    """
    global _server
    _server = DiscoveryServer(config)
    return _server.create_mcp()
