"""MCP Tools for Kubernetes type definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from kube_discovery_mcp.utils.errors import DiscoveryError

if TYPE_CHECKING:
    from kube_discovery_mcp.server import DiscoveryServer


def register_tools(mcp: FastMCP, server: DiscoveryServer) -> None:
    """Register type definition tools with the MCP server."""

    @mcp.tool()
    async def get_type_definition(
        types: list[str],
        depth: int = 1,
        inline: bool = False,
    ) -> dict[str, Any]:
        """Get Kubernetes type definitions by name or property path.

        Use the type_name from a search result's output_schema, or walk into
        fields with dots: "V1Deployment.spec" returns V1DeploymentSpec,
        "V1PodSpec.containers" returns V1Container. References that cannot
        be resolved come back with file "not found" instead of failing the
        whole request.

        Args:
            types: Type names or property paths, e.g. ["V1Pod", "V1Deployment.spec"].
            depth: 1 returns only the requested types; 2 also returns the
                types they reference.
            inline: Expand nested types in place instead of listing them
                by name. Very large or recursive types are shown as
                { [key: string]: unknown }.

        Returns:
            Summary text and a mapping of each reference to its definition,
            source file and nested type names.
        """
        try:
            result = await server.type_resolver.lookup(types, depth=depth, inline=inline)
            return {
                "summary": result.summary(),
                "types": {
                    reference: entry.to_dict() for reference, entry in result.entries.items()
                },
            }
        except DiscoveryError as e:
            return {
                "error": "Type lookup failed",
                "message": str(e),
            }
        except Exception as e:
            return {
                "error": "Unexpected error",
                "message": str(e),
            }
