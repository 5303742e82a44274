"""MCP Tools for Kubernetes client API discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from kube_discovery_mcp.domains.methods.models import Action, MethodRecord
from kube_discovery_mcp.domains.search.filters import ResultFilter
from kube_discovery_mcp.domains.search.models import (
    ExcludeCriteria,
    SearchQuery,
    SearchResult,
)
from kube_discovery_mcp.domains.search.scripts import list_cached_scripts, suggested_script_name
from kube_discovery_mcp.utils.errors import DiscoveryError, InvalidQueryError
from kube_discovery_mcp.utils.response import Verbosity

if TYPE_CHECKING:
    from kube_discovery_mcp.server import DiscoveryServer

_VALID_ACTIONS = ", ".join(action.value for action in Action if action is not Action.UNKNOWN)


def _render_record(record: MethodRecord, verbosity: Verbosity) -> dict[str, Any]:
    data: dict[str, Any] = {
        "grouping_id": record.grouping_id,
        "method_name": record.method_name,
        "resource_type": record.resource_type,
        "action": record.action.value,
        "scope": record.scope.value,
    }
    if verbosity == Verbosity.MINIMAL:
        return data

    data["description"] = record.description
    data["parameters"] = [param.model_dump() for param in record.parameters]
    data["input_schema"] = record.input_schema.model_dump()
    data["output_schema"] = record.output_schema.model_dump()
    if verbosity == Verbosity.FULL:
        data["example"] = record.example
    return data


def _signature(record: MethodRecord) -> str:
    args = ", ".join(
        f"{param.name}?" if param.optional else param.name for param in record.parameters
    )
    line = f"{record.grouping_id}.{record.method_name}({args})"
    if record.output_schema.type_name:
        line += f" -> {record.output_schema.type_name}"
    return line


def _format_facet(counts: dict[str, int]) -> str:
    return ", ".join(f"{value} ({count})" for value, count in counts.items())


def build_summary(
    query: SearchQuery, result: SearchResult, scripts: list[str], scripts_dir: str
) -> str:
    """Human readable overview of a search result."""
    if result.total_matches == 0:
        lines = [f"No methods found for '{query.resource_type}' with the given filters."]
        if query.action:
            lines.append(f"Valid actions are: {_VALID_ACTIONS}.")
        lines.append(
            "Tips: search by resource kind (e.g. 'Pod', 'Deployment'), "
            "drop the action or scope filters, or check exclusions."
        )
        return "\n".join(lines)

    first = result.offset + 1
    last = result.offset + len(result.records)
    lines = [
        f"Found {result.total_matches} method(s) matching '{query.resource_type}' "
        f"(showing {first}-{last})."
        if result.records
        else f"Found {result.total_matches} method(s) matching '{query.resource_type}' "
        f"(offset {result.offset} is past the end).",
        "",
        "Facets:",
        f"  action: {_format_facet(result.facets.action)}",
        f"  scope: {_format_facet(result.facets.scope)}",
        f"  grouping: {_format_facet(result.facets.grouping)}",
        "",
    ]

    if scripts:
        lines.append(f"Cached scripts in {scripts_dir}: {', '.join(scripts)}")
    else:
        lines.append(f"No cached scripts in {scripts_dir}.")

    if result.records:
        lines.append("")
        lines.append("Methods:")
        lines.extend(f"  {_signature(record)}" for record in result.records)

    if result.has_more:
        lines.append("")
        lines.append(
            f"More results available: call again with offset={result.offset + len(result.records)}."
        )
    return "\n".join(lines)


def _usage(scripts_dir: str, records: list[MethodRecord]) -> str:
    usage = (
        "Call a method through the kubernetes Python client as shown in its 'example'. "
        "Pass output_schema.type_name to get_type_definition to inspect the response type. "
        f"Save reusable scripts to {scripts_dir} named <action>-<scope>-<resource>.py"
    )
    if records:
        usage += f", e.g. {suggested_script_name(records[0])}"
    return usage + "."


def _response(
    query: SearchQuery,
    result: SearchResult,
    verbosity: Verbosity,
    scripts: list[str],
    scripts_dir: str,
) -> dict[str, Any]:
    return {
        "summary": build_summary(query, result, scripts, scripts_dir),
        "tools": [_render_record(record, verbosity) for record in result.records],
        "total_matches": result.total_matches,
        "pagination": {
            "offset": result.offset,
            "limit": result.limit,
            "has_more": result.has_more,
        },
        "facets": result.facets.model_dump(),
        "search_time_ms": result.search_time_ms,
        "usage": _usage(scripts_dir, result.records),
        "cached_scripts": scripts,
        "scripts_directory": scripts_dir,
    }


def _invalid_query_response(message: str, limit: int, offset: int, scripts_dir: str) -> dict[str, Any]:
    return {
        "summary": f"Invalid query: {message}",
        "tools": [],
        "total_matches": 0,
        "pagination": {"offset": max(offset, 0), "limit": limit, "has_more": False},
        "facets": {"action": {}, "scope": {}, "grouping": {}},
        "search_time_ms": 0.0,
        "usage": "Search with a resource kind such as 'Pod', optionally filtered by action and scope.",
        "cached_scripts": [],
        "scripts_directory": scripts_dir,
    }


def _parse_query(
    resource_type: str,
    action: str | None,
    scope: str,
    exclude: dict[str, list[str]] | None,
    limit: int,
    offset: int,
) -> SearchQuery:
    if not resource_type or not resource_type.strip():
        raise InvalidQueryError("resource_type must not be empty")
    try:
        return SearchQuery(
            resource_type=resource_type.strip(),
            action=action.strip().lower() if action and action.strip() else None,
            scope=scope.lower() if scope else "all",
            exclude=ExcludeCriteria.model_validate(exclude) if exclude else None,
            limit=limit,
            offset=offset,
        )
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise InvalidQueryError(errors) from e


def register_tools(mcp: FastMCP, server: DiscoveryServer) -> None:
    """Register API discovery tools with the MCP server."""

    @mcp.tool()
    async def search_kubernetes_api(
        resource_type: str,
        action: str | None = None,
        scope: str = "all",
        exclude: dict[str, list[str]] | None = None,
        limit: int | None = None,
        offset: int = 0,
        verbosity: str = "full",
    ) -> dict[str, Any]:
        """Search the Kubernetes Python client for methods operating on a resource.

        Results are ranked with exact resource type matches first and come
        with parameters, a usage example and response schema for each method.
        Typos are tolerated.

        Args:
            resource_type: Resource kind or free text, e.g. "Pod", "Deployment".
            action: Only return methods with this action: list, read, create,
                delete, patch, replace, connect, get or watch.
            scope: "namespaced", "cluster" (includes all-namespace listings) or "all".
            exclude: Methods to drop, e.g. {"actions": ["delete"], "groupings": ["CoreV1Api"]}.
                A method is dropped only when it matches both lists; an omitted
                list matches everything.
            limit: Maximum number of methods to return (default 10, max 50).
            offset: Number of methods to skip for pagination.
            verbosity: "minimal", "standard" or "full" (includes usage examples).

        Returns:
            Ranked methods with summary, facets and pagination info.
        """
        config = server.config
        page_size = limit if limit is not None else config.default_search_limit
        scripts_dir = str(config.scripts_dir)

        try:
            query = _parse_query(resource_type, action, scope, exclude, page_size, offset)
        except InvalidQueryError as e:
            return _invalid_query_response(
                str(e), min(max(page_size, 1), config.max_search_limit), offset, scripts_dir
            )

        try:
            result_filter = ResultFilter(
                server.search_index,
                window=config.search_window,
                max_limit=config.max_search_limit,
            )
            result = result_filter.apply(query)
            scripts = list_cached_scripts(config.scripts_dir)
            return _response(
                query, result, Verbosity.from_str(verbosity, Verbosity.FULL), scripts, scripts_dir
            )
        except DiscoveryError as e:
            return {
                "error": "Search failed",
                "message": str(e),
            }
        except Exception as e:
            return {
                "error": "Unexpected error",
                "message": str(e),
            }
