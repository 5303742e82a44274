"""Tests for the API search tool."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from kube_discovery_mcp.config import KubeDiscoveryConfig
from kube_discovery_mcp.domains.search.index import SearchIndex
from kube_discovery_mcp.domains.search.tools import register_tools
from kube_discovery_mcp.utils.errors import DiscoveryError


class TestSearchKubernetesApi:
    """Test search_kubernetes_api tool."""

    @pytest.fixture
    def scripts_dir(self, tmp_path: Path) -> Path:
        return tmp_path / "scripts"

    @pytest.fixture
    def mock_server(self, search_index: SearchIndex, scripts_dir: Path) -> MagicMock:
        """Create a mock DiscoveryServer backed by the sample index."""
        server = MagicMock()
        server.config = KubeDiscoveryConfig(scripts_dir=scripts_dir)
        server.search_index = search_index
        return server

    @pytest.fixture
    def tools(self, mock_server: MagicMock) -> dict[str, Any]:
        tools: dict[str, Any] = {}

        def capture_tool():
            def decorator(f):
                tools[f.__name__] = f
                return f

            return decorator

        mock_mcp = MagicMock()
        mock_mcp.tool = capture_tool
        register_tools(mock_mcp, mock_server)
        return tools

    def test_register_tools(self, mock_server: MagicMock) -> None:
        """Test that the search tool is registered."""
        mock_mcp = MagicMock()
        mock_mcp.tool = MagicMock(return_value=lambda f: f)

        register_tools(mock_mcp, mock_server)

        assert mock_mcp.tool.call_count == 1

    async def test_filtered_search(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](
            resource_type="Pod", action="list", scope="namespaced", limit=5
        )

        assert result["tools"][0]["method_name"] == "list_namespaced_pod"
        assert all(tool["action"] == "list" for tool in result["tools"])
        assert all(tool["scope"] == "namespaced" for tool in result["tools"])
        assert result["pagination"]["offset"] == 0
        assert result["pagination"]["limit"] == 5
        assert result["summary"].startswith(f"Found {result['total_matches']} method(s) matching 'Pod'")
        assert "CoreV1Api.list_namespaced_pod(namespace) -> V1PodList" in result["summary"]

    async def test_full_verbosity_includes_example(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=1)

        tool = result["tools"][0]
        assert tool["resource_type"] == "Pod"
        assert "example" in tool
        assert "from kubernetes import client, config" in tool["example"]
        assert tool["input_schema"]["type"] == "object"
        assert "description" in tool["output_schema"]

    async def test_minimal_verbosity(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=1, verbosity="minimal")

        assert set(result["tools"][0]) == {
            "grouping_id",
            "method_name",
            "resource_type",
            "action",
            "scope",
        }

    async def test_standard_verbosity_omits_example(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=1, verbosity="standard")

        assert "parameters" in result["tools"][0]
        assert "example" not in result["tools"][0]

    async def test_default_limit_from_config(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod")
        assert result["pagination"]["limit"] == 10

    async def test_limit_clamped(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=500)
        assert result["pagination"]["limit"] == 50

    async def test_pagination_hint(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=2)

        assert result["pagination"]["has_more"] is True
        assert "call again with offset=2" in result["summary"]

    async def test_exclude(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](
            resource_type="Pod",
            exclude={"actions": ["delete"], "groupings": ["CoreV1Api"]},
            limit=50,
        )

        assert result["tools"]
        assert not any(
            tool["action"] == "delete" and tool["grouping_id"] == "CoreV1Api" for tool in result["tools"]
        )

    async def test_facets(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=1)

        assert sum(result["facets"]["action"].values()) == result["total_matches"]
        assert "Facets:" in result["summary"]

    async def test_typo(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Deploymnt")
        assert result["tools"][0]["resource_type"] == "Deployment"

    async def test_no_results(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="zzzzqqq")

        assert result["tools"] == []
        assert result["total_matches"] == 0
        assert result["summary"].startswith("No methods found for 'zzzzqqq'")
        assert "Tips:" in result["summary"]

    async def test_unknown_action_lists_valid_actions(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", action="explode")

        assert result["total_matches"] == 0
        assert "Valid actions are: list, read, create" in result["summary"]

    @pytest.mark.parametrize("resource_type", ["", "   "])
    async def test_empty_resource_type(self, tools: dict[str, Any], resource_type: str) -> None:
        result = await tools["search_kubernetes_api"](resource_type=resource_type)

        assert result["summary"].startswith("Invalid query:")
        assert result["tools"] == []
        assert result["total_matches"] == 0

    async def test_invalid_scope(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", scope="galaxy")

        assert result["summary"].startswith("Invalid query:")
        assert "scope" in result["summary"]

    @pytest.mark.parametrize(("limit", "expected"), [(500, 50), (0, 1), (-3, 1), (7, 7)])
    async def test_invalid_query_reports_clamped_limit(
        self, tools: dict[str, Any], limit: int, expected: int
    ) -> None:
        result = await tools["search_kubernetes_api"](resource_type="", limit=limit, offset=-4)

        assert result["pagination"] == {"offset": 0, "limit": expected, "has_more": False}

    async def test_invalid_exclude(self, tools: dict[str, Any]) -> None:
        result = await tools["search_kubernetes_api"](
            resource_type="Pod", exclude={"actions": "delete"}
        )
        assert result["summary"].startswith("Invalid query:")

    async def test_cached_scripts_reported(self, tools: dict[str, Any], scripts_dir: Path) -> None:
        scripts_dir.mkdir()
        (scripts_dir / "list-namespaced-pod.py").write_text("print('hi')\n")

        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=1)

        assert result["cached_scripts"] == ["list-namespaced-pod.py"]
        assert result["scripts_directory"] == str(scripts_dir)
        assert "list-namespaced-pod.py" in result["summary"]
        assert str(scripts_dir) in result["usage"]

    async def test_no_cached_scripts(self, tools: dict[str, Any], scripts_dir: Path) -> None:
        result = await tools["search_kubernetes_api"](resource_type="Pod", limit=1)

        assert result["cached_scripts"] == []
        assert f"No cached scripts in {scripts_dir}." in result["summary"]

    async def test_index_failure(self, tools: dict[str, Any], mock_server: MagicMock) -> None:
        mock_server.search_index = MagicMock()
        mock_server.search_index.search.side_effect = DiscoveryError("index unavailable")

        result = await tools["search_kubernetes_api"](resource_type="Pod")

        assert result["error"] == "Search failed"
        assert result["message"] == "index unavailable"
