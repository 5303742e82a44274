"""Tests for the full-text search index."""

import pytest

from kube_discovery_mcp.domains.methods.models import MethodRecord
from kube_discovery_mcp.domains.search.index import (
    SearchIndex,
    identifier_tokens,
    levenshtein_distance,
    stem,
    word_tokens,
)


class TestAnalyzers:
    """Tests for tokenizers and stemming."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("pods", "pod"),
            ("policies", "policy"),
            ("classes", "class"),
            ("status", "status"),
            ("ingress", "ingress"),
            ("pod", "pod"),
            ("its", "its"),
        ],
    )
    def test_stem(self, token: str, expected: str) -> None:
        assert stem(token) == expected

    def test_identifier_tokens(self) -> None:
        assert identifier_tokens("ConfigMap list_namespaced_pod") == ["configmap", "listnamespacedpod"]

    def test_word_tokens(self) -> None:
        assert word_tokens("listNamespacedPods") == ["list", "namespaced", "pod"]
        assert word_tokens("Core resources (Pods, Services)") == ["core", "resource", "pod", "service"]


class TestLevenshtein:
    """Tests for levenshtein_distance."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("pod", "pod", 0),
            ("deploymnt", "deployment", 1),
            ("kitten", "sitting", 3),
            ("", "abc", 3),
        ],
    )
    def test_distance(self, a: str, b: str, expected: int) -> None:
        assert levenshtein_distance(a, b) == expected

    def test_bounded_distance_stops_early(self) -> None:
        assert levenshtein_distance("abc", "xyzxyz", max_distance=1) == 2
        assert levenshtein_distance("kitten", "sitting", max_distance=1) == 2


class TestSearchIndex:
    """Tests for SearchIndex."""

    def test_duplicate_variants_not_indexed(
        self, search_index: SearchIndex, method_records: list[MethodRecord]
    ) -> None:
        assert len(search_index) == len(method_records) - 1
        assert search_index.get("CoreV1Api.list_namespaced_pod_with_http_info") is None
        assert search_index.get("CoreV1Api.list_namespaced_pod") is not None

    def test_add_rejects_repeated_record(
        self, search_index: SearchIndex, method_records: list[MethodRecord]
    ) -> None:
        assert search_index.add(method_records[0]) is False

    def test_search_finds_resource(self, search_index: SearchIndex) -> None:
        hits = search_index.search("Pod", 50)

        resources = {hit.record.resource_type for hit in hits}
        assert "Pod" in resources
        assert [hit.score for hit in hits] == sorted((hit.score for hit in hits), reverse=True)

    def test_typo_tolerance(self, search_index: SearchIndex) -> None:
        hits = search_index.search("Deploymnt", 10)

        assert hits
        assert hits[0].record.resource_type == "Deployment"

    def test_no_typo_tolerance(self, method_records: list[MethodRecord]) -> None:
        index = SearchIndex.build(method_records, tolerance=0)

        assert index.search("Deploymnt", 10) == []

    def test_prefix_match(self, search_index: SearchIndex) -> None:
        hits = search_index.search("Deploy", 10)

        assert hits
        assert all("Deployment" in hit.record.resource_type for hit in hits[:3])

    def test_limit(self, search_index: SearchIndex) -> None:
        assert len(search_index.search("pod", 3)) == 3
        assert search_index.search("pod", 0) == []

    def test_no_match(self, search_index: SearchIndex) -> None:
        assert search_index.search("zzzzqqq", 10) == []

    def test_deterministic(self, search_index: SearchIndex) -> None:
        first = [hit.record.qualified_name for hit in search_index.search("namespaced", 50)]
        second = [hit.record.qualified_name for hit in search_index.search("namespaced", 50)]
        assert first == second
