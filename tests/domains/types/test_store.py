"""Tests for the type descriptor store."""

import logging
from pathlib import Path

import pytest

from kube_discovery_mcp.domains.types.sources import Declaration, DirectoryDeclarationSource
from kube_discovery_mcp.domains.types.store import RequestCache, TypeDescriptorStore
from kube_discovery_mcp.utils.errors import DeclarationSourceError


class CountingSource:
    """Wraps a source and counts fetches per type."""

    def __init__(self, inner: DirectoryDeclarationSource) -> None:
        self.inner = inner
        self.calls: dict[str, int] = {}

    async def fetch(self, type_name: str) -> Declaration | None:
        self.calls[type_name] = self.calls.get(type_name, 0) + 1
        return await self.inner.fetch(type_name)

    def is_available(self) -> tuple[bool, str]:
        return self.inner.is_available()


class FailingSource:
    async def fetch(self, type_name: str) -> Declaration | None:
        raise DeclarationSourceError(type_name, "disk on fire")

    def is_available(self) -> tuple[bool, str]:
        return False, "always fails"


@pytest.fixture
def counting_source(declarations_dir: Path) -> CountingSource:
    return CountingSource(DirectoryDeclarationSource(declarations_dir))


class TestTypeDescriptorStore:
    """Tests for TypeDescriptorStore.load."""

    async def test_load(self, counting_source: CountingSource, declarations_dir: Path) -> None:
        store = TypeDescriptorStore(counting_source)

        descriptor = await store.load("V1DeploymentSpec", {})

        assert descriptor is not None
        assert descriptor.name == "V1DeploymentSpec"
        assert descriptor.location == str(declarations_dir / "V1DeploymentSpec.d.ts")

    async def test_request_cache_reused(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source, share_across_requests=False)
        cache: RequestCache = {}

        first = await store.load("V1Deployment", cache)
        second = await store.load("V1Deployment", cache)

        assert first is second
        assert counting_source.calls["V1Deployment"] == 1

    async def test_misses_are_cached_per_request(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source)
        cache: RequestCache = {}

        assert await store.load("NoSuchType", cache) is None
        assert await store.load("NoSuchType", cache) is None
        assert counting_source.calls["NoSuchType"] == 1

        # Misses are not shared with later requests.
        assert await store.load("NoSuchType", {}) is None
        assert counting_source.calls["NoSuchType"] == 2

    async def test_shared_across_requests(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source)

        await store.load("V1Container", {})
        await store.load("V1Container", {})

        assert counting_source.calls["V1Container"] == 1
        assert store.shared_count == 1

        store.clear()
        assert store.shared_count == 0

    async def test_sharing_disabled(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source, share_across_requests=False)

        await store.load("V1Container", {})
        await store.load("V1Container", {})

        assert counting_source.calls["V1Container"] == 2
        assert store.shared_count == 0

    async def test_primitives_not_fetched(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source)

        assert await store.load("string", {}) is None
        assert await store.load("Date", {}) is None
        assert counting_source.calls == {}

    async def test_unparseable_declaration(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source)
        assert await store.load("Broken", {}) is None

    async def test_file_declares_other_type(self, counting_source: CountingSource) -> None:
        store = TypeDescriptorStore(counting_source)
        assert await store.load("Mislabeled", {}) is None

    async def test_source_error_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        store = TypeDescriptorStore(FailingSource())

        with caplog.at_level(logging.WARNING):
            assert await store.load("V1Pod", {}) is None

        assert "disk on fire" in caplog.text
