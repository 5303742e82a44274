"""Tests for lazily built shared values."""

import threading
import time

from kube_discovery_mcp.utils.lazy import Lazy


class TestLazy:
    """Tests for Lazy."""

    def test_builds_once(self) -> None:
        calls = []

        def factory() -> list[str]:
            calls.append(1)
            return ["value"]

        lazy = Lazy(factory, "test value")

        assert not lazy.is_initialized
        first = lazy.get()
        second = lazy.get()

        assert first is second
        assert lazy.is_initialized
        assert len(calls) == 1
        assert lazy.name == "test value"

    def test_concurrent_first_access(self) -> None:
        calls = []

        def slow_factory() -> object:
            calls.append(1)
            time.sleep(0.05)
            return object()

        lazy = Lazy(slow_factory, "slow")
        results: list[object] = []
        threads = [threading.Thread(target=lambda: results.append(lazy.get())) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)
