"""Process-wide values built once on first use."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Lazy(Generic[T]):
    """A value built by ``factory`` on first access.

    Concurrent first callers share a single construction; later callers
    read the stored value without taking the lock.
    """

    def __init__(self, factory: Callable[[], T], name: str) -> None:
        self._factory = factory
        self._name = name
        self._value: T | None = None
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def get(self) -> T:
        """Return the value, building it on first call."""
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    logger.debug(f"Initializing {self._name}")
                    self._value = self._factory()
                    self._initialized = True
        return self._value  # type: ignore[return-value]
