"""Loads and caches parsed type declarations."""

from __future__ import annotations

import logging
from dataclasses import replace

from kube_discovery_mcp.domains.types.models import PRIMITIVE_TYPES, TypeDescriptor
from kube_discovery_mcp.domains.types.parser import find_declaration
from kube_discovery_mcp.domains.types.sources import DeclarationSource
from kube_discovery_mcp.utils.errors import DeclarationParseError, DeclarationSourceError

logger = logging.getLogger(__name__)

RequestCache = dict[str, TypeDescriptor | None]


class TypeDescriptorStore:
    """Parses declarations from a source at most once per request.

    Callers pass a per-request cache to :meth:`load`. When sharing is enabled,
    successfully parsed descriptors are also kept for later requests.
    """

    def __init__(self, source: DeclarationSource, share_across_requests: bool = True) -> None:
        self._source = source
        self._shared: dict[str, TypeDescriptor] | None = {} if share_across_requests else None

    @property
    def source(self) -> DeclarationSource:
        return self._source

    @property
    def shared_count(self) -> int:
        return len(self._shared) if self._shared is not None else 0

    def clear(self) -> None:
        if self._shared is not None:
            self._shared.clear()

    async def load(self, type_name: str, cache: RequestCache) -> TypeDescriptor | None:
        """Return the descriptor for ``type_name``, or None when it cannot be loaded.

        Source and parse failures are logged and reported as None.
        """
        if type_name in cache:
            return cache[type_name]
        if type_name in PRIMITIVE_TYPES:
            cache[type_name] = None
            return None
        if self._shared is not None and type_name in self._shared:
            cache[type_name] = self._shared[type_name]
            return cache[type_name]

        descriptor = await self._read(type_name)
        cache[type_name] = descriptor
        if descriptor is not None and self._shared is not None:
            self._shared[type_name] = descriptor
        return descriptor

    async def _read(self, type_name: str) -> TypeDescriptor | None:
        try:
            declaration = await self._source.fetch(type_name)
        except DeclarationSourceError as e:
            logger.warning(str(e))
            return None
        if declaration is None:
            logger.debug(f"No declaration found for {type_name}")
            return None

        try:
            descriptor = find_declaration(declaration.text, type_name)
        except DeclarationParseError as e:
            logger.warning(f"Failed to parse declaration of {type_name} in {declaration.location}: {e}")
            return None
        if descriptor is None:
            logger.debug(f"{declaration.location} does not declare {type_name}")
            return None
        return replace(descriptor, location=declaration.location)
