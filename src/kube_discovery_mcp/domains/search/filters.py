"""Post-search filtering, ordering, faceting and pagination."""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Iterable

from kube_discovery_mcp.domains.methods.models import MethodRecord, Scope
from kube_discovery_mcp.domains.search.index import SearchHit, SearchIndex
from kube_discovery_mcp.domains.search.models import (
    ExcludeCriteria,
    Facets,
    ScopeFilter,
    SearchQuery,
    SearchResult,
)
from kube_discovery_mcp.utils.response import paginate

logger = logging.getLogger(__name__)

_SCOPES_FOR_FILTER: dict[ScopeFilter, frozenset[Scope]] = {
    ScopeFilter.NAMESPACED: frozenset({Scope.NAMESPACED}),
    ScopeFilter.CLUSTER: frozenset({Scope.CLUSTER, Scope.FOR_ALL_NAMESPACES}),
    ScopeFilter.ALL: frozenset(Scope),
}


def is_excluded(record: MethodRecord, exclude: ExcludeCriteria | None) -> bool:
    """Whether exclusion criteria drop a record.

    Both dimensions must match; an empty dimension matches everything.
    """
    if exclude is None or exclude.is_empty:
        return False
    actions = {action.lower() for action in exclude.actions}
    groupings = {grouping.lower() for grouping in exclude.groupings}
    action_hit = not actions or record.action.value in actions
    grouping_hit = not groupings or record.grouping_id.lower() in groupings
    return action_hit and grouping_hit


def _count(values: Iterable[str]) -> dict[str, int]:
    counts = Counter(values)
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def build_facets(records: list[MethodRecord]) -> Facets:
    return Facets(
        action=_count(record.action.value for record in records),
        scope=_count(record.scope.value for record in records),
        grouping=_count(record.grouping_id for record in records),
    )


class ResultFilter:
    """Applies action, scope and exclusion filters to ranked hits.

    The index is queried with a fixed candidate window that does not depend
    on the requested page, so every page of a query is cut from the same
    ordered result list.
    """

    def __init__(self, index: SearchIndex, window: int = 250, max_limit: int = 50) -> None:
        self._index = index
        self._window = window
        self._max_limit = max_limit

    @property
    def window(self) -> int:
        return self._window

    def _keep(self, record: MethodRecord, query: SearchQuery) -> bool:
        if query.action and record.action.value != query.action.lower():
            return False
        if record.scope not in _SCOPES_FOR_FILTER[query.scope]:
            return False
        return not is_excluded(record, query.exclude)

    def apply(self, query: SearchQuery) -> SearchResult:
        """Run a query and return one page of results."""
        started = time.perf_counter()
        limit = min(max(query.limit, 1), self._max_limit)
        offset = max(query.offset, 0)

        hits: list[SearchHit] = self._index.search(query.resource_type, self._window)
        kept = [hit for hit in hits if self._keep(hit.record, query)]

        # Exact resource type matches first; the sort is stable so score order holds within each tier.
        wanted = query.resource_type.strip().lower()
        kept.sort(key=lambda hit: hit.record.resource_type.lower() != wanted)

        records = [hit.record for hit in kept]
        page, total = paginate(records, offset, limit)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.debug(
            f"Search '{query.resource_type}' matched {len(hits)} candidates, "
            f"{total} after filters, returning {len(page)}"
        )
        return SearchResult(
            records=page,
            total_matches=total,
            offset=offset,
            limit=limit,
            has_more=offset + len(page) < total,
            facets=build_facets(records),
            search_time_ms=round(elapsed_ms, 3),
        )
