"""Pydantic models for method search."""

from enum import Enum

from pydantic import BaseModel, Field

from kube_discovery_mcp.domains.methods.models import MethodRecord


class ScopeFilter(str, Enum):
    """Scope restriction applied to search results."""

    NAMESPACED = "namespaced"
    CLUSTER = "cluster"
    ALL = "all"


class ExcludeCriteria(BaseModel):
    """Records to drop from search results.

    A record is dropped only when it matches a listed action and a listed
    grouping; an empty list matches everything.
    """

    actions: list[str] = Field(default_factory=list, description="Actions to exclude")
    groupings: list[str] = Field(default_factory=list, description="API groupings to exclude")

    @property
    def is_empty(self) -> bool:
        return not self.actions and not self.groupings


class SearchQuery(BaseModel):
    """A discovery query."""

    resource_type: str = Field(..., description="Resource name or free text to search for")
    action: str | None = Field(None, description="Only return methods with this action")
    scope: ScopeFilter = Field(ScopeFilter.ALL, description="Scope restriction")
    exclude: ExcludeCriteria | None = Field(None, description="Records to drop")
    limit: int = Field(10, description="Page size")
    offset: int = Field(0, description="Number of results to skip")


class Facets(BaseModel):
    """Value counts over the filtered result set."""

    action: dict[str, int] = Field(default_factory=dict)
    scope: dict[str, int] = Field(default_factory=dict)
    grouping: dict[str, int] = Field(default_factory=dict)


class SearchResult(BaseModel):
    """One page of ranked, filtered search results."""

    records: list[MethodRecord] = Field(default_factory=list)
    total_matches: int = Field(0, description="Matches after filtering, before pagination")
    offset: int = Field(0)
    limit: int = Field(10)
    has_more: bool = Field(False)
    facets: Facets = Field(default_factory=Facets)
    search_time_ms: float = Field(0.0)
