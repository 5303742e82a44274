"""Boosted, typo-tolerant full-text index over method records.

Each record becomes one document with four searchable fields. Fields are
scored independently with BM25 and combined using per-field boosts, so a
hit on the resource type outweighs a hit buried in a description.

Query terms match indexed tokens exactly, as a prefix, or within a small
edit distance, with decreasing weight.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from kube_discovery_mcp.domains.methods.models import MethodRecord
from kube_discovery_mcp.domains.methods.naming import (
    compact_identifier,
    is_duplicate_variant,
    split_identifier,
)

logger = logging.getLogger(__name__)

FIELD_BOOSTS: dict[str, float] = {
    "resource_type": 3.0,
    "search_tokens": 2.5,
    "method_name": 2.0,
    "description": 1.0,
}

EXACT_WEIGHT = 1.0
PREFIX_WEIGHT = 0.8
FUZZY_WEIGHT = 0.6

MIN_PREFIX_LENGTH = 2
MIN_FUZZY_LENGTH = 3


def stem(token: str) -> str:
    """Reduce simple English plurals, e.g. ``pods`` to ``pod``."""
    if len(token) <= 3:
        return token
    if token.endswith("ies"):
        return token[:-3] + "y"
    if token.endswith("sses"):
        return token[:-2]
    if token.endswith("s") and not token.endswith(("ss", "us")):
        return token[:-1]
    return token


def identifier_tokens(text: str) -> list[str]:
    """Analyze an identifier field: one lowercase token per whitespace chunk.

    Identifiers are not stemmed; ``Pods`` and ``Pod`` are different resources.
    """
    return [token for token in (compact_identifier(chunk) for chunk in text.split()) if token]


def word_tokens(text: str) -> list[str]:
    """Analyze a text field: split camel/snake case words, lowercase and stem."""
    return [stem(word.lower()) for word in split_identifier(text)]


def levenshtein_distance(a: str, b: str, max_distance: int | None = None) -> int:
    """Edit distance between two strings.

    When ``max_distance`` is given, returns ``max_distance + 1`` as soon as
    the distance is known to exceed it.
    """
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if max_distance is not None and len(a) - len(b) > max_distance:
        return max_distance + 1

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        if max_distance is not None and min(current) > max_distance:
            return max_distance + 1
        previous = current
    return previous[-1]


@dataclass(frozen=True)
class SearchHit:
    """A ranked search result."""

    record: MethodRecord
    score: float
    position: int


class _FieldIndex:
    """Inverted index and BM25 statistics for one field."""

    def __init__(self, analyzer: Callable[[str], list[str]], k1: float, b: float) -> None:
        self.analyzer = analyzer
        self._k1 = k1
        self._b = b
        self._postings: dict[str, dict[int, int]] = defaultdict(dict)
        self._lengths: list[int] = []
        self._total_length = 0

    @property
    def vocabulary(self) -> Iterable[str]:
        return self._postings.keys()

    def add(self, doc_id: int, text: str) -> None:
        tokens = self.analyzer(text)
        for token in tokens:
            postings = self._postings[token]
            postings[doc_id] = postings.get(doc_id, 0) + 1
        self._lengths.append(len(tokens))
        self._total_length += len(tokens)

    def score_token(self, token: str, weight: float, scores: dict[int, float], boost: float) -> None:
        postings = self._postings.get(token)
        if not postings:
            return
        doc_count = len(self._lengths)
        avg_length = self._total_length / doc_count if doc_count else 0.0
        df = len(postings)
        idf = math.log(1 + (doc_count - df + 0.5) / (df + 0.5))
        for doc_id, tf in postings.items():
            length_norm = 1 - self._b + self._b * (self._lengths[doc_id] / avg_length if avg_length else 0.0)
            tf_part = tf * (self._k1 + 1) / (tf + self._k1 * length_norm)
            scores[doc_id] = scores.get(doc_id, 0.0) + boost * weight * idf * tf_part


class SearchIndex:
    """Full-text index over method records.

    Build once with :meth:`build`; the index is read-only afterwards.
    """

    def __init__(self, tolerance: int = 1, k1: float = 1.2, b: float = 0.75) -> None:
        self._tolerance = tolerance
        self._records: list[MethodRecord] = []
        self._by_name: dict[str, MethodRecord] = {}
        self._fields: dict[str, _FieldIndex] = {
            "resource_type": _FieldIndex(identifier_tokens, k1, b),
            "method_name": _FieldIndex(identifier_tokens, k1, b),
            "search_tokens": _FieldIndex(word_tokens, k1, b),
            "description": _FieldIndex(word_tokens, k1, b),
        }

    @classmethod
    def build(cls, records: Iterable[MethodRecord], tolerance: int = 1) -> SearchIndex:
        index = cls(tolerance=tolerance)
        skipped = 0
        for record in records:
            if not index.add(record):
                skipped += 1
        logger.info(f"Indexed {len(index)} methods ({skipped} duplicate variants skipped)")
        return index

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[MethodRecord]:
        return list(self._records)

    def get(self, qualified_name: str) -> MethodRecord | None:
        """Look up a record by ``Grouping.method_name``."""
        return self._by_name.get(qualified_name)

    def add(self, record: MethodRecord) -> bool:
        """Index a record. Returns False for duplicate variants, which are not indexed."""
        if is_duplicate_variant(record.method_name):
            return False
        if record.qualified_name in self._by_name:
            return False

        doc_id = len(self._records)
        self._records.append(record)
        self._by_name[record.qualified_name] = record

        search_tokens = " ".join(
            [record.resource_type, record.method_name, record.grouping_id]
        )
        self._fields["resource_type"].add(doc_id, record.resource_type)
        self._fields["method_name"].add(doc_id, record.method_name)
        self._fields["search_tokens"].add(doc_id, search_tokens)
        self._fields["description"].add(doc_id, record.description)
        return True

    def _match_tokens(self, field: _FieldIndex, term: str) -> dict[str, float]:
        matches: dict[str, float] = {}
        for token in field.vocabulary:
            if token == term:
                matches[token] = EXACT_WEIGHT
            elif len(term) >= MIN_PREFIX_LENGTH and token.startswith(term):
                matches[token] = PREFIX_WEIGHT
            elif (
                self._tolerance
                and len(term) >= MIN_FUZZY_LENGTH
                and levenshtein_distance(term, token, self._tolerance) <= self._tolerance
            ):
                matches[token] = FUZZY_WEIGHT
        return matches

    def search(self, text: str, limit: int) -> list[SearchHit]:
        """Rank records against free text.

        Returns at most ``limit`` hits, best first. Equal scores keep
        index order, so identical queries always rank identically.
        """
        scores: dict[int, float] = {}
        for field_name, field in self._fields.items():
            boost = FIELD_BOOSTS[field_name]
            for term in dict.fromkeys(field.analyzer(text)):
                for token, weight in self._match_tokens(field, term).items():
                    field.score_token(token, weight, scores, boost)

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return [
            SearchHit(record=self._records[doc_id], score=score, position=doc_id)
            for doc_id, score in ranked[: max(limit, 0)]
        ]
