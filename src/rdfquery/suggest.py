"""Suggest predicates for a resource from predicate co-occurrence.

The engine reads two statistics from a :class:`~rdfquery.store.LocalStore`:

* **occurrence** – distinct subjects per predicate, keeping only
  predicates used by more than one subject
* **co-occurrence** – distinct subjects sharing a pair of predicates

A candidate must co-occur with *every* qualifying predicate of the
resource.  Its score is the product of ``cooccurrence(candidate, p) /
occurrence(p)`` over those predicates, a rough joint likelihood.

Example:
    >>> engine = SuggestionEngine(store)
    >>> for predicate, score in sorted(engine.suggest(resource), key=lambda s: -s.score):
    ...     print(predicate, score)
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Iterable, List, NamedTuple, Optional, Set, Tuple

from rdfquery.store import LocalStore
from rdfquery.terms import URIResource

logger = logging.getLogger(__name__)

__all__ = [
    "MIN_SUPPORT",
    "Suggestion",
    "SuggestionEngine",
]

MIN_SUPPORT = 2


class Suggestion(NamedTuple):
    predicate: URIResource
    score: float


class SuggestionEngine:
    """Predicate recommendations over a store's statistics views.

    Statistics are cached and rebuilt whenever the store's ``revision``
    moves on, so writes between two calls are always taken into account.
    """

    def __init__(self, store: LocalStore, min_support: int = MIN_SUPPORT) -> None:
        self.store = store
        self.min_support = min_support
        self._occurrence: Dict[URIResource, int] = {}
        self._cooccurrence: Dict[URIResource, Dict[URIResource, int]] = {}
        self._revision: Optional[int] = None

    def invalidate(self) -> None:
        """Force the statistics to be rebuilt on next use."""
        self._revision = None

    def _refresh(self) -> None:
        if self._revision == self.store.revision:
            return
        revision = self.store.revision
        self._occurrence = dict(self.store.occurrence_rows(self.min_support))
        cooccurrence: Dict[URIResource, Dict[URIResource, int]] = {}
        for p1, p2, count in self.store.cooccurrence_rows():
            cooccurrence.setdefault(p1, {})[p2] = count
        self._cooccurrence = cooccurrence
        self._revision = revision

    # -- statistics -----------------------------------------------------

    def occurrence_stats(self) -> Dict[URIResource, int]:
        self._refresh()
        return dict(self._occurrence)

    def cooccurrence_stats(self) -> Dict[Tuple[URIResource, URIResource], int]:
        self._refresh()
        return {
            (p1, p2): count
            for p1, row in self._cooccurrence.items()
            for p2, count in row.items()
        }

    def occurrence(self, predicate: URIResource) -> int:
        self._refresh()
        return self._occurrence.get(predicate, 0)

    def cooccurrence(self, p1: URIResource, p2: URIResource) -> int:
        self._refresh()
        return self._cooccurrence.get(p1, {}).get(p2, 0)

    def cooccurring(self, predicate: URIResource) -> Set[URIResource]:
        self._refresh()
        return set(self._cooccurrence.get(predicate, {}))

    # -- suggestions ----------------------------------------------------

    def suggest(self, resource: URIResource) -> List[Suggestion]:
        """Return ``(predicate, score)`` suggestions for *resource*, unordered."""
        started = time.monotonic()
        suggestions = self.suggest_for(self.store.direct_predicates(resource))
        logger.debug(
            "suggestions for %s took %.3fs (%d candidates)",
            resource, time.monotonic() - started, len(suggestions),
        )
        return suggestions

    def suggest_for(self, own_predicates: Iterable[URIResource]) -> List[Suggestion]:
        """Score candidate predicates for a resource using *own_predicates*."""
        self._refresh()
        own_predicates = set(own_predicates)
        qualifying = [p for p in own_predicates if p in self._occurrence]
        if not qualifying:
            return []

        candidates = set.intersection(*(self.cooccurring(p) for p in qualifying))
        candidates -= own_predicates

        suggestions = []
        for candidate in candidates:
            score = 1.0
            for p in qualifying:
                score *= self.cooccurrence(candidate, p) / self.occurrence(p)
            suggestions.append(Suggestion(candidate, score))
        return suggestions
