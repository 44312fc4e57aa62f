"""Offline matching of extracted item names against the food catalog."""

from __future__ import annotations

import logging
from typing import Sequence

from .models import CatalogEntry, ExtractedReceiptItem, MatchResult

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.6


def normalize_name(name: str) -> str:
    return name.strip().lower()


def containment_score(a: str, b: str) -> float:
    """Length ratio of the shorter name to the longer, if one contains the other."""
    if not a or not b or (a not in b and b not in a):
        return 0.0
    shorter, longer = sorted((len(a), len(b)))
    return shorter / longer


class EntityResolver:
    """Resolve a candidate name to a catalog entry.

    An exact (case- and whitespace-insensitive) name match always wins with
    confidence 1.0. Otherwise the entry with the best containment score is
    accepted when the score reaches *threshold*.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        self.threshold = threshold

    def resolve(
        self, candidate: str, catalog: Sequence[CatalogEntry]
    ) -> MatchResult:
        needle = normalize_name(candidate)
        if not needle:
            return MatchResult.no_match()

        named = [(normalize_name(e.name), e) for e in catalog]
        named = [(n, e) for n, e in named if n]

        for name, entry in named:
            if name == needle:
                return MatchResult(entry.name, 1.0, False, entry=entry)

        best: CatalogEntry | None = None
        best_score = 0.0
        for name, entry in named:
            score = containment_score(needle, name)
            if score > best_score:
                best, best_score = entry, score

        if best is None or best_score < self.threshold:
            logger.debug(
                "No confident match for %r (best %.2f < %.2f)",
                candidate, best_score, self.threshold,
            )
            return MatchResult.no_match()

        return MatchResult(best.name, best_score, False, entry=best)

    def link_items(
        self,
        items: list[ExtractedReceiptItem],
        catalog: Sequence[CatalogEntry],
    ) -> int:
        """Set ``linked_entry_id`` on every item with a confident match.

        Returns the number of items linked.
        """
        linked = 0
        for item in items:
            result = self.resolve(item.name, catalog)
            if result.entry is not None:
                item.linked_entry_id = result.entry.id
                linked += 1
        return linked
