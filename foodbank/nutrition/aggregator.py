"""Scaling and aggregation of per-100g nutrition over line items."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Iterable

from .record import FIELD_NAMES, NutritionRecord, NutritionTarget

if TYPE_CHECKING:
    from ..models import LineItem

logger = logging.getLogger(__name__)


def scale(record: NutritionRecord, grams: float) -> NutritionRecord:
    """Scale a per-100g record to the amount actually eaten or bought."""
    ratio = grams / 100.0
    return record.map(lambda v: v * ratio)


def sum_records(records: Iterable[NutritionRecord]) -> NutritionRecord:
    total = NutritionRecord.zero()
    for record in records:
        total = total + record
    return total


@dataclass
class NutritionSummary:
    totals: NutritionRecord = field(default_factory=NutritionRecord)
    day_count: int = 0
    item_count: int = 0

    @property
    def daily_average(self) -> NutritionRecord:
        if self.day_count == 0:
            return NutritionRecord.zero()
        days = self.day_count
        return self.totals.map(lambda v: v / days)

    def progress(self, target: NutritionTarget) -> dict[str, float]:
        """Daily average as a fraction of *target*, per nutrient.

        Nutrients whose target is 0 report 0.
        """
        average = self.daily_average.values()
        goals = target.values()
        return {
            name: (average[name] / goals[name]) if goals[name] else 0.0
            for name in FIELD_NAMES
        }


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _span_days(start: date, end: date) -> int:
    return max(1, (end - start).days + 1)


def summarize(
    items: Iterable[LineItem],
    date_range: tuple[date | datetime, date | datetime] | None = None,
    exclude_flagged: bool = True,
) -> NutritionSummary:
    """Total up nutrition for the given line items.

    Skipped items are always dropped. Items linked to an excluded catalog
    entry are dropped while *exclude_flagged* is set. With a *date_range*
    (inclusive on both ends) items outside it are dropped and the day count
    is the range's span; otherwise it is the span between the earliest and
    latest remaining item.
    """
    start = end = None
    if date_range is not None:
        start, end = (_as_date(d) for d in date_range)

    kept: list[LineItem] = []
    for item in items:
        if item.is_skipped:
            continue
        if exclude_flagged and item.entry is not None and item.entry.is_excluded:
            continue
        if start is not None:
            day = _as_date(item.timestamp)
            if day < start or day > end:
                continue
        kept.append(item)

    scaled = [
        scale(item.entry.nutrition, item.quantity_grams)
        for item in kept
        if item.entry is not None and item.entry.nutrition is not None
    ]
    totals = sum_records(scaled)

    if start is not None:
        day_count = _span_days(start, end)
    elif kept:
        days = [_as_date(item.timestamp) for item in kept]
        day_count = _span_days(min(days), max(days))
    else:
        day_count = 0

    logger.debug(
        "Summarized %d items over %d day(s), %d with nutrition",
        len(kept), day_count, len(scaled),
    )
    return NutritionSummary(totals=totals, day_count=day_count, item_count=len(kept))
