"""Nutrition records, targets and aggregation."""

from .aggregator import NutritionSummary, scale, sum_records, summarize
from .record import (
    DEFAULT_TARGET,
    FIELD_NAMES,
    JSON_KEYS,
    NutritionRecord,
    NutritionTarget,
)

__all__ = [
    "DEFAULT_TARGET",
    "FIELD_NAMES",
    "JSON_KEYS",
    "NutritionRecord",
    "NutritionSummary",
    "NutritionTarget",
    "scale",
    "sum_records",
    "summarize",
]
