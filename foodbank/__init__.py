"""foodbank: receipt and nutrition-label ingestion."""

from .errors import (
    ExtractionFailure,
    FailureKind,
    IngestError,
    ParseCause,
    ParseFailure,
    ValidationFailure,
)
from .matching import EntityResolver
from .models import (
    CatalogEntry,
    ExtractedNutrition,
    ExtractedReceipt,
    ExtractedReceiptItem,
    LineItem,
    MatchResult,
)
from .nutrition import NutritionRecord, NutritionSummary, scale, sum_records, summarize

__all__ = [
    "CatalogEntry",
    "EntityResolver",
    "ExtractedNutrition",
    "ExtractedReceipt",
    "ExtractedReceiptItem",
    "ExtractionFailure",
    "FailureKind",
    "IngestError",
    "LineItem",
    "MatchResult",
    "NutritionRecord",
    "NutritionSummary",
    "ParseCause",
    "ParseFailure",
    "ValidationFailure",
    "scale",
    "sum_records",
    "summarize",
]
