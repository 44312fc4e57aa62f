"""Tolerant normalization of generative model replies."""

from .fields import (
    ArrayOf,
    Choice,
    FieldKind,
    Flag,
    ListOf,
    Number,
    OptionalString,
    RequiredString,
    Schema,
    Strings,
    SubChoice,
)
from .parser import canonical_json, extract_json_text, parse, strip_fences
from .schemas import (
    FOOD_INFO,
    FOOD_MATCH,
    NUTRITION,
    NUTRITION_TARGETS,
    RECEIPT,
    RECEIPT_ITEM,
    RECEIPT_ITEMS,
    parse_food_info,
    parse_items,
    parse_match,
    parse_nutrition,
    parse_receipt,
    parse_targets,
)

__all__ = [
    "ArrayOf",
    "Choice",
    "FOOD_INFO",
    "FOOD_MATCH",
    "FieldKind",
    "Flag",
    "ListOf",
    "NUTRITION",
    "NUTRITION_TARGETS",
    "Number",
    "OptionalString",
    "RECEIPT",
    "RECEIPT_ITEM",
    "RECEIPT_ITEMS",
    "RequiredString",
    "Schema",
    "Strings",
    "SubChoice",
    "canonical_json",
    "extract_json_text",
    "parse",
    "parse_food_info",
    "parse_items",
    "parse_match",
    "parse_nutrition",
    "parse_receipt",
    "parse_targets",
    "strip_fences",
]
