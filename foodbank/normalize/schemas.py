"""Declared shapes of every model reply the pipeline understands."""

from __future__ import annotations

from ..categories import DEFAULT_CATEGORY, MAIN_CATEGORIES, allowed_subcategories
from ..models import (
    UNKNOWN_ITEM,
    ExtractedNutrition,
    ExtractedReceipt,
    ExtractedReceiptItem,
    MatchResult,
    SuggestedFoodInfo,
    SuggestedNutritionTargets,
)
from ..nutrition.record import DEFAULT_TARGET, JSON_KEYS, NutritionRecord, NutritionTarget
from .fields import (
    ArrayOf,
    Choice,
    Flag,
    ListOf,
    Number,
    OptionalString,
    RequiredString,
    Schema,
    Strings,
    SubChoice,
)
from .parser import extract_json_text, parse


def _category_fields() -> tuple:
    return (
        Choice("category", MAIN_CATEGORIES, DEFAULT_CATEGORY),
        SubChoice("subcategory", parent="category", allowed=allowed_subcategories),
    )


RECEIPT_ITEM = Schema(
    name="receipt item",
    fields=(
        RequiredString("name", placeholder=UNKNOWN_ITEM),
        Number("quantity_grams", minimum=0.0),
        Number("price", minimum=0.0),
        *_category_fields(),
    ),
    build=lambda v: ExtractedReceiptItem(**v),
)

RECEIPT = Schema(
    name="receipt",
    fields=(
        OptionalString("store_name"),
        OptionalString("receipt_date"),
        ListOf("items", RECEIPT_ITEM),
    ),
    build=lambda v: ExtractedReceipt(**v),
)

RECEIPT_ITEMS = ArrayOf(RECEIPT_ITEM)


def _nutrient_fields(defaults: dict[str, float] | None = None) -> tuple:
    defaults = defaults or {}
    return tuple(
        Number(key, default=defaults.get(attr, 0.0), attr=attr)
        for attr, key in JSON_KEYS.items()
    )


def _build_nutrition(v: dict) -> ExtractedNutrition:
    food_name = v.pop("food_name")
    return ExtractedNutrition(food_name=food_name, nutrition=NutritionRecord(**v))


NUTRITION = Schema(
    name="nutrition",
    fields=(OptionalString("food_name"), *_nutrient_fields()),
    build=_build_nutrition,
)


def _build_match(v: dict) -> MatchResult:
    confidence = min(1.0, max(0.0, v["confidence"]))
    return MatchResult(v["food_name"], confidence, v["is_new_food"])


FOOD_MATCH = Schema(
    name="food match",
    fields=(
        OptionalString("foodName", attr="food_name"),
        Number("confidence"),
        Flag(
            "isNewFood",
            attr="is_new_food",
            fallback=lambda v: v["food_name"] is None,
        ),
    ),
    build=_build_match,
)

FOOD_INFO = Schema(
    name="food info",
    fields=(*_category_fields(), Strings("tags")),
    build=lambda v: SuggestedFoodInfo(**v),
)


def _build_targets(v: dict) -> SuggestedNutritionTargets:
    explanation = v.pop("explanation") or ""
    return SuggestedNutritionTargets(NutritionTarget(**v), explanation)


NUTRITION_TARGETS = Schema(
    name="nutrition targets",
    fields=(
        *_nutrient_fields(DEFAULT_TARGET.values()),
        OptionalString("explanation"),
    ),
    build=_build_targets,
)


def parse_receipt(raw_text: str) -> ExtractedReceipt:
    """Parse a receipt reply that may be an object or a bare item array."""
    if extract_json_text(raw_text).startswith("["):
        return ExtractedReceipt(items=parse(raw_text, RECEIPT_ITEMS))
    return parse(raw_text, RECEIPT)


def parse_items(raw_text: str) -> list[ExtractedReceiptItem]:
    """Parse a meal/item list reply that may be a bare array or a receipt."""
    return parse_receipt(raw_text).items


def parse_nutrition(raw_text: str) -> ExtractedNutrition:
    return parse(raw_text, NUTRITION)


def parse_match(raw_text: str) -> MatchResult:
    return parse(raw_text, FOOD_MATCH)


def parse_food_info(raw_text: str) -> SuggestedFoodInfo:
    return parse(raw_text, FOOD_INFO)


def parse_targets(raw_text: str) -> SuggestedNutritionTargets:
    return parse(raw_text, NUTRITION_TARGETS)
