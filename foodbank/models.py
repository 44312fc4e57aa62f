"""Data types produced and consumed by the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .categories import DEFAULT_CATEGORY
from .nutrition.record import DEFAULT_TARGET, NutritionRecord, NutritionTarget

UNKNOWN_ITEM = "Unknown Item"
SCANNED_FOOD = "Scanned Food"

_RECEIPT_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%Y/%m/%d",
)


@dataclass
class ExtractedReceiptItem:
    name: str = UNKNOWN_ITEM
    quantity_grams: float = 0.0
    price: float = 0.0
    category: str = DEFAULT_CATEGORY
    subcategory: str | None = None
    # Set by entity resolution; never read from model output.
    linked_entry_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "quantity_grams": self.quantity_grams,
            "price": self.price,
            "category": self.category,
            "subcategory": self.subcategory,
        }


@dataclass
class ExtractedReceipt:
    store_name: str | None = None
    receipt_date: str | None = None
    items: list[ExtractedReceiptItem] = field(default_factory=list)

    @property
    def parsed_date(self) -> date | None:
        """The receipt date as a ``date``, trying common printed formats."""
        if not self.receipt_date:
            return None
        for fmt in _RECEIPT_DATE_FORMATS:
            try:
                return datetime.strptime(self.receipt_date.strip(), fmt).date()
            except ValueError:
                continue
        return None

    def to_dict(self) -> dict:
        return {
            "store_name": self.store_name,
            "receipt_date": self.receipt_date,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class ExtractedNutrition:
    food_name: str | None = None
    nutrition: NutritionRecord = field(default_factory=NutritionRecord)

    @property
    def display_name(self) -> str:
        return self.food_name or SCANNED_FOOD

    def to_dict(self) -> dict:
        return {"food_name": self.food_name, **self.nutrition.to_dict()}


@dataclass(frozen=True)
class CatalogEntry:
    """A known food, as seen by one snapshot of the catalog."""

    id: str
    name: str
    nutrition: NutritionRecord | None = None
    category: str = DEFAULT_CATEGORY
    is_excluded: bool = False


@dataclass
class MatchResult:
    food_name: str | None = None
    confidence: float = 0.0
    is_new_food: bool = True
    entry: CatalogEntry | None = field(default=None, compare=False, repr=False)

    @property
    def is_match(self) -> bool:
        return self.food_name is not None

    @classmethod
    def no_match(cls) -> MatchResult:
        return cls(None, 0.0, True)

    def to_dict(self) -> dict:
        return {
            "foodName": self.food_name,
            "confidence": self.confidence,
            "isNewFood": self.is_new_food,
        }


@dataclass
class LineItem:
    """One grocery-trip or meal line, as fed to the aggregator."""

    name: str
    quantity_grams: float
    timestamp: date | datetime
    entry: CatalogEntry | None = None
    is_skipped: bool = False


@dataclass
class SuggestedFoodInfo:
    category: str = DEFAULT_CATEGORY
    subcategory: str | None = None
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "tags": list(self.tags),
        }


@dataclass
class SuggestedNutritionTargets:
    target: NutritionTarget = DEFAULT_TARGET
    explanation: str = ""

    def to_dict(self) -> dict:
        return {**self.target.to_dict(), "explanation": self.explanation}


class ActivityLevel(str, Enum):
    SEDENTARY = "Sedentary"
    LIGHT = "Lightly Active"
    MODERATE = "Moderately Active"
    ACTIVE = "Active"
    VERY_ACTIVE = "Very Active"

    @property
    def multiplier(self) -> float:
        return _ACTIVITY_MULTIPLIERS[self]


_ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}


class DietType(str, Enum):
    STANDARD = "Standard"
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    KETO = "Keto/Low-Carb"
    MEDITERRANEAN = "Mediterranean"
    HIGH_PROTEIN = "High Protein"
    LOW_SODIUM = "Low Sodium"


@dataclass
class HouseholdMember:
    name: str = ""
    age: int = 30
    weight: float = 70.0  # kg
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    diet: DietType = DietType.STANDARD

    @property
    def estimated_calories(self) -> int:
        # Mifflin-St Jeor averaged over sexes, assuming 170 cm
        bmr = 10 * self.weight + 6.25 * 170 - 5 * self.age + 5
        return int(bmr * self.activity_level.multiplier)

    def describe(self) -> str:
        label = self.name or "Member"
        return (
            f"{label}: {self.age} years, {self.weight:g} kg, "
            f"{self.activity_level.value}, {self.diet.value} diet "
            f"(~{self.estimated_calories} kcal/day)"
        )
