"""Per-100g nutrition record and daily nutrition targets."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

# Python attribute → JSON key used by model replies and catalog files
JSON_KEYS: dict[str, str] = {
    "calories": "calories",
    "protein": "protein",
    "carbohydrates": "carbohydrates",
    "fat": "fat",
    "saturated_fat": "saturatedFat",
    "omega3": "omega3",
    "omega6": "omega6",
    "sugar": "sugar",
    "fiber": "fiber",
    "sodium": "sodium",
    "vitamin_a": "vitaminA",
    "vitamin_c": "vitaminC",
    "vitamin_d": "vitaminD",
    "calcium": "calcium",
    "iron": "iron",
    "potassium": "potassium",
}

FIELD_NAMES: tuple[str, ...] = tuple(JSON_KEYS)


@dataclass(frozen=True)
class NutritionRecord:
    """Nutrient amounts per 100 g of a food (or absolute, once scaled)."""

    calories: float = 0.0       # kcal
    protein: float = 0.0        # g
    carbohydrates: float = 0.0  # g
    fat: float = 0.0            # g
    saturated_fat: float = 0.0  # g
    omega3: float = 0.0         # g
    omega6: float = 0.0         # g
    sugar: float = 0.0          # g
    fiber: float = 0.0          # g
    sodium: float = 0.0         # mg
    vitamin_a: float = 0.0      # mcg
    vitamin_c: float = 0.0      # mg
    vitamin_d: float = 0.0      # mcg
    calcium: float = 0.0        # mg
    iron: float = 0.0           # mg
    potassium: float = 0.0      # mg

    @classmethod
    def zero(cls) -> NutritionRecord:
        return cls()

    def values(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def map(self, fn) -> NutritionRecord:
        """Apply *fn* to every field and return a new record."""
        return replace(self, **{k: fn(v) for k, v in self.values().items()})

    def __add__(self, other: NutritionRecord) -> NutritionRecord:
        if not isinstance(other, NutritionRecord):
            return NotImplemented
        theirs = other.values()
        return replace(
            self, **{k: v + theirs[k] for k, v in self.values().items()}
        )

    @property
    def is_empty(self) -> bool:
        """True when every field is zero (nothing was ever filled in)."""
        return all(v == 0 for v in self.values().values())

    def to_dict(self) -> dict[str, float]:
        return {JSON_KEYS[k]: v for k, v in self.values().items()}


@dataclass(frozen=True)
class NutritionTarget:
    """Daily intake goals in the same units as ``NutritionRecord``."""

    calories: float = 2000.0
    protein: float = 50.0
    carbohydrates: float = 250.0
    fat: float = 65.0
    saturated_fat: float = 20.0
    omega3: float = 1.6
    omega6: float = 17.0
    sugar: float = 50.0
    fiber: float = 25.0
    sodium: float = 2300.0
    vitamin_a: float = 900.0
    vitamin_c: float = 90.0
    vitamin_d: float = 20.0
    calcium: float = 1000.0
    iron: float = 18.0
    potassium: float = 4700.0

    def values(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_dict(self) -> dict[str, float]:
        return {JSON_KEYS[k]: v for k, v in self.values().items()}


DEFAULT_TARGET = NutritionTarget()
