"""Closed food category taxonomy used by receipts and catalog entries."""

from __future__ import annotations

DEFAULT_CATEGORY = "other"

# Main category → allowed subcategories, in display order.
SUBCATEGORIES: dict[str, tuple[str, ...]] = {
    "proteins": ("leanMeat", "redMeat", "seafood", "eggs", "plantProtein"),
    "vegetables": (
        "leafyGreens", "cruciferous", "starchyVegetables", "otherVegetables",
    ),
    "fruits": ("berries", "citrus", "tropicalFruits", "driedFruits"),
    "dairy": ("milkAlternatives", "yogurtFermented", "cheese", "butterCream"),
    "grains": ("wholeGrains", "refinedGrains", "breadBakery", "pastaNoodles"),
    "legumes": ("beansLentils", "soyProducts"),
    "healthyFats": ("nuts", "seeds", "oils", "nutButters"),
    "beverages": ("water", "coffeeTea", "juiceSmoothies", "softDrinks", "alcohol"),
    "treats": ("chocolateCandy", "chipsSavory", "bakedGoods", "frozenTreats"),
    "condiments": ("saucesDressings", "spicesHerbs", "sweeteners"),
    "prepared": ("frozenMeals", "cannedFoods", "readyToEat"),
    "other": ("supplements", "otherFoods"),
}

MAIN_CATEGORIES: tuple[str, ...] = tuple(SUBCATEGORIES)

_PARENT: dict[str, str] = {
    sub: main for main, subs in SUBCATEGORIES.items() for sub in subs
}

# Common food words → (main, sub) for quick classification of typed names
_NAME_HINTS: dict[str, tuple[str, str]] = {
    "chicken": ("proteins", "leanMeat"),
    "turkey": ("proteins", "leanMeat"),
    "chicken breast": ("proteins", "leanMeat"),
    "beef": ("proteins", "redMeat"),
    "pork": ("proteins", "redMeat"),
    "lamb": ("proteins", "redMeat"),
    "steak": ("proteins", "redMeat"),
    "salmon": ("proteins", "seafood"),
    "tuna": ("proteins", "seafood"),
    "cod": ("proteins", "seafood"),
    "fish": ("proteins", "seafood"),
    "shrimp": ("proteins", "seafood"),
    "egg": ("proteins", "eggs"),
    "eggs": ("proteins", "eggs"),
    "tofu": ("proteins", "plantProtein"),
    "tempeh": ("proteins", "plantProtein"),
    "spinach": ("vegetables", "leafyGreens"),
    "kale": ("vegetables", "leafyGreens"),
    "lettuce": ("vegetables", "leafyGreens"),
    "salad": ("vegetables", "leafyGreens"),
    "broccoli": ("vegetables", "cruciferous"),
    "cauliflower": ("vegetables", "cruciferous"),
    "potato": ("vegetables", "starchyVegetables"),
    "corn": ("vegetables", "starchyVegetables"),
    "peas": ("vegetables", "starchyVegetables"),
    "strawberry": ("fruits", "berries"),
    "blueberry": ("fruits", "berries"),
    "raspberry": ("fruits", "berries"),
    "orange": ("fruits", "citrus"),
    "lemon": ("fruits", "citrus"),
    "grapefruit": ("fruits", "citrus"),
    "banana": ("fruits", "tropicalFruits"),
    "mango": ("fruits", "tropicalFruits"),
    "pineapple": ("fruits", "tropicalFruits"),
    "milk": ("dairy", "milkAlternatives"),
    "oat milk": ("dairy", "milkAlternatives"),
    "almond milk": ("dairy", "milkAlternatives"),
    "yogurt": ("dairy", "yogurtFermented"),
    "greek yogurt": ("dairy", "yogurtFermented"),
    "cheese": ("dairy", "cheese"),
    "cheddar": ("dairy", "cheese"),
    "mozzarella": ("dairy", "cheese"),
    "oats": ("grains", "wholeGrains"),
    "oatmeal": ("grains", "wholeGrains"),
    "quinoa": ("grains", "wholeGrains"),
    "brown rice": ("grains", "wholeGrains"),
    "white rice": ("grains", "refinedGrains"),
    "white bread": ("grains", "refinedGrains"),
    "bread": ("grains", "breadBakery"),
    "bagel": ("grains", "breadBakery"),
    "roll": ("grains", "breadBakery"),
    "pasta": ("grains", "pastaNoodles"),
    "spaghetti": ("grains", "pastaNoodles"),
    "noodles": ("grains", "pastaNoodles"),
    "almonds": ("healthyFats", "nuts"),
    "walnuts": ("healthyFats", "nuts"),
    "cashews": ("healthyFats", "nuts"),
    "olive oil": ("healthyFats", "oils"),
    "avocado oil": ("healthyFats", "oils"),
    "peanut butter": ("healthyFats", "nutButters"),
    "almond butter": ("healthyFats", "nutButters"),
    "coffee": ("beverages", "coffeeTea"),
    "tea": ("beverages", "coffeeTea"),
    "juice": ("beverages", "juiceSmoothies"),
    "smoothie": ("beverages", "juiceSmoothies"),
    "soda": ("beverages", "softDrinks"),
    "cola": ("beverages", "softDrinks"),
}


def is_category(value: str) -> bool:
    return value in SUBCATEGORIES


def allowed_subcategories(category: str) -> tuple[str, ...]:
    return SUBCATEGORIES.get(category, ())


def category_path(category: str, subcategory: str | None = None) -> str:
    """Encode a category pair as ``main`` or ``main/sub``."""
    if subcategory:
        return f"{category}/{subcategory}"
    return category


def split_category_path(raw: str) -> tuple[str, str | None]:
    """Decode ``main/sub`` (or ``main/custom:Name``) into a category pair.

    Unknown main categories fall back to ``other``; custom subcategories are
    returned verbatim after the ``custom:`` prefix.
    """
    main, _, sub = raw.partition("/")
    if main not in SUBCATEGORIES:
        main = DEFAULT_CATEGORY
    if not sub:
        return main, None
    if sub.startswith("custom:"):
        return main, sub[len("custom:"):]
    return main, sub if sub in SUBCATEGORIES[main] else None


def guess_category(name: str) -> tuple[str, str | None]:
    """Classify a free-text food name or category label.

    Tries main category names, then subcategory names, then a table of
    common foods. Falls back to ``("other", None)``.
    """
    lowered = name.strip().lower()

    for main in SUBCATEGORIES:
        if main.lower() == lowered:
            return main, None

    for sub, main in _PARENT.items():
        if sub.lower() == lowered:
            return main, sub

    if lowered in _NAME_HINTS:
        return _NAME_HINTS[lowered]

    return DEFAULT_CATEGORY, None
