"""Prompt text for every task sent to the generation transport.

All prompts ask for bare JSON and end with the same output rules block.
"""

from __future__ import annotations

from .categories import MAIN_CATEGORIES, SUBCATEGORIES
from .models import HouseholdMember
from .nutrition.record import JSON_KEYS

STRICT_OUTPUT_RULES = """
CRITICAL OUTPUT REQUIREMENTS:
- Output ONLY the JSON object/array, nothing else
- Do NOT wrap in markdown code blocks (no ```)
- Do NOT include any text before or after the JSON
- Do NOT include comments or explanations
- Do NOT say "Here is" or any introduction
- Ensure valid JSON syntax (proper quotes, commas, brackets)
- Use null for missing values, not "null" string
- Use numbers without quotes for numeric fields
- Start response with { or [ and end with } or ]
"""

_FOOD_ONLY_RULE = """ONLY extract actual food/grocery items. IGNORE and DO NOT include:
- Bags, shopping bags, carrier bags
- Taxes, VAT, service charges
- Discounts, coupons, promotions, savings
- Deposits, bottle deposits, container fees
- Subtotals, totals, change, payment info
- Loyalty points, rewards, membership
- Non-food items (cleaning supplies, toiletries, etc.)"""

_BABY_FOOD_RULE = "- Baby food, infant formula and baby snacks"

_CATEGORY_LIST = "/".join(MAIN_CATEGORIES)

_SUBCATEGORY_LIST = "\n".join(
    f"  - {main}: {', '.join(subs)}" for main, subs in SUBCATEGORIES.items()
)

_RECEIPT_STRUCTURE = (
    '{"store_name":"Store Name","receipt_date":"YYYY-MM-DD","items":'
    '[{"name":"Food name in English","quantity_grams":1000,"price":2.99,'
    '"category":"vegetables","subcategory":"leafyGreens"}]}'
)

_ITEM_FIELD_RULES = f"""- name: translate to English if needed
- quantity_grams: convert all units to grams (1kg=1000, 500ml=500, estimate pieces)
- price: number without currency symbol
- category: one of {_CATEGORY_LIST}
- subcategory: one of the values listed for the chosen category, or null
{_SUBCATEGORY_LIST}"""

_NUTRITION_STRUCTURE = (
    "{" + ",".join(f'"{key}":0' for key in JSON_KEYS.values()) + "}"
)

_NUTRITION_UNITS = """- calories: kcal per 100g
- protein/carbohydrates/fat/saturatedFat/omega3/omega6/sugar/fiber: grams per 100g
- sodium/vitaminC/calcium/iron/potassium: mg per 100g
- vitaminA/vitaminD: mcg per 100g"""


def _food_only(filter_baby_food: bool) -> str:
    if filter_baby_food:
        return f"{_FOOD_ONLY_RULE}\n{_BABY_FOOD_RULE}"
    return _FOOD_ONLY_RULE


def receipt_image_prompt(filter_baby_food: bool = False) -> str:
    return f"""Extract store name, receipt date and ONLY food items from this grocery receipt image.

{_food_only(filter_baby_food)}

Required JSON structure:
{_RECEIPT_STRUCTURE}

Field rules:
- store_name: string or null if not visible
- receipt_date: date printed on the receipt, or null
{_ITEM_FIELD_RULES}
{STRICT_OUTPUT_RULES}"""


def receipt_text_prompt(text: str, filter_baby_food: bool = False) -> str:
    return f"""Extract store name, receipt date and ONLY food items from this receipt text.

{_food_only(filter_baby_food)}

Receipt text:
{text}

Required JSON structure:
{_RECEIPT_STRUCTURE}

Field rules:
- store_name: string or null if not found
- receipt_date: date printed on the receipt, or null
{_ITEM_FIELD_RULES}
{STRICT_OUTPUT_RULES}"""


def meal_image_prompt() -> str:
    return f"""List every food in this photo of a meal with its estimated weight.

Required JSON structure:
[{{"name":"Food name in English","quantity_grams":150,"price":0,"category":"grains","subcategory":null}}]

Field rules:
{_ITEM_FIELD_RULES}
- price: always 0
{STRICT_OUTPUT_RULES}"""


def meal_text_prompt(text: str) -> str:
    return f"""List every food mentioned in this meal description with its estimated weight.

Meal description:
{text}

Required JSON structure:
[{{"name":"Food name in English","quantity_grams":150,"price":0,"category":"grains","subcategory":null}}]

Field rules:
{_ITEM_FIELD_RULES}
- price: always 0
{STRICT_OUTPUT_RULES}"""


def nutrition_label_image_prompt() -> str:
    return f"""Extract nutrition values from this nutrition label image. Convert to per 100g.

Required JSON structure:
{{"food_name":"Product name or null",{_NUTRITION_STRUCTURE[1:]}

Field rules:
{_NUTRITION_UNITS}
- Use 0 for missing values, estimate if possible
{STRICT_OUTPUT_RULES}"""


def nutrition_label_text_prompt(text: str) -> str:
    return f"""Extract nutrition values from this text. Convert to per 100g.

Nutrition label text:
{text}

Required JSON structure:
{{"food_name":"Product name or null",{_NUTRITION_STRUCTURE[1:]}

Field rules:
{_NUTRITION_UNITS}
- Use 0 for missing values
{STRICT_OUTPUT_RULES}"""


def estimate_nutrition_prompt(food_name: str, category: str) -> str:
    return f"""Estimate nutrition values for: {food_name} (category: {category})

Required JSON structure:
{_NUTRITION_STRUCTURE}

Field rules:
- All values per 100g based on typical values for this food
{_NUTRITION_UNITS}
{STRICT_OUTPUT_RULES}"""


def fill_empty_nutrition_prompt(
    food_name: str, category: str, known: dict[str, float]
) -> str:
    """Ask only for the nutrients that are still zero, keeping known ones."""
    known_lines = "\n".join(
        f"- {key}: {value:g}" for key, value in known.items() if value
    ) or "- (none)"
    return f"""Complete the nutrition values for: {food_name} (category: {category})

Already known values per 100g (copy these unchanged):
{known_lines}

Estimate every other value from typical values for this food.

Required JSON structure:
{_NUTRITION_STRUCTURE}

Field rules:
{_NUTRITION_UNITS}
{STRICT_OUTPUT_RULES}"""


def match_food_prompt(item_name: str, existing_foods: list[str]) -> str:
    food_list = ", ".join(existing_foods) if existing_foods else "(none)"
    return f"""Match "{item_name}" to the most similar food from: {food_list}

Required JSON structure:
{{"foodName":"matched name or null","confidence":0.85,"isNewFood":false}}

Field rules:
- foodName: exact name from list, or null if no good match
- confidence: 0.0 to 1.0
- isNewFood: true if confidence < 0.7 or no match, false otherwise
- If list is empty, return {{"foodName":null,"confidence":0,"isNewFood":true}}
{STRICT_OUTPUT_RULES}"""


def suggest_category_prompt(food_name: str, available_tags: list[str]) -> str:
    tag_list = ", ".join(available_tags) if available_tags else "(none)"
    return f"""Classify the food "{food_name}".

Categories and their subcategories:
{_SUBCATEGORY_LIST}

Available tags: {tag_list}

Required JSON structure:
{{"category":"vegetables","subcategory":"leafyGreens","tags":["tag"]}}

Field rules:
- category: one of {_CATEGORY_LIST}
- subcategory: one of the values listed for the chosen category, or null
- tags: zero or more names from the available tags only
{STRICT_OUTPUT_RULES}"""


def nutrition_targets_prompt(members: list[HouseholdMember]) -> str:
    people = "\n".join(f"- {m.describe()}" for m in members) or "- one average adult"
    return f"""Suggest combined daily nutrition targets for this household:
{people}

Required JSON structure:
{_NUTRITION_STRUCTURE[:-1]},"explanation":"One or two sentences"}}

Field rules:
- Values are daily totals for the whole household
- calories: kcal
- protein/carbohydrates/fat/saturatedFat/omega3/omega6/sugar/fiber: grams
- sodium/vitaminC/calcium/iron/potassium: mg
- vitaminA/vitaminD: mcg
- explanation: short plain-text rationale
{STRICT_OUTPUT_RULES}"""
