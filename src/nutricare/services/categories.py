"""Keyword-based food category detection."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from nutricare.domain.categories import VISIBLE_FIELDS, CategoryDetection
from nutricare.domain.preparation import FoodCategory

# Order matters: the first keyword found in the name wins.
CATEGORY_KEYWORDS: Mapping[str, FoodCategory] = MappingProxyType(
    {
        "milk": FoodCategory.DAIRY,
        "tea": FoodCategory.BEVERAGE,
        "coffee": FoodCategory.BEVERAGE,
        "paneer": FoodCategory.PROTEIN,
        "rice": FoodCategory.GRAIN,
        "chicken": FoodCategory.PROTEIN,
        "poha": FoodCategory.COOKED,
        "roti": FoodCategory.COOKED,
        "curd": FoodCategory.DAIRY,
        "fruit": FoodCategory.RAW,
        "dal": FoodCategory.COOKED,
        "sabzi": FoodCategory.COOKED,
        "egg": FoodCategory.PROTEIN,
    }
)

INGREDIENT_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "poha": ("Onion", "Green Chili", "Peanuts", "Mustard Seeds", "Coriander"),
        "sabzi": ("Onion", "Garlic", "Tomato", "Green Chili", "Ginger"),
        "dal": ("Onion", "Garlic", "Ghee", "Tomato", "Cumin"),
        "chicken": ("Onion", "Garlic", "Ginger", "Tomato", "Green Chili"),
        "roti": ("Atta (Chakki Fresh)", "Atta (Maida Mix)", "Multi-grain"),
        "tea": ("Sugar", "Milk"),
        "coffee": ("Sugar", "Milk"),
        "milk": ("Full Cream", "Toned", "Skimmed"),
        "paneer": ("Paneer Cubes", "Oil/Ghee", "Spices"),
        "salad": ("Lettuce", "Tomato", "Onion", "Olive Oil"),
    }
)

CATEGORY_FIELDS: Mapping[FoodCategory, frozenset[str]] = MappingProxyType(
    {
        FoodCategory.DAIRY: frozenset({"dairyBase", "milkType"}),
        FoodCategory.BEVERAGE: frozenset({"milkType", "sugarType"}),
        FoodCategory.COOKED: frozenset(
            {"oilType", "cookingIntensity", "spiceLevel", "utensil"}
        ),
        FoodCategory.PROTEIN: frozenset({"oilType", "cookingIntensity"}),
    }
)

_COOKED_PATTERN = re.compile(r"curry|fry|stew|sabzi|bhaji")
_BEVERAGE_PATTERN = re.compile(r"juice|shake|smoothie|chai")
_MIN_NAME_LENGTH = 2


@dataclass(frozen=True)
class CategoryDetector:
    """Classifies meal names and derives the relevant cooking fields."""

    keywords: Mapping[str, FoodCategory] = field(
        default_factory=lambda: CATEGORY_KEYWORDS
    )
    ingredients: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: INGREDIENT_KEYWORDS
    )
    fields: Mapping[FoodCategory, frozenset[str]] = field(
        default_factory=lambda: CATEGORY_FIELDS
    )

    def detect(self, food_name: str | None) -> CategoryDetection:
        """Return category, visible fields and ingredient suggestions."""
        lower = (food_name or "").strip().lower()
        if len(lower) < _MIN_NAME_LENGTH:
            return CategoryDetection(
                category=FoodCategory.UNKNOWN,
                visible=_visibility(frozenset()),
                ingredients=[],
            )
        category = self.categorize(lower)
        return CategoryDetection(
            category=category,
            visible=_visibility(self.fields.get(category, frozenset())),
            ingredients=self.suggest_ingredients(lower),
        )

    def categorize(self, food_name: str) -> FoodCategory:
        """Return the category for a meal name."""
        lower = food_name.lower()
        if not lower.strip():
            return FoodCategory.UNKNOWN
        for keyword, category in self.keywords.items():
            if keyword in lower:
                return category
        if _COOKED_PATTERN.search(lower):
            return FoodCategory.COOKED
        if _BEVERAGE_PATTERN.search(lower):
            return FoodCategory.BEVERAGE
        return FoodCategory.RAW

    def suggest_ingredients(self, food_name: str) -> list[str]:
        """Return de-duplicated ingredients for every matching keyword."""
        lower = food_name.lower()
        suggestions: list[str] = []
        for keyword, items in self.ingredients.items():
            if keyword not in lower:
                continue
            for item in items:
                if item not in suggestions:
                    suggestions.append(item)
        return suggestions


def _visibility(enabled: frozenset[str]) -> dict[str, bool]:
    return {name: name in enabled for name in VISIBLE_FIELDS}
