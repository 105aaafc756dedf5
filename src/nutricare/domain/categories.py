"""Domain models for food category detection."""

from dataclasses import dataclass

from nutricare.domain.preparation import FoodCategory

VISIBLE_FIELDS = (
    "dairyBase",
    "milkType",
    "oilType",
    "cookingIntensity",
    "spiceLevel",
    "utensil",
    "sugarType",
)


@dataclass(frozen=True)
class CategoryDetection:
    """Detected category with the cooking fields relevant to it."""

    category: FoodCategory
    visible: dict[str, bool]
    ingredients: list[str]
