"""Preparation context enums and value objects."""

from dataclasses import dataclass
from enum import Enum


class Unit(Enum):
    """Units accepted when logging a meal."""

    GRAMS = "grams"
    ML = "ml"
    CUPS = "cups"
    PIECES = "pieces"
    OZ = "oz"
    TBSP = "tbsp"
    TSP = "tsp"


class MealType(Enum):
    """Meal slot in the day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class OilType(Enum):
    """Cooking oil used for the dish."""

    NO_OIL = "No Oil"
    REFINED = "Refined"
    MUSTARD = "Mustard"
    OLIVE = "Olive"
    DESI_GHEE = "Desi Ghee"
    BUTTER = "Butter"


class DairyType(Enum):
    """Milk base used for the dish or drink."""

    NONE = "None"
    COW_MILK = "Cow Milk"
    BUFFALO_MILK = "Buffalo Milk"
    SKIMMED_MILK = "Skimmed Milk"
    PLANT_MILK = "Plant Milk"


class CookingIntensity(Enum):
    """How heavily the dish was cooked."""

    BOILED_STEAMED = "Boiled/Steamed"
    LIGHTLY_FRIED = "Lightly Fried"
    NORMAL = "Normal"
    DEEP_FRIED = "Deep Fried"
    EXTRA_GHEE = "Extra Ghee"


class SugarType(Enum):
    """Sweetener added to a drink."""

    NO_SUGAR = "No Sugar"
    REGULAR = "Regular"
    HONEY = "Honey"
    SWEETENER = "Sweetener"


class SpiceLevel(Enum):
    """Spice level of the dish."""

    MILD = "Mild"
    NORMAL = "Normal"
    SPICY = "Spicy"
    VERY_SPICY = "Very Spicy"


class UtensilType(Enum):
    """Built-in serving containers with default gram equivalents.

    Users may calibrate containers of their own, so a preparation context
    carries the utensil as its display name rather than a member.
    """

    SMALL_BOWL = "Small Bowl (~100ml)"
    MEDIUM_BOWL = "Medium Bowl (~150ml)"
    LARGE_BOWL = "Large Bowl (~250ml)"
    PLATE = "Plate (~300ml)"
    GLASS = "Glass (~200ml)"
    CUSTOM = "Custom"


class FoodCategory(Enum):
    """Coarse food category derived from the meal name."""

    DAIRY = "dairy"
    BEVERAGE = "beverage"
    COOKED = "cooked"
    PROTEIN = "protein"
    RAW = "raw"
    GRAIN = "grain"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class PreparationContext:
    """Cooking-context modifiers for a meal, each with a neutral default."""

    oil_type: OilType = OilType.NO_OIL
    dairy_type: DairyType = DairyType.NONE
    cooking_intensity: CookingIntensity = CookingIntensity.NORMAL
    sugar_type: SugarType = SugarType.NO_SUGAR
    spice_level: SpiceLevel = SpiceLevel.NORMAL
    utensil_type: str | None = None
