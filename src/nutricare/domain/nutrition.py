"""Nutrition domain models."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrients for a portion."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    fiber_g: float = 0.0
    sugar_g: float = 0.0
    sodium_mg: float = 0.0

    @classmethod
    def zero(cls) -> "MacroProfile":
        """Return an all-zero profile."""
        return cls(0.0, 0.0, 0.0, 0.0)

    def scaled(self, factor: float) -> "MacroProfile":
        """Return the profile multiplied by a portion factor."""
        return MacroProfile(
            calories=self.calories * factor,
            protein_g=self.protein_g * factor,
            fat_g=self.fat_g * factor,
            carbs_g=self.carbs_g * factor,
            fiber_g=self.fiber_g * factor,
            sugar_g=self.sugar_g * factor,
            sodium_mg=self.sodium_mg * factor,
        )


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FDC."""

    fdc_id: int
    description: str
    brand_owner: str | None
    brand_name: str | None
    data_type: str | None


@dataclass(frozen=True)
class FoodDetails:
    """Full food details with per-100 g macros."""

    summary: FoodSummary
    macros: MacroProfile
    serving_size_g: float | None


@dataclass(frozen=True)
class NutritionLookup:
    """Nutrition for a specific quantity of a named food."""

    food: FoodSummary
    grams: float
    macros: MacroProfile


def round_calories(value: float) -> int:
    """Round half away from zero to a whole calorie count."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
