"""Domain models for meal logging and estimation."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from nutricare.domain.baselines import SideEffectOutcome
from nutricare.domain.nutrition import MacroProfile
from nutricare.domain.preparation import (
    FoodCategory,
    MealType,
    PreparationContext,
    Unit,
)


@dataclass(frozen=True)
class EstimateRequest:
    """Inputs for a calorie estimate."""

    food_name: str
    quantity: float
    unit: Unit
    context: PreparationContext = field(default_factory=PreparationContext)
    category: FoodCategory | None = None


@dataclass(frozen=True)
class MealEstimate:
    """Result of estimating a meal before it is logged."""

    base_calories: float
    adjusted_calories: int
    multiplier: float
    macros: MacroProfile
    grams: float
    used_baseline: bool
    used_utensil_conversion: bool


@dataclass(frozen=True)
class NewMealLog:
    """Meal log row to be persisted."""

    user_id: UUID
    meal_name: str
    quantity: float
    unit: Unit
    meal_type: MealType
    context: PreparationContext
    category: FoodCategory
    base_calories: float
    adjusted_calories: int
    macros: MacroProfile
    logged_at: datetime


@dataclass(frozen=True)
class MealLogEntry:
    """Persisted meal log."""

    id: UUID
    user_id: UUID
    meal_name: str
    quantity: float
    unit: Unit
    meal_type: MealType
    context: PreparationContext
    category: FoodCategory
    base_calories: float
    adjusted_calories: int
    macros: MacroProfile
    logged_at: datetime


@dataclass(frozen=True)
class LogMealResult:
    """Logged meal with its estimate and the auto-learn outcome."""

    entry: MealLogEntry
    estimate: MealEstimate
    baseline_update: SideEffectOutcome


@dataclass(frozen=True)
class CorrectionResult:
    """Outcome of a percentage correction on a logged meal."""

    meal_log_id: UUID
    corrected_calories: int
    baseline_update: SideEffectOutcome


@dataclass(frozen=True)
class DailySummary:
    """Totals of logged meals for one day."""

    day: date
    calories: int
    protein_g: float
    fat_g: float
    carbs_g: float
    meals: list[MealLogEntry]
