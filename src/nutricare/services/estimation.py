"""Calorie estimation orchestrator."""

import logging
import math
from dataclasses import dataclass, field, replace
from uuid import UUID

from nutricare.domain.baselines import UserMealBaseline
from nutricare.domain.errors import (
    BaselineUnavailable,
    EstimationError,
    InvalidInput,
    LookupUnavailable,
)
from nutricare.domain.meals import EstimateRequest, MealEstimate
from nutricare.domain.nutrition import MacroProfile, round_calories
from nutricare.domain.preparation import Unit
from nutricare.services.baselines import BaselineService
from nutricare.services.multipliers import PreparationMultiplierModel
from nutricare.services.nutrition import NutritionService
from nutricare.services.units import UnitNormalizer

_logger = logging.getLogger(__name__)


@dataclass
class EstimationService:
    """Combines lookups, baselines and preparation multipliers."""

    nutrition_service: NutritionService
    baseline_service: BaselineService
    unit_normalizer: UnitNormalizer
    multiplier_model: PreparationMultiplierModel = field(
        default_factory=PreparationMultiplierModel
    )

    async def estimate(self, user_id: UUID, request: EstimateRequest) -> MealEstimate:
        """Estimate base and adjusted calories without persisting anything.

        A baseline with enough samples replaces the FDC calorie lookup. When
        FDC is unavailable any existing baseline is used instead; otherwise
        LookupUnavailable propagates. FoodNotRecognized always propagates.
        """
        validate_request(request)
        food_name = request.food_name.strip()
        resolved = self.unit_normalizer.resolve(
            user_id,
            request.quantity,
            request.unit,
            food_name,
            request.context.utensil_type,
        )
        multiplier = self.multiplier_model.for_context(request.context)
        baseline = self._read_baseline(user_id, food_name)

        if self.baseline_service.is_mature(baseline):
            base_calories = float(baseline.baseline_calories)
            macros = await self._display_macros(food_name, resolved.grams)
            used_baseline = True
        else:
            try:
                lookup = await self.nutrition_service.lookup(
                    food_name, resolved.grams, Unit.GRAMS
                )
            except LookupUnavailable:
                if baseline is None:
                    raise
                _logger.warning(
                    "Nutrition lookup unavailable, using baseline for %s", food_name
                )
                base_calories = float(baseline.baseline_calories)
                macros = MacroProfile.zero()
                used_baseline = True
            else:
                base_calories = lookup.macros.calories
                macros = lookup.macros
                used_baseline = False

        return MealEstimate(
            base_calories=base_calories,
            adjusted_calories=round_calories(base_calories * multiplier),
            multiplier=multiplier,
            macros=replace(macros, calories=base_calories),
            grams=resolved.grams,
            used_baseline=used_baseline,
            used_utensil_conversion=resolved.used_utensil_conversion,
        )

    def _read_baseline(self, user_id: UUID, food_name: str) -> UserMealBaseline | None:
        try:
            return self.baseline_service.get(user_id, food_name)
        except BaselineUnavailable:
            _logger.warning(
                "Baseline read failed, estimating without it",
                extra={"user_id": str(user_id), "meal_name": food_name},
                exc_info=True,
            )
            return None

    async def _display_macros(self, food_name: str, grams: float) -> MacroProfile:
        """Fetch macros for display only; zeros when FDC cannot answer."""
        try:
            lookup = await self.nutrition_service.lookup(food_name, grams, Unit.GRAMS)
        except EstimationError as exc:
            _logger.info("Macro enrichment skipped for %s: %s", food_name, exc)
            return MacroProfile.zero()
        return lookup.macros


def validate_request(request: EstimateRequest) -> None:
    """Reject bad input before any I/O."""
    if not request.food_name or not request.food_name.strip():
        raise InvalidInput("mealName", "meal name is required")
    quantity = request.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int | float):
        raise InvalidInput("quantity", "quantity must be a number")
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidInput("quantity", "quantity must be positive")
    if not isinstance(request.unit, Unit):
        raise InvalidInput("unit", f"unsupported unit: {request.unit!r}")
