"""Meal logging and calorie correction service."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID

from nutricare.domain.baselines import SideEffectOutcome
from nutricare.domain.errors import InvalidInput, MealLogNotFound
from nutricare.domain.meals import (
    CorrectionResult,
    DailySummary,
    EstimateRequest,
    LogMealResult,
    MealEstimate,
    MealLogEntry,
    NewMealLog,
)
from nutricare.domain.nutrition import round_calories
from nutricare.domain.preparation import MealType
from nutricare.services.baselines import BaselineService
from nutricare.services.categories import CategoryDetector
from nutricare.services.estimation import EstimationService

_MIN_PERCENT_CHANGE = -100

_logger = logging.getLogger(__name__)


class MealLogRepository(Protocol):
    """Persistence interface for meal logs."""

    def create_meal_log(self, meal: NewMealLog) -> MealLogEntry:
        """Persist a meal log and return it with its id."""

    def get_meal_log(self, meal_log_id: UUID) -> MealLogEntry | None:
        """Return a meal log by id."""

    def list_meal_logs(self, user_id: UUID, limit: int) -> list[MealLogEntry]:
        """Return a user's most recent meal logs first."""

    def list_meal_logs_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogEntry]:
        """Return a user's meal logs with start <= logged_at < end."""

    def list_by_meal_name(self, user_id: UUID, meal_name: str) -> list[MealLogEntry]:
        """Return a user's logs whose meal name matches case-insensitively."""

    def update_adjusted_calories(
        self, meal_log_id: UUID, user_id: UUID, adjusted_calories: int
    ) -> None:
        """Overwrite the adjusted calories of a meal log."""

    def delete_meal_log(self, meal_log_id: UUID, user_id: UUID) -> None:
        """Delete a meal log owned by the user."""


@dataclass
class MealLogService:
    """Logs meals, applies corrections and feeds personal baselines."""

    estimation_service: EstimationService
    baseline_service: BaselineService
    category_detector: CategoryDetector
    repository: MealLogRepository

    async def preview(self, user_id: UUID, request: EstimateRequest) -> MealEstimate:
        """Estimate a meal without logging it."""
        return await self.estimation_service.estimate(user_id, request)

    async def log_meal(
        self, user_id: UUID, request: EstimateRequest, meal_type: MealType
    ) -> LogMealResult:
        """Estimate and persist a meal, then run baseline auto-learn."""
        if not isinstance(meal_type, MealType):
            raise InvalidInput("mealType", f"unsupported meal type: {meal_type!r}")
        estimate = await self.estimation_service.estimate(user_id, request)
        meal_name = request.food_name.strip()
        entry = self.repository.create_meal_log(
            NewMealLog(
                user_id=user_id,
                meal_name=meal_name,
                quantity=float(request.quantity),
                unit=request.unit,
                meal_type=meal_type,
                context=request.context,
                category=request.category
                or self.category_detector.categorize(meal_name),
                base_calories=estimate.base_calories,
                adjusted_calories=estimate.adjusted_calories,
                macros=estimate.macros,
                logged_at=datetime.now(tz=UTC),
            )
        )
        baseline_update = await self.baseline_service.learn_from_history(
            user_id, meal_name
        )
        return LogMealResult(
            entry=entry, estimate=estimate, baseline_update=baseline_update
        )

    async def apply_correction(
        self, user_id: UUID, meal_log_id: UUID, percent_change: object
    ) -> CorrectionResult:
        """Scale a log's adjusted calories by a signed percentage.

        The baseline for the meal name becomes the mean of the matching logs
        as they were before the correction plus the corrected value.
        """
        pct = _parse_percent(percent_change)
        entry = self.repository.get_meal_log(meal_log_id)
        if entry is None or entry.user_id != user_id:
            raise MealLogNotFound(meal_log_id)

        corrected = round_calories(entry.adjusted_calories * (1 + pct / 100))
        async with self.baseline_service.lock_for(user_id, entry.meal_name):
            previous = self._previous_values(user_id, entry.meal_name)
            self.repository.update_adjusted_calories(meal_log_id, user_id, corrected)
            if previous is None:
                baseline_update = SideEffectOutcome(
                    ok=False, error="meal history unavailable"
                )
            else:
                baseline_update = self.baseline_service.fold_correction(
                    user_id, entry.meal_name, previous, corrected
                )
        _logger.info(
            "Correction applied: meal_log=%s percent=%s calories=%s->%s",
            meal_log_id,
            pct,
            entry.adjusted_calories,
            corrected,
        )
        return CorrectionResult(
            meal_log_id=meal_log_id,
            corrected_calories=corrected,
            baseline_update=baseline_update,
        )

    def get_meal(self, user_id: UUID, meal_log_id: UUID) -> MealLogEntry:
        """Return a meal log owned by the user."""
        entry = self.repository.get_meal_log(meal_log_id)
        if entry is None or entry.user_id != user_id:
            raise MealLogNotFound(meal_log_id)
        return entry

    def list_meals(self, user_id: UUID, limit: int = 20) -> list[MealLogEntry]:
        """Return the user's most recent meals."""
        return self.repository.list_meal_logs(user_id, limit)

    def delete_meal(self, user_id: UUID, meal_log_id: UUID) -> None:
        """Delete a meal log owned by the user."""
        self.get_meal(user_id, meal_log_id)
        self.repository.delete_meal_log(meal_log_id, user_id)

    def daily_summary(self, user_id: UUID, day: date) -> DailySummary:
        """Return adjusted-calorie and macro totals for one UTC day."""
        start = datetime.combine(day, time.min, tzinfo=UTC)
        meals = self.repository.list_meal_logs_between(
            user_id, start, start + timedelta(days=1)
        )
        return DailySummary(
            day=day,
            calories=sum(meal.adjusted_calories for meal in meals),
            protein_g=round(sum(meal.macros.protein_g for meal in meals), 2),
            fat_g=round(sum(meal.macros.fat_g for meal in meals), 2),
            carbs_g=round(sum(meal.macros.carbs_g for meal in meals), 2),
            meals=meals,
        )

    def _previous_values(self, user_id: UUID, meal_name: str) -> list[float] | None:
        try:
            return [
                float(log.adjusted_calories)
                for log in self.repository.list_by_meal_name(user_id, meal_name)
            ]
        except Exception:
            _logger.exception(
                "Failed to read meal history for baseline",
                extra={"user_id": str(user_id), "meal_name": meal_name},
            )
            return None


def _parse_percent(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidInput("percentChange", "percentChange number required")
    if not math.isfinite(value):
        raise InvalidInput("percentChange", "percentChange must be finite")
    if value < _MIN_PERCENT_CHANGE:
        raise InvalidInput("percentChange", "percentChange must be at least -100")
    return float(value)
