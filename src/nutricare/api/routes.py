"""Calorie estimation and meal logging endpoints."""

from __future__ import annotations

from datetime import UTC, date, datetime
from enum import Enum
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from nutricare.api.schemas import (
    CorrectionRequest,
    DetectCategoryRequest,
    LogMealRequest,
    SaveCalibrationRequest,
)
from nutricare.config import parse_user_id
from nutricare.domain.errors import InvalidInput
from nutricare.domain.meals import EstimateRequest
from nutricare.domain.preparation import (
    CookingIntensity,
    DairyType,
    FoodCategory,
    OilType,
    PreparationContext,
    SpiceLevel,
    SugarType,
    Unit,
)

if TYPE_CHECKING:
    from nutricare.containers import AppContainer
    from nutricare.domain.baselines import UtensilCalibration
    from nutricare.domain.meals import MealEstimate, MealLogEntry

_E = TypeVar("_E", bound=Enum)
_D = TypeVar("_D")


async def current_user_id(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the authenticated user id set by the session layer."""
    user_id = parse_user_id(x_user_id)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return user_id


router = APIRouter(
    prefix="/api", tags=["nutrition"], dependencies=[Depends(current_user_id)]
)


@router.post("/detect-category")
async def detect_category(
    body: DetectCategoryRequest,
    request: Request,
) -> dict[str, object]:
    """Classify a meal name and report which cooking fields apply."""
    container: AppContainer = request.app.state.container
    detection = container.category_detector.detect(body.name)
    return {
        "category": detection.category.value,
        "visible": detection.visible,
        "ingredients": detection.ingredients,
    }


@router.get("/estimate-calories")
async def estimate_calories(  # noqa: PLR0913
    request: Request,
    q: str = "",
    quantity: float = 0.0,
    unit: str = "",
    intensity: str | None = None,
    oil_type: str | None = None,
    milk_type: str | None = None,
    spice_level: str | None = None,
    utensil_type: str | None = None,
    sugar_type: str | None = None,
    category: str | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Preview calories for a meal without logging it."""
    container: AppContainer = request.app.state.container
    try:
        parsed_unit = Unit(unit)
    except ValueError as exc:
        raise InvalidInput("unit", f"unsupported unit: {unit!r}") from exc
    estimate_request = EstimateRequest(
        food_name=q,
        quantity=quantity,
        unit=parsed_unit,
        context=PreparationContext(
            oil_type=_lenient(OilType, oil_type, OilType.NO_OIL),
            dairy_type=_lenient(DairyType, milk_type, DairyType.NONE),
            cooking_intensity=_lenient(
                CookingIntensity, intensity, CookingIntensity.NORMAL
            ),
            sugar_type=_lenient(SugarType, sugar_type, SugarType.NO_SUGAR),
            spice_level=_lenient(SpiceLevel, spice_level, SpiceLevel.NORMAL),
            utensil_type=_utensil_name(utensil_type),
        ),
        category=_lenient(FoodCategory, category, None),
    )
    estimate = await container.meal_log_service.preview(user_id, estimate_request)
    return _estimate_payload(estimate)


@router.post("/meals", status_code=status.HTTP_201_CREATED)
async def log_meal(
    body: LogMealRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Estimate and log a meal, then refresh the personal baseline."""
    container: AppContainer = request.app.state.container
    result = await container.meal_log_service.log_meal(
        user_id,
        EstimateRequest(
            food_name=body.meal_name,
            quantity=body.quantity,
            unit=body.unit,
            context=PreparationContext(
                oil_type=body.oil_type,
                dairy_type=body.milk_type,
                cooking_intensity=body.cooking_intensity,
                sugar_type=body.sugar_type,
                spice_level=body.spice_level,
                utensil_type=_utensil_name(body.utensil_type),
            ),
            category=body.category,
        ),
        body.meal_type,
    )
    return {
        "meal": _meal_payload(result.entry),
        "base_calories": result.estimate.base_calories,
        "adjusted_calories": result.estimate.adjusted_calories,
        "used_baseline": result.estimate.used_baseline,
        "used_utensil_conversion": result.estimate.used_utensil_conversion,
        "baseline_updated": result.baseline_update.updated,
    }


@router.get("/meals")
async def list_meals(
    request: Request,
    limit: int = Query(default=20, ge=1, le=100),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the user's most recent meals."""
    container: AppContainer = request.app.state.container
    meals = container.meal_log_service.list_meals(user_id, limit)
    return {"meals": [_meal_payload(meal) for meal in meals]}


@router.get("/meals/daily")
async def daily_summary(
    request: Request,
    day: date | None = Query(default=None, alias="date"),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return calorie and macro totals for one UTC day."""
    container: AppContainer = request.app.state.container
    summary = container.meal_log_service.daily_summary(
        user_id, day or datetime.now(tz=UTC).date()
    )
    return {
        "date": summary.day.isoformat(),
        "calories": summary.calories,
        "protein": summary.protein_g,
        "fat": summary.fat_g,
        "carbs": summary.carbs_g,
        "meals": [_meal_payload(meal) for meal in summary.meals],
    }


@router.get("/meals/{meal_log_id}")
async def get_meal(
    meal_log_id: UUID,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return one of the user's meals."""
    container: AppContainer = request.app.state.container
    return _meal_payload(container.meal_log_service.get_meal(user_id, meal_log_id))


@router.delete("/meals/{meal_log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal(
    meal_log_id: UUID,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> None:
    """Delete one of the user's meals."""
    container: AppContainer = request.app.state.container
    container.meal_log_service.delete_meal(user_id, meal_log_id)


@router.post("/meals/{meal_log_id}/correction")
async def apply_correction(
    meal_log_id: UUID,
    body: CorrectionRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Scale a logged meal's calories and fold the result into the baseline."""
    container: AppContainer = request.app.state.container
    result = await container.meal_log_service.apply_correction(
        user_id, meal_log_id, body.percent_change
    )
    return {
        "message": "Correction applied",
        "corrected": result.corrected_calories,
        "baseline_updated": result.baseline_update.updated,
    }


@router.get("/calibration")
async def list_calibration(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's utensil calibrations, or the defaults."""
    container: AppContainer = request.app.state.container
    calibrations = container.calibration_service.list_for_user(user_id)
    return {"calibrations": [_calibration_payload(item) for item in calibrations]}


@router.post("/calibration")
async def save_calibration(
    body: SaveCalibrationRequest,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Save utensil calibrations for the user."""
    container: AppContainer = request.app.state.container
    saved = container.calibration_service.save(
        user_id,
        [(item.utensil_type, item.grams_per_unit) for item in body.calibration_data],
    )
    return {"calibrations": [_calibration_payload(item) for item in saved]}


@router.get("/food-search")
async def food_search(
    request: Request,
    q: str = "",
    limit: int = Query(default=5, ge=1, le=25),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Autocomplete food names from FDC."""
    container: AppContainer = request.app.state.container
    foods = await container.nutrition_service.search(q, limit)
    return {
        "foods": [
            {
                "fdc_id": food.fdc_id,
                "description": food.description,
                "brand_owner": food.brand_owner,
                "brand_name": food.brand_name,
                "data_type": food.data_type,
            }
            for food in foods
        ]
    }


def _lenient(enum_type: type[_E], raw: str | None, default: _D) -> _E | _D:
    """Parse an optional query value; unknown values fall back to the default."""
    if not raw:
        return default
    try:
        return enum_type(raw)
    except ValueError:
        return default


def _utensil_name(raw: str | None) -> str | None:
    cleaned = (raw or "").strip()
    return cleaned or None


def _estimate_payload(estimate: MealEstimate) -> dict[str, object]:
    macros = estimate.macros
    return {
        "base_calories": estimate.base_calories,
        "adjusted_calories": estimate.adjusted_calories,
        "multiplier": estimate.multiplier,
        "used_baseline": estimate.used_baseline,
        "used_utensil_conversion": estimate.used_utensil_conversion,
        "protein": macros.protein_g,
        "carbs": macros.carbs_g,
        "fat": macros.fat_g,
        "fiber": macros.fiber_g,
        "sugar": macros.sugar_g,
        "sodium": macros.sodium_mg,
    }


def _meal_payload(entry: MealLogEntry) -> dict[str, object]:
    context = entry.context
    return {
        "id": str(entry.id),
        "meal_name": entry.meal_name,
        "meal_type": entry.meal_type.value,
        "quantity": entry.quantity,
        "unit": entry.unit.value,
        "category": entry.category.value,
        "oil_type": context.oil_type.value,
        "milk_type": context.dairy_type.value,
        "cooking_intensity": context.cooking_intensity.value,
        "sugar_type": context.sugar_type.value,
        "spice_level": context.spice_level.value,
        "utensil_type": context.utensil_type,
        "calories": entry.base_calories,
        "adjusted_calories": entry.adjusted_calories,
        "protein": entry.macros.protein_g,
        "carbs": entry.macros.carbs_g,
        "fat": entry.macros.fat_g,
        "logged_at": entry.logged_at.isoformat(),
    }


def _calibration_payload(calibration: UtensilCalibration) -> dict[str, object]:
    return {
        "utensil_type": calibration.utensil_type,
        "grams_per_unit": calibration.grams_per_unit,
        "is_default": calibration.user_id is None,
    }
