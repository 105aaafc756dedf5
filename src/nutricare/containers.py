"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutricare.adapters.fdc_client import HttpxFdcClient
from nutricare.adapters.supabase_baseline_repository import (
    SupabaseBaselineRepository,
)
from nutricare.adapters.supabase_calibration_repository import (
    SupabaseCalibrationRepository,
)
from nutricare.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from nutricare.config import Settings
from nutricare.services.baselines import BaselineService
from nutricare.services.cache import InMemoryCache
from nutricare.services.calibration import UtensilCalibrationService
from nutricare.services.categories import CategoryDetector
from nutricare.services.estimation import EstimationService
from nutricare.services.meals import MealLogService
from nutricare.services.multipliers import PreparationMultiplierModel
from nutricare.services.nutrition import NutritionService
from nutricare.services.units import UnitNormalizer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_service: NutritionService
    baseline_service: BaselineService
    calibration_service: UtensilCalibrationService
    category_detector: CategoryDetector
    estimation_service: EstimationService
    meal_log_service: MealLogService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_log_repository = SupabaseMealLogRepository(supabase_client)
    baseline_repository = SupabaseBaselineRepository(supabase_client)
    calibration_repository = SupabaseCalibrationRepository(supabase_client)

    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=resolved_settings.fdc_timeout_seconds,
    )
    calibration_service = UtensilCalibrationService(calibration_repository)
    unit_normalizer = UnitNormalizer(calibration_service=calibration_service)
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        unit_normalizer=unit_normalizer,
        search_ttl_seconds=resolved_settings.food_search_ttl_seconds,
        debug=resolved_settings.debug_nutrition,
    )
    baseline_service = BaselineService(
        repository=baseline_repository,
        history=meal_log_repository,
        min_samples=resolved_settings.baseline_min_samples,
    )
    category_detector = CategoryDetector()
    estimation_service = EstimationService(
        nutrition_service=nutrition_service,
        baseline_service=baseline_service,
        unit_normalizer=unit_normalizer,
        multiplier_model=PreparationMultiplierModel(),
    )
    meal_log_service = MealLogService(
        estimation_service=estimation_service,
        baseline_service=baseline_service,
        category_detector=category_detector,
        repository=meal_log_repository,
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrition_service=nutrition_service,
        baseline_service=baseline_service,
        calibration_service=calibration_service,
        category_detector=category_detector,
        estimation_service=estimation_service,
        meal_log_service=meal_log_service,
        close_resources=close_resources,
    )
