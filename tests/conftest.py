"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from nutricare.adapters.fdc_client import FdcClient
from nutricare.config import Settings
from nutricare.containers import AppContainer
from nutricare.domain.baselines import UserMealBaseline, UtensilCalibration
from nutricare.domain.meals import MealLogEntry, NewMealLog
from nutricare.domain.nutrition import MacroProfile
from nutricare.domain.preparation import (
    FoodCategory,
    MealType,
    PreparationContext,
    Unit,
)
from nutricare.services.baselines import BaselineRepository, BaselineService
from nutricare.services.cache import InMemoryCache
from nutricare.services.calibration import (
    CalibrationRepository,
    UtensilCalibrationService,
)
from nutricare.services.categories import CategoryDetector
from nutricare.services.estimation import EstimationService
from nutricare.services.meals import MealLogRepository, MealLogService
from nutricare.services.nutrition import NutritionService
from nutricare.services.units import UnitNormalizer

USER_ID = UUID("00000000-0000-4000-8000-000000000001")
OTHER_USER_ID = UUID("00000000-0000-4000-8000-000000000002")


@dataclass
class InMemoryMealLogRepository(MealLogRepository):
    """In-memory meal log repository for tests."""

    logs: dict[UUID, MealLogEntry] = field(default_factory=dict)
    fail_history: bool = False

    def create_meal_log(self, meal: NewMealLog) -> MealLogEntry:
        entry = MealLogEntry(id=uuid4(), **meal.__dict__)
        self.logs[entry.id] = entry
        return entry

    def get_meal_log(self, meal_log_id: UUID) -> MealLogEntry | None:
        return self.logs.get(meal_log_id)

    def list_meal_logs(self, user_id: UUID, limit: int) -> list[MealLogEntry]:
        owned = [log for log in self.logs.values() if log.user_id == user_id]
        owned.sort(key=lambda log: log.logged_at, reverse=True)
        return owned[:limit]

    def list_meal_logs_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogEntry]:
        return sorted(
            (
                log
                for log in self.logs.values()
                if log.user_id == user_id and start <= log.logged_at < end
            ),
            key=lambda log: log.logged_at,
        )

    def list_by_meal_name(self, user_id: UUID, meal_name: str) -> list[MealLogEntry]:
        if self.fail_history:
            raise RuntimeError("history unavailable")
        target = meal_name.strip().lower()
        return [
            log
            for log in self.logs.values()
            if log.user_id == user_id and log.meal_name.strip().lower() == target
        ]

    def update_adjusted_calories(
        self, meal_log_id: UUID, user_id: UUID, adjusted_calories: int
    ) -> None:
        entry = self.logs.get(meal_log_id)
        if entry is not None and entry.user_id == user_id:
            self.logs[meal_log_id] = replace(
                entry, adjusted_calories=adjusted_calories
            )

    def delete_meal_log(self, meal_log_id: UUID, user_id: UUID) -> None:
        entry = self.logs.get(meal_log_id)
        if entry is not None and entry.user_id == user_id:
            del self.logs[meal_log_id]

    def add(  # noqa: PLR0913
        self,
        meal_name: str,
        adjusted_calories: int,
        user_id: UUID = USER_ID,
        logged_at: datetime | None = None,
        protein_g: float = 0.0,
    ) -> MealLogEntry:
        """Seed a stored log directly."""
        return self.create_meal_log(
            NewMealLog(
                user_id=user_id,
                meal_name=meal_name,
                quantity=100.0,
                unit=Unit.GRAMS,
                meal_type=MealType.LUNCH,
                context=PreparationContext(),
                category=FoodCategory.UNKNOWN,
                base_calories=float(adjusted_calories),
                adjusted_calories=adjusted_calories,
                macros=MacroProfile(float(adjusted_calories), protein_g, 0.0, 0.0),
                logged_at=logged_at or datetime.now(tz=UTC),
            )
        )


@dataclass
class InMemoryBaselineRepository(BaselineRepository):
    """In-memory baseline repository keyed by lower-cased meal name."""

    baselines: dict[tuple[UUID, str], UserMealBaseline] = field(default_factory=dict)
    fail_reads: bool = False
    fail_writes: bool = False
    writes: int = 0

    def get_baseline(self, user_id: UUID, meal_name: str) -> UserMealBaseline | None:
        if self.fail_reads:
            raise RuntimeError("baseline store down")
        return self.baselines.get((user_id, meal_name.strip().lower()))

    def upsert_baseline(
        self,
        user_id: UUID,
        meal_name: str,
        baseline_calories: float,
        sample_count: int,
    ) -> UserMealBaseline:
        if self.fail_writes:
            raise RuntimeError("baseline store down")
        self.writes += 1
        key = (user_id, meal_name.strip().lower())
        existing = self.baselines.get(key)
        baseline = UserMealBaseline(
            user_id=user_id,
            meal_name=existing.meal_name if existing else meal_name.strip(),
            baseline_calories=baseline_calories,
            sample_count=sample_count,
            updated_at=datetime.now(tz=UTC),
        )
        self.baselines[key] = baseline
        return baseline

    def seed(
        self, meal_name: str, calories: float, samples: int, user_id: UUID = USER_ID
    ) -> None:
        self.baselines[(user_id, meal_name.lower())] = UserMealBaseline(
            user_id=user_id,
            meal_name=meal_name,
            baseline_calories=calories,
            sample_count=samples,
        )


@dataclass
class InMemoryCalibrationRepository(CalibrationRepository):
    """In-memory utensil calibration repository for tests."""

    calibrations: dict[tuple[UUID, str], float] = field(default_factory=dict)
    fail: bool = False

    def list_calibrations(self, user_id: UUID) -> list[UtensilCalibration]:
        if self.fail:
            raise RuntimeError("calibration store down")
        return [
            UtensilCalibration(user_id=owner, utensil_type=name, grams_per_unit=grams)
            for (owner, name), grams in self.calibrations.items()
            if owner == user_id
        ]

    def upsert_calibration(
        self, user_id: UUID, utensil_type: str, grams_per_unit: float
    ) -> UtensilCalibration:
        self.calibrations[(user_id, utensil_type)] = grams_per_unit
        return UtensilCalibration(
            user_id=user_id, utensil_type=utensil_type, grams_per_unit=grams_per_unit
        )


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "fdcId": 171077,
                    "description": "Chicken, broilers or fryers, breast, cooked",
                    "brandOwner": None,
                    "brandName": None,
                    "dataType": "SR Legacy",
                }
            ]
        }
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 171077,
            "description": "Chicken, broilers or fryers, breast, cooked",
            "dataType": "SR Legacy",
            "servingSize": 100,
            "foodNutrients": [
                {"nutrientId": 1008, "amount": 165},
                {"nutrientId": 1003, "amount": 31},
                {"nutrientId": 1004, "amount": 3.6},
                {"nutrientId": 1005, "amount": 0},
                {"nutrientId": 1093, "amount": 74},
            ],
        }
    )
    error: Exception | None = None
    search_calls: list[tuple[str, int]] = field(default_factory=list)
    food_calls: int = 0

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        self.search_calls.append((query, page_size))
        if self.error is not None:
            raise self.error
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls += 1
        if self.error is not None:
            raise self.error
        return self.food_payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        fdc_api_key="fdc-key",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def meal_log_repository() -> InMemoryMealLogRepository:
    return InMemoryMealLogRepository()


@pytest.fixture
def baseline_repository() -> InMemoryBaselineRepository:
    return InMemoryBaselineRepository()


@pytest.fixture
def calibration_repository() -> InMemoryCalibrationRepository:
    return InMemoryCalibrationRepository()


@pytest.fixture
def container(
    settings: Settings,
    fdc_client: FakeFdcClient,
    meal_log_repository: InMemoryMealLogRepository,
    baseline_repository: InMemoryBaselineRepository,
    calibration_repository: InMemoryCalibrationRepository,
) -> AppContainer:
    calibration_service = UtensilCalibrationService(calibration_repository)
    unit_normalizer = UnitNormalizer(calibration_service=calibration_service)
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        unit_normalizer=unit_normalizer,
    )
    baseline_service = BaselineService(
        repository=baseline_repository,
        history=meal_log_repository,
        min_samples=settings.baseline_min_samples,
    )
    category_detector = CategoryDetector()
    estimation_service = EstimationService(
        nutrition_service=nutrition_service,
        baseline_service=baseline_service,
        unit_normalizer=unit_normalizer,
    )
    meal_log_service = MealLogService(
        estimation_service=estimation_service,
        baseline_service=baseline_service,
        category_detector=category_detector,
        repository=meal_log_repository,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        nutrition_service=nutrition_service,
        baseline_service=baseline_service,
        calibration_service=calibration_service,
        category_detector=category_detector,
        estimation_service=estimation_service,
        meal_log_service=meal_log_service,
        close_resources=close_resources,
    )
