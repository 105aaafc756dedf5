"""Supabase repository for meal logs."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TypeVar
from uuid import UUID

from supabase import Client

from nutricare.domain.meals import MealLogEntry, NewMealLog
from nutricare.domain.nutrition import MacroProfile, round_calories
from nutricare.domain.preparation import (
    CookingIntensity,
    DairyType,
    FoodCategory,
    MealType,
    OilType,
    PreparationContext,
    SpiceLevel,
    SugarType,
    Unit,
)
from nutricare.services.meals import MealLogRepository

_E = TypeVar("_E", bound=Enum)
_D = TypeVar("_D")

_COLUMNS = (
    "id, user_id, meal_name, quantity, unit, meal_type, oil_type, milk_type, "
    "cooking_intensity, sugar_type, spice_level, utensil_type, category, "
    "calories, adjusted_calories, protein, carbs, fat, fiber, sugar, sodium, "
    "logged_at"
)


@dataclass
class SupabaseMealLogRepository(MealLogRepository):
    """Supabase implementation for meal logs."""

    client: Client

    def create_meal_log(self, meal: NewMealLog) -> MealLogEntry:
        """Insert a meal log row and return it."""
        context = meal.context
        response = (
            self.client.table("meal_logs")
            .insert(
                {
                    "user_id": str(meal.user_id),
                    "meal_name": meal.meal_name,
                    "quantity": meal.quantity,
                    "unit": meal.unit.value,
                    "meal_type": meal.meal_type.value,
                    "oil_type": context.oil_type.value,
                    "milk_type": context.dairy_type.value,
                    "cooking_intensity": context.cooking_intensity.value,
                    "sugar_type": context.sugar_type.value,
                    "spice_level": context.spice_level.value,
                    "utensil_type": context.utensil_type,
                    "category": meal.category.value,
                    "calories": meal.base_calories,
                    "adjusted_calories": meal.adjusted_calories,
                    "protein": meal.macros.protein_g,
                    "carbs": meal.macros.carbs_g,
                    "fat": meal.macros.fat_g,
                    "fiber": meal.macros.fiber_g,
                    "sugar": meal.macros.sugar_g,
                    "sodium": meal.macros.sodium_mg,
                    "logged_at": meal.logged_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal log")
        return _parse_entry(response.data[0])

    def get_meal_log(self, meal_log_id: UUID) -> MealLogEntry | None:
        """Return a meal log by id."""
        response = (
            self.client.table("meal_logs")
            .select(_COLUMNS)
            .eq("id", str(meal_log_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def list_meal_logs(self, user_id: UUID, limit: int) -> list[MealLogEntry]:
        """Return recent meal logs, newest first."""
        response = (
            self.client.table("meal_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("logged_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def list_meal_logs_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[MealLogEntry]:
        """Return meal logs within a time range."""
        response = (
            self.client.table("meal_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def list_by_meal_name(self, user_id: UUID, meal_name: str) -> list[MealLogEntry]:
        """Return logs whose meal name equals the given one, ignoring case."""
        response = (
            self.client.table("meal_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .ilike("meal_name", meal_name_pattern(meal_name.strip()))
            .order("logged_at", desc=True)
            .execute()
        )
        return [
            _parse_entry(row)
            for row in response.data or []
            if same_meal_name(row.get("meal_name"), meal_name)
        ]

    def update_adjusted_calories(
        self, meal_log_id: UUID, user_id: UUID, adjusted_calories: int
    ) -> None:
        """Overwrite adjusted calories for a meal log."""
        self.client.table("meal_logs").update(
            {"adjusted_calories": adjusted_calories}
        ).eq("id", str(meal_log_id)).eq("user_id", str(user_id)).execute()

    def delete_meal_log(self, meal_log_id: UUID, user_id: UUID) -> None:
        """Delete a meal log owned by the user."""
        self.client.table("meal_logs").delete().eq("id", str(meal_log_id)).eq(
            "user_id", str(user_id)
        ).execute()


def meal_name_pattern(value: str) -> str:
    """Build an ilike pattern matching the value case-insensitively.

    PostgREST reads `*` as a `%` wildcard, so it becomes the single-character
    wildcard instead. Callers still compare names with ``same_meal_name``.
    """
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped.replace("*", "_")


def same_meal_name(stored: object, meal_name: str) -> bool:
    """Return True when a stored meal name equals the given one, ignoring case."""
    return str(stored or "").strip().lower() == meal_name.strip().lower()


def _parse_entry(row: dict[str, object]) -> MealLogEntry:
    adjusted = row.get("adjusted_calories")
    if adjusted is None:
        adjusted = row.get("calories")
    return MealLogEntry(
        id=UUID(row["id"]),
        user_id=UUID(row["user_id"]),
        meal_name=str(row.get("meal_name", "")),
        quantity=float(row.get("quantity") or 0.0),
        unit=_enum(Unit, row.get("unit"), Unit.GRAMS),
        meal_type=_enum(MealType, row.get("meal_type"), MealType.SNACK),
        context=PreparationContext(
            oil_type=_enum(OilType, row.get("oil_type"), OilType.NO_OIL),
            dairy_type=_enum(DairyType, row.get("milk_type"), DairyType.NONE),
            cooking_intensity=_enum(
                CookingIntensity,
                row.get("cooking_intensity"),
                CookingIntensity.NORMAL,
            ),
            sugar_type=_enum(SugarType, row.get("sugar_type"), SugarType.NO_SUGAR),
            spice_level=_enum(SpiceLevel, row.get("spice_level"), SpiceLevel.NORMAL),
            utensil_type=_optional_str(row.get("utensil_type")),
        ),
        category=_enum(FoodCategory, row.get("category"), FoodCategory.UNKNOWN),
        base_calories=float(row.get("calories") or 0.0),
        adjusted_calories=round_calories(float(adjusted or 0)),
        macros=MacroProfile(
            calories=float(row.get("calories") or 0.0),
            protein_g=float(row.get("protein") or 0.0),
            fat_g=float(row.get("fat") or 0.0),
            carbs_g=float(row.get("carbs") or 0.0),
            fiber_g=float(row.get("fiber") or 0.0),
            sugar_g=float(row.get("sugar") or 0.0),
            sodium_mg=float(row.get("sodium") or 0.0),
        ),
        logged_at=datetime.fromisoformat(row["logged_at"]),
    )


def _enum(enum_type: type[_E], value: object, default: _D) -> _E | _D:
    """Parse a stored enum value, tolerating rows written by older clients."""
    try:
        return enum_type(value)
    except ValueError:
        return default


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value) or None
