"""Supabase repository for personal meal baselines."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutricare.adapters.supabase_meal_log_repository import (
    meal_name_pattern,
    same_meal_name,
)
from nutricare.domain.baselines import UserMealBaseline
from nutricare.services.baselines import BaselineRepository


@dataclass
class SupabaseBaselineRepository(BaselineRepository):
    """Supabase-backed store for user_meal_baselines."""

    client: Client

    def get_baseline(self, user_id: UUID, meal_name: str) -> UserMealBaseline | None:
        """Return the baseline for a meal name, matched case-insensitively."""
        row = self._find_row(user_id, meal_name)
        if row is None:
            return None
        return _parse_baseline(row)

    def upsert_baseline(
        self,
        user_id: UUID,
        meal_name: str,
        baseline_calories: float,
        sample_count: int,
    ) -> UserMealBaseline:
        """Update the matching row or insert a new one."""
        payload = {
            "baseline_calories": baseline_calories,
            "sample_count": sample_count,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        existing = self._find_row(user_id, meal_name)
        if existing is not None:
            response = (
                self.client.table("user_meal_baselines")
                .update(payload)
                .eq("id", str(existing["id"]))
                .execute()
            )
        else:
            response = (
                self.client.table("user_meal_baselines")
                .insert(
                    {
                        "user_id": str(user_id),
                        "meal_name": meal_name.strip(),
                        **payload,
                    }
                )
                .execute()
            )
        if not response.data:
            raise RuntimeError("Failed to upsert meal baseline")
        return _parse_baseline(response.data[0])

    def _find_row(self, user_id: UUID, meal_name: str) -> dict[str, object] | None:
        response = (
            self.client.table("user_meal_baselines")
            .select(
                "id, user_id, meal_name, baseline_calories, sample_count, updated_at"
            )
            .eq("user_id", str(user_id))
            .ilike("meal_name", meal_name_pattern(meal_name.strip()))
            .execute()
        )
        for row in response.data or []:
            if same_meal_name(row.get("meal_name"), meal_name):
                return row
        return None


def _parse_baseline(row: dict[str, object]) -> UserMealBaseline:
    updated_raw = row.get("updated_at")
    return UserMealBaseline(
        user_id=UUID(row["user_id"]),
        meal_name=str(row.get("meal_name", "")),
        baseline_calories=float(row.get("baseline_calories") or 0.0),
        sample_count=int(row.get("sample_count") or 0),
        updated_at=(
            datetime.fromisoformat(updated_raw)
            if isinstance(updated_raw, str) and updated_raw
            else None
        ),
    )
