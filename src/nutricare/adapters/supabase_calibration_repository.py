"""Supabase repository for utensil calibrations."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutricare.domain.baselines import UtensilCalibration
from nutricare.services.calibration import CalibrationRepository


@dataclass
class SupabaseCalibrationRepository(CalibrationRepository):
    """Supabase implementation for user_utensil_mappings."""

    client: Client

    def list_calibrations(self, user_id: UUID) -> list[UtensilCalibration]:
        """Return all calibrations saved by a user."""
        response = (
            self.client.table("user_utensil_mappings")
            .select("user_id, utensil_type, grams_per_unit")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [_parse_calibration(row) for row in response.data or []]

    def upsert_calibration(
        self, user_id: UUID, utensil_type: str, grams_per_unit: float
    ) -> UtensilCalibration:
        """Update an existing calibration or insert a new one."""
        existing = (
            self.client.table("user_utensil_mappings")
            .select("id")
            .eq("user_id", str(user_id))
            .eq("utensil_type", utensil_type)
            .limit(1)
            .execute()
        )
        now = datetime.now(tz=UTC).isoformat()
        if existing.data:
            response = (
                self.client.table("user_utensil_mappings")
                .update({"grams_per_unit": grams_per_unit, "updated_at": now})
                .eq("id", str(existing.data[0]["id"]))
                .execute()
            )
        else:
            response = (
                self.client.table("user_utensil_mappings")
                .insert(
                    {
                        "user_id": str(user_id),
                        "utensil_type": utensil_type,
                        "grams_per_unit": grams_per_unit,
                        "updated_at": now,
                    }
                )
                .execute()
            )
        if not response.data:
            raise RuntimeError("Failed to save utensil calibration")
        return _parse_calibration(response.data[0])


def _parse_calibration(row: dict[str, object]) -> UtensilCalibration:
    return UtensilCalibration(
        user_id=UUID(row["user_id"]),
        utensil_type=str(row.get("utensil_type", "")),
        grams_per_unit=float(row.get("grams_per_unit") or 0.0),
    )
