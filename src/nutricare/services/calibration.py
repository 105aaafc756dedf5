"""Utensil calibration service."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol
from uuid import UUID

from nutricare.domain.baselines import UtensilCalibration
from nutricare.domain.errors import InvalidInput
from nutricare.domain.preparation import UtensilType

DEFAULT_UTENSIL_GRAMS: Mapping[str, float] = MappingProxyType(
    {
        UtensilType.SMALL_BOWL.value: 100.0,
        UtensilType.MEDIUM_BOWL.value: 150.0,
        UtensilType.LARGE_BOWL.value: 250.0,
        UtensilType.PLATE.value: 300.0,
        UtensilType.GLASS.value: 200.0,
    }
)


class CalibrationRepository(Protocol):
    """Persistence interface for utensil calibrations."""

    def list_calibrations(self, user_id: UUID) -> list[UtensilCalibration]:
        """Return all calibrations saved by a user."""

    def upsert_calibration(
        self, user_id: UUID, utensil_type: str, grams_per_unit: float
    ) -> UtensilCalibration:
        """Create or update a user's calibration for a utensil."""


@dataclass
class UtensilCalibrationService:
    """Service for user utensil calibrations with system defaults."""

    repository: CalibrationRepository
    defaults: Mapping[str, float] = field(
        default_factory=lambda: DEFAULT_UTENSIL_GRAMS
    )

    def list_for_user(self, user_id: UUID) -> list[UtensilCalibration]:
        """Return saved calibrations, or the defaults when none exist."""
        saved = self.repository.list_calibrations(user_id)
        if saved:
            return saved
        return [
            UtensilCalibration(user_id=None, utensil_type=name, grams_per_unit=grams)
            for name, grams in self.defaults.items()
        ]

    def save(
        self, user_id: UUID, entries: list[tuple[str, float]]
    ) -> list[UtensilCalibration]:
        """Validate and persist calibrations; nothing is written on bad input."""
        if not entries:
            raise InvalidInput("calibrationData", "at least one utensil is required")
        for index, (utensil_type, grams) in enumerate(entries):
            if not utensil_type or not utensil_type.strip():
                raise InvalidInput(
                    f"calibrationData.{index}.utensilType", "utensil type is required"
                )
            if isinstance(grams, bool) or not isinstance(grams, int | float):
                raise InvalidInput(
                    f"calibrationData.{index}.gramsPerUnit", "must be a number"
                )
            if grams <= 0:
                raise InvalidInput(
                    f"calibrationData.{index}.gramsPerUnit", "must be positive"
                )
        return [
            self.repository.upsert_calibration(user_id, name.strip(), float(grams))
            for name, grams in entries
        ]

    def grams_per_unit(self, user_id: UUID, utensil_type: str) -> float | None:
        """Return the user's grams for a utensil, else the default, else None."""
        for calibration in self.repository.list_calibrations(user_id):
            if (
                calibration.utensil_type == utensil_type
                and calibration.grams_per_unit > 0
            ):
                return calibration.grams_per_unit
        return self.defaults.get(utensil_type)
