"""Unit normalization to grams."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from uuid import UUID

from nutricare.domain.preparation import Unit, UtensilType
from nutricare.services.calibration import UtensilCalibrationService

UNIT_GRAMS: Mapping[Unit, float] = MappingProxyType(
    {
        Unit.GRAMS: 1.0,
        Unit.ML: 1.0,  # approximation for most liquids
        Unit.OZ: 28.35,
        Unit.TBSP: 15.0,
        Unit.TSP: 5.0,
        Unit.CUPS: 240.0,
        Unit.PIECES: 100.0,
    }
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedQuantity:
    """Gram-equivalent of a logged quantity."""

    grams: float
    used_utensil_conversion: bool = False


@dataclass
class UnitNormalizer:
    """Converts quantities to grams, honouring utensil calibrations."""

    calibration_service: UtensilCalibrationService | None = None
    unit_grams: Mapping[Unit, float] = field(default_factory=lambda: UNIT_GRAMS)

    def to_grams(self, quantity: float, unit: Unit | str, food_name: str) -> float:
        """Return quantity in grams; unknown units count as grams."""
        return quantity * self._multiplier(unit)

    def resolve(
        self,
        user_id: UUID,
        quantity: float,
        unit: Unit | str,
        food_name: str,
        utensil_type: UtensilType | str | None = None,
    ) -> ResolvedQuantity:
        """Resolve grams, counting pieces as utensils when one is given."""
        if _is_pieces(unit) and utensil_type is not None:
            grams_per_unit = self._utensil_grams(user_id, utensil_type)
            if grams_per_unit:
                return ResolvedQuantity(
                    grams=quantity * grams_per_unit, used_utensil_conversion=True
                )
        return ResolvedQuantity(grams=self.to_grams(quantity, unit, food_name))

    def _multiplier(self, unit: Unit | str) -> float:
        if not isinstance(unit, Unit):
            try:
                unit = Unit(unit)
            except ValueError:
                return 1.0
        return self.unit_grams.get(unit, 1.0)

    def _utensil_grams(
        self, user_id: UUID, utensil_type: UtensilType | str
    ) -> float | None:
        name = (
            utensil_type.value
            if isinstance(utensil_type, UtensilType)
            else str(utensil_type)
        )
        if self.calibration_service is None:
            return None
        try:
            return self.calibration_service.grams_per_unit(user_id, name)
        except Exception:
            _logger.warning(
                "Utensil calibration lookup failed",
                extra={"user_id": str(user_id), "utensil_type": name},
                exc_info=True,
            )
            return self.calibration_service.defaults.get(name)


def _is_pieces(unit: Unit | str) -> bool:
    return unit == Unit.PIECES or unit == Unit.PIECES.value
