"""Preparation multiplier model."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from nutricare.domain.preparation import (
    CookingIntensity,
    DairyType,
    OilType,
    PreparationContext,
)

OIL_MULTIPLIERS: Mapping[OilType, float] = MappingProxyType(
    {
        OilType.NO_OIL: 1.0,
        OilType.REFINED: 1.1,
        OilType.MUSTARD: 1.15,
        OilType.OLIVE: 1.05,
        OilType.DESI_GHEE: 1.3,
        OilType.BUTTER: 1.25,
    }
)

DAIRY_MULTIPLIERS: Mapping[DairyType, float] = MappingProxyType(
    {
        DairyType.NONE: 1.0,
        DairyType.COW_MILK: 1.1,
        DairyType.BUFFALO_MILK: 1.25,
        DairyType.SKIMMED_MILK: 0.9,
        DairyType.PLANT_MILK: 0.8,
    }
)

INTENSITY_MULTIPLIERS: Mapping[CookingIntensity, float] = MappingProxyType(
    {
        CookingIntensity.BOILED_STEAMED: 0.8,
        CookingIntensity.LIGHTLY_FRIED: 0.95,
        CookingIntensity.NORMAL: 1.0,
        CookingIntensity.DEEP_FRIED: 1.25,
        CookingIntensity.EXTRA_GHEE: 1.3,
    }
)


@dataclass(frozen=True)
class PreparationMultiplierModel:
    """Maps oil, dairy and cooking intensity to a calorie multiplier."""

    oil: Mapping[OilType, float] = field(default_factory=lambda: OIL_MULTIPLIERS)
    dairy: Mapping[DairyType, float] = field(
        default_factory=lambda: DAIRY_MULTIPLIERS
    )
    intensity: Mapping[CookingIntensity, float] = field(
        default_factory=lambda: INTENSITY_MULTIPLIERS
    )

    def multiplier(
        self,
        oil_type: OilType | str | None,
        dairy_type: DairyType | str | None,
        intensity: CookingIntensity | str | None,
    ) -> float:
        """Return the product of the three table lookups, 1.0 for unknown keys."""
        return (
            _lookup(self.oil, OilType, oil_type)
            * _lookup(self.dairy, DairyType, dairy_type)
            * _lookup(self.intensity, CookingIntensity, intensity)
        )

    def for_context(self, context: PreparationContext) -> float:
        """Return the multiplier for a preparation context."""
        return self.multiplier(
            context.oil_type, context.dairy_type, context.cooking_intensity
        )


def _lookup(table: Mapping, enum_type: type, key: object) -> float:
    """Resolve an enum member or its raw value against a multiplier table."""
    if key is None:
        return 1.0
    if not isinstance(key, enum_type):
        try:
            key = enum_type(key)
        except ValueError:
            return 1.0
    return float(table.get(key, 1.0))
