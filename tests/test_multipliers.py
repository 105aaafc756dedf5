"""Tests for the preparation multiplier model."""

import pytest

from nutricare.domain.preparation import (
    CookingIntensity,
    DairyType,
    OilType,
    PreparationContext,
)
from nutricare.services.multipliers import PreparationMultiplierModel


def test_neutral_context_is_one() -> None:
    model = PreparationMultiplierModel()

    assert model.for_context(PreparationContext()) == 1.0


def test_multipliers_combine_by_product() -> None:
    model = PreparationMultiplierModel()

    value = model.multiplier(
        OilType.DESI_GHEE, DairyType.BUFFALO_MILK, CookingIntensity.DEEP_FRIED
    )

    assert value == pytest.approx(1.3 * 1.25 * 1.25)


def test_boiled_skimmed_reduces_calories() -> None:
    model = PreparationMultiplierModel()

    value = model.for_context(
        PreparationContext(
            dairy_type=DairyType.SKIMMED_MILK,
            cooking_intensity=CookingIntensity.BOILED_STEAMED,
        )
    )

    assert value == pytest.approx(0.72)


def test_raw_values_and_unknown_keys() -> None:
    model = PreparationMultiplierModel()

    assert model.multiplier("Butter", None, None) == pytest.approx(1.25)
    assert model.multiplier("Coconut", "Goat Milk", "Charred") == 1.0
    assert model.multiplier(None, None, None) == 1.0


def test_missing_table_entry_counts_as_one() -> None:
    model = PreparationMultiplierModel(oil={OilType.REFINED: 1.1})

    assert model.multiplier(OilType.MUSTARD, DairyType.NONE, None) == 1.0
    assert model.multiplier(OilType.REFINED, DairyType.NONE, None) == pytest.approx(
        1.1
    )
