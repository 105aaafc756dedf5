"""Tests for unit normalization."""

import pytest

from nutricare.domain.preparation import Unit, UtensilType
from nutricare.services.calibration import UtensilCalibrationService
from nutricare.services.units import UnitNormalizer
from tests.conftest import USER_ID, InMemoryCalibrationRepository


def test_standard_units_convert_to_grams() -> None:
    normalizer = UnitNormalizer()

    assert normalizer.to_grams(2, Unit.CUPS, "dal") == 480
    assert normalizer.to_grams(1, Unit.OZ, "almonds") == pytest.approx(28.35)
    assert normalizer.to_grams(3, Unit.TSP, "sugar") == 15
    assert normalizer.to_grams(2, Unit.TBSP, "ghee") == 30
    assert normalizer.to_grams(250, Unit.ML, "milk") == 250
    assert normalizer.to_grams(2, Unit.PIECES, "roti") == 200
    assert normalizer.to_grams(150, "grams", "rice") == 150


def test_unknown_unit_counts_as_grams() -> None:
    normalizer = UnitNormalizer()

    assert normalizer.to_grams(3, "handful", "peanuts") == 3


def test_pieces_with_default_utensil() -> None:
    repository = InMemoryCalibrationRepository()
    normalizer = UnitNormalizer(UtensilCalibrationService(repository))

    resolved = normalizer.resolve(
        USER_ID, 2, Unit.PIECES, "dal", UtensilType.MEDIUM_BOWL
    )

    assert resolved.grams == 300
    assert resolved.used_utensil_conversion is True


def test_pieces_with_user_calibration() -> None:
    repository = InMemoryCalibrationRepository()
    repository.upsert_calibration(USER_ID, UtensilType.SMALL_BOWL.value, 120)
    normalizer = UnitNormalizer(UtensilCalibrationService(repository))

    resolved = normalizer.resolve(
        USER_ID, 2, Unit.PIECES, "dal", UtensilType.SMALL_BOWL
    )

    assert resolved.grams == 240
    assert resolved.used_utensil_conversion is True


def test_calibration_failure_uses_defaults() -> None:
    repository = InMemoryCalibrationRepository(fail=True)
    normalizer = UnitNormalizer(UtensilCalibrationService(repository))

    resolved = normalizer.resolve(USER_ID, 1, Unit.PIECES, "lassi", UtensilType.GLASS)

    assert resolved.grams == 200
    assert resolved.used_utensil_conversion is True


def test_utensil_without_grams_falls_back_to_pieces() -> None:
    repository = InMemoryCalibrationRepository()
    normalizer = UnitNormalizer(UtensilCalibrationService(repository))

    resolved = normalizer.resolve(USER_ID, 2, Unit.PIECES, "thali", UtensilType.CUSTOM)

    assert resolved.grams == 200
    assert resolved.used_utensil_conversion is False


def test_utensil_ignored_for_non_piece_units() -> None:
    repository = InMemoryCalibrationRepository()
    normalizer = UnitNormalizer(UtensilCalibrationService(repository))

    resolved = normalizer.resolve(USER_ID, 150, Unit.GRAMS, "rice", UtensilType.PLATE)

    assert resolved.grams == 150
    assert resolved.used_utensil_conversion is False
