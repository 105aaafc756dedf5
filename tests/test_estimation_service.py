"""Tests for the estimation orchestrator."""

import asyncio
import math

import httpx
import pytest

from nutricare.domain.errors import FoodNotRecognized, InvalidInput, LookupUnavailable
from nutricare.domain.meals import EstimateRequest
from nutricare.domain.preparation import (
    CookingIntensity,
    OilType,
    PreparationContext,
    Unit,
    UtensilType,
)
from tests.conftest import OTHER_USER_ID, USER_ID


def _request(food_name: str = "Chicken Breast", quantity: float = 200, **context):
    return EstimateRequest(
        food_name=food_name,
        quantity=quantity,
        unit=Unit.GRAMS,
        context=PreparationContext(**context),
    )


def test_estimate_uses_lookup_and_multipliers(container, meal_log_repository) -> None:
    estimate = asyncio.run(
        container.estimation_service.estimate(
            USER_ID,
            _request(
                oil_type=OilType.DESI_GHEE,
                cooking_intensity=CookingIntensity.DEEP_FRIED,
            ),
        )
    )

    assert estimate.base_calories == 330
    assert estimate.multiplier == pytest.approx(1.625)
    assert estimate.adjusted_calories == 536
    assert estimate.used_baseline is False
    assert estimate.macros.protein_g == 62
    assert meal_log_repository.logs == {}


def test_mature_baseline_replaces_lookup(container, baseline_repository) -> None:
    baseline_repository.seed("Chicken Breast", 250, samples=5)

    estimate = asyncio.run(
        container.estimation_service.estimate(
            USER_ID, _request("chicken breast", oil_type=OilType.REFINED)
        )
    )

    assert estimate.base_calories == 250
    assert estimate.adjusted_calories == 275
    assert estimate.used_baseline is True
    assert estimate.macros.calories == 250
    assert estimate.macros.protein_g == 62


def test_mature_baseline_survives_provider_outage(
    container, baseline_repository, fdc_client
) -> None:
    baseline_repository.seed("Chicken Breast", 250, samples=7)
    fdc_client.error = httpx.ConnectError("down")

    estimate = asyncio.run(container.estimation_service.estimate(USER_ID, _request()))

    assert estimate.base_calories == 250
    assert estimate.used_baseline is True
    assert estimate.macros.protein_g == 0


def test_immature_baseline_defers_to_lookup(container, baseline_repository) -> None:
    baseline_repository.seed("Chicken Breast", 250, samples=3)

    estimate = asyncio.run(container.estimation_service.estimate(USER_ID, _request()))

    assert estimate.base_calories == 330
    assert estimate.used_baseline is False


def test_immature_baseline_used_when_provider_unavailable(
    container, baseline_repository, fdc_client
) -> None:
    baseline_repository.seed("Chicken Breast", 250, samples=1)
    fdc_client.error = httpx.ReadTimeout("slow")

    estimate = asyncio.run(container.estimation_service.estimate(USER_ID, _request()))

    assert estimate.base_calories == 250
    assert estimate.adjusted_calories == 250
    assert estimate.used_baseline is True
    assert estimate.macros.protein_g == 0


def test_provider_unavailable_without_baseline(container, fdc_client) -> None:
    fdc_client.error = httpx.ConnectError("down")

    with pytest.raises(LookupUnavailable):
        asyncio.run(container.estimation_service.estimate(USER_ID, _request()))


def test_baselines_are_per_user(container, baseline_repository, fdc_client) -> None:
    baseline_repository.seed("Chicken Breast", 250, samples=9, user_id=OTHER_USER_ID)
    fdc_client.error = httpx.ConnectError("down")

    with pytest.raises(LookupUnavailable):
        asyncio.run(container.estimation_service.estimate(USER_ID, _request()))


def test_unrecognized_food_is_not_masked_by_baseline(
    container, baseline_repository, fdc_client
) -> None:
    baseline_repository.seed("Chicken Breast", 250, samples=2)
    fdc_client.search_payload = {"foods": []}

    with pytest.raises(FoodNotRecognized):
        asyncio.run(container.estimation_service.estimate(USER_ID, _request()))


def test_baseline_read_failure_falls_back_to_lookup(
    container, baseline_repository
) -> None:
    baseline_repository.fail_reads = True

    estimate = asyncio.run(container.estimation_service.estimate(USER_ID, _request()))

    assert estimate.base_calories == 330
    assert estimate.used_baseline is False


def test_utensil_pieces_are_converted(container, fdc_client) -> None:
    request = EstimateRequest(
        food_name="Chicken Breast",
        quantity=2,
        unit=Unit.PIECES,
        context=PreparationContext(utensil_type=UtensilType.MEDIUM_BOWL.value),
    )

    estimate = asyncio.run(container.estimation_service.estimate(USER_ID, request))

    assert estimate.grams == 300
    assert estimate.base_calories == 495
    assert estimate.used_utensil_conversion is True


def test_user_calibrated_utensil_is_converted(container) -> None:
    container.calibration_service.save(USER_ID, [("Tiffin", 400)])
    request = EstimateRequest(
        food_name="Poha",
        quantity=1,
        unit=Unit.PIECES,
        context=PreparationContext(utensil_type="Tiffin"),
    )

    estimate = asyncio.run(container.estimation_service.estimate(USER_ID, request))
    other = asyncio.run(container.estimation_service.estimate(OTHER_USER_ID, request))

    assert estimate.grams == 400
    assert estimate.base_calories == 660
    assert estimate.used_utensil_conversion is True
    assert other.used_utensil_conversion is False


@pytest.mark.parametrize(
    ("request_kwargs", "field"),
    [
        ({"food_name": "  "}, "mealName"),
        ({"quantity": 0}, "quantity"),
        ({"quantity": -5}, "quantity"),
        ({"quantity": math.nan}, "quantity"),
        ({"quantity": math.inf}, "quantity"),
        ({"quantity": True}, "quantity"),
        ({"unit": "grams"}, "unit"),
    ],
)
def test_invalid_requests_fail_before_io(
    container, fdc_client, request_kwargs, field
) -> None:
    values = {"food_name": "Chicken Breast", "quantity": 100, "unit": Unit.GRAMS}
    values.update(request_kwargs)

    with pytest.raises(InvalidInput) as excinfo:
        asyncio.run(
            container.estimation_service.estimate(USER_ID, EstimateRequest(**values))
        )

    assert excinfo.value.field == field
    assert fdc_client.search_calls == []
