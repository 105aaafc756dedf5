"""Nutrition lookup gateway over USDA FDC."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from nutricare.adapters.fdc_client import FdcClient
from nutricare.domain.errors import FoodNotRecognized, LookupUnavailable
from nutricare.domain.nutrition import (
    FoodDetails,
    FoodSummary,
    MacroProfile,
    NutritionLookup,
    round_calories,
)
from nutricare.domain.preparation import Unit
from nutricare.services.cache import Cache
from nutricare.services.units import UnitNormalizer

_NUTRIENT_IDS = {
    "calories": (1008, 2047, 2048),
    "protein": (1003,),
    "fat": (1004,),
    "carbs": (1005,),
    "fiber": (1079,),
    "sugar": (2000, 1063),
    "sodium": (1093,),
}

_MIN_QUERY_LENGTH = 2
_HTTP_NOT_FOUND = 404

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutritionService:
    """Resolves calories and macros for a food quantity from FDC."""

    fdc_client: FdcClient
    cache: Cache
    unit_normalizer: UnitNormalizer = field(default_factory=UnitNormalizer)
    search_ttl_seconds: int = 3600
    debug: bool = False

    async def lookup(
        self, food_name: str, quantity: float, unit: Unit | str = Unit.GRAMS
    ) -> NutritionLookup:
        """Return nutrition for a quantity of food.

        Raises FoodNotRecognized when FDC has no match and LookupUnavailable
        when FDC errors, times out or cannot be reached. Results are not
        cached.
        """
        grams = self.unit_normalizer.to_grams(quantity, unit, food_name)
        payload = await self._call(
            lambda: self.fdc_client.search_foods(food_name, page_size=1),
            action="search",
            food_name=food_name,
        )
        foods = payload.get("foods") or []
        if not foods:
            raise FoodNotRecognized(food_name)
        fdc_id = foods[0]["fdcId"]
        details = _parse_details(
            await self._call(
                lambda: self.fdc_client.get_food(fdc_id),
                action=f"get_food:{fdc_id}",
                food_name=food_name,
            )
        )
        if self.debug:
            _logger.info(
                "Nutrition lookup FDC: food=%s fdc_id=%s grams=%s",
                food_name,
                fdc_id,
                grams,
            )
        return NutritionLookup(
            food=details.summary,
            grams=grams,
            macros=_round_macros(details.macros.scaled(grams / 100.0)),
        )

    async def search(self, query: str, limit: int = 5) -> list[FoodSummary]:
        """Search FDC foods for autocomplete, with caching."""
        cleaned = query.strip()
        if len(cleaned) < _MIN_QUERY_LENGTH:
            return []
        cache_key = f"fdc:search:{cleaned.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call(
            lambda: self.fdc_client.search_foods(cleaned, page_size=limit),
            action="search",
            food_name=cleaned,
        )
        foods = [_parse_summary(food) for food in payload.get("foods") or []]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        return foods

    async def _call(
        self,
        func: "Callable[[], Awaitable[dict[str, object]]]",
        *,
        action: str,
        food_name: str,
    ) -> dict[str, object]:
        """Call FDC once, translating failures into lookup errors."""
        try:
            return await func()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            _logger.warning(
                "Nutrition %s failed (status=%s): %s", action, status_code, exc
            )
            if status_code == _HTTP_NOT_FOUND:
                raise FoodNotRecognized(food_name) from exc
            raise LookupUnavailable(
                f"Nutrition data unavailable (status {status_code})"
            ) from exc
        except Exception as exc:
            _logger.warning(
                "Nutrition %s failed (status=%s): %s",
                action,
                _status_code_from_exception(exc),
                exc,
            )
            raise LookupUnavailable("Nutrition data unavailable") from exc


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _parse_summary(food: dict[str, object]) -> FoodSummary:
    return FoodSummary(
        fdc_id=food["fdcId"],
        description=food.get("description", ""),
        brand_owner=food.get("brandOwner"),
        brand_name=food.get("brandName"),
        data_type=food.get("dataType"),
    )


def _parse_details(payload: dict[str, object]) -> FoodDetails:
    return FoodDetails(
        summary=_parse_summary(payload),
        macros=_extract_macros(payload.get("foodNutrients") or []),
        serving_size_g=payload.get("servingSize"),
    )


def _extract_macros(food_nutrients: list[dict[str, object]]) -> MacroProfile:
    """Extract per-100 g calories and macros from FDC nutrients."""
    values = dict.fromkeys(_NUTRIENT_IDS, 0.0)
    found: set[str] = set()
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("amount", nutrient.get("value"))
        if amount is None:
            continue
        for name, ids in _NUTRIENT_IDS.items():
            if name not in found and nutrient_id in ids:
                values[name] = float(amount)
                found.add(name)

    return MacroProfile(
        calories=values["calories"],
        protein_g=values["protein"],
        fat_g=values["fat"],
        carbs_g=values["carbs"],
        fiber_g=values["fiber"],
        sugar_g=values["sugar"],
        sodium_mg=values["sodium"],
    )


def _round_macros(macros: MacroProfile) -> MacroProfile:
    return MacroProfile(
        calories=float(round_calories(macros.calories)),
        protein_g=round(macros.protein_g, 2),
        fat_g=round(macros.fat_g, 2),
        carbs_g=round(macros.carbs_g, 2),
        fiber_g=round(macros.fiber_g, 2),
        sugar_g=round(macros.sugar_g, 2),
        sodium_mg=round(macros.sodium_mg, 2),
    )
