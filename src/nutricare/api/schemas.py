"""Pydantic request models for the public API."""

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from nutricare.domain.preparation import (
    CookingIntensity,
    DairyType,
    FoodCategory,
    MealType,
    OilType,
    SpiceLevel,
    SugarType,
    Unit,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DetectCategoryRequest(BaseModel):
    """Meal name to classify."""

    name: str | None = None


class LogMealRequest(_CamelModel):
    """Meal to estimate and log."""

    meal_name: str = Field(alias="mealName", min_length=1)
    meal_type: MealType = Field(alias="mealType")
    quantity: StrictInt | StrictFloat
    unit: Unit
    oil_type: OilType = Field(default=OilType.NO_OIL, alias="oilType")
    milk_type: DairyType = Field(default=DairyType.NONE, alias="milkType")
    cooking_intensity: CookingIntensity = Field(
        default=CookingIntensity.NORMAL, alias="cookingIntensity"
    )
    sugar_type: SugarType = Field(default=SugarType.NO_SUGAR, alias="sugarType")
    spice_level: SpiceLevel = Field(default=SpiceLevel.NORMAL, alias="spiceLevel")
    utensil_type: str | None = Field(default=None, alias="utensilType")
    category: FoodCategory | None = None


class CorrectionRequest(_CamelModel):
    """Signed percentage applied to a logged meal's calories."""

    percent_change: StrictInt | StrictFloat = Field(alias="percentChange")


class UtensilCalibrationItem(_CamelModel):
    """Grams held by one serving container."""

    utensil_type: str = Field(alias="utensilType")
    grams_per_unit: StrictInt | StrictFloat = Field(alias="gramsPerUnit")


class SaveCalibrationRequest(_CamelModel):
    """Calibrations to save for the current user."""

    calibration_data: list[UtensilCalibrationItem] = Field(alias="calibrationData")
