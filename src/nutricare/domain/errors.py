"""Errors raised by the estimation engine."""

from uuid import UUID


class EstimationError(Exception):
    """Base class for estimation and logging errors."""


class InvalidInput(EstimationError):
    """Rejected input, reported against a single field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class MealLogNotFound(EstimationError):
    """Meal log is missing or belongs to another user."""

    def __init__(self, meal_log_id: UUID) -> None:
        super().__init__(f"Meal log {meal_log_id} not found")
        self.meal_log_id = meal_log_id


class LookupUnavailable(EstimationError):
    """Nutrition provider failed, timed out, or could not be reached."""


class FoodNotRecognized(EstimationError):
    """Nutrition provider answered but matched no food."""

    def __init__(self, food_name: str) -> None:
        super().__init__(f"Food not found in nutrition database: {food_name}")
        self.food_name = food_name


class BaselineUnavailable(EstimationError):
    """Personal baseline store could not be read or written."""
