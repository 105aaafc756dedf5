"""Domain models for personal calorie baselines."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserMealBaseline:
    """Learned calorie baseline for one user and meal name."""

    user_id: UUID
    meal_name: str
    baseline_calories: float
    sample_count: int
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SideEffectOutcome:
    """Result of a best-effort side effect such as baseline learning."""

    ok: bool
    baseline: UserMealBaseline | None = None
    error: str | None = None

    @property
    def updated(self) -> bool:
        """Return True when the side effect wrote a baseline."""
        return self.ok and self.baseline is not None


@dataclass(frozen=True)
class UtensilCalibration:
    """User-specific grams for one serving container."""

    user_id: UUID | None
    utensil_type: str
    grams_per_unit: float
