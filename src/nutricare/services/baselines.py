"""Personal calorie baselines learned from meal history."""

import asyncio
import logging
import weakref
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from nutricare.domain.baselines import SideEffectOutcome, UserMealBaseline
from nutricare.domain.errors import BaselineUnavailable
from nutricare.domain.meals import MealLogEntry
from nutricare.domain.nutrition import round_calories

_logger = logging.getLogger(__name__)


class BaselineRepository(Protocol):
    """Persistence interface for per-user meal baselines."""

    def get_baseline(self, user_id: UUID, meal_name: str) -> UserMealBaseline | None:
        """Return the baseline for a meal name, matched case-insensitively."""

    def upsert_baseline(
        self,
        user_id: UUID,
        meal_name: str,
        baseline_calories: float,
        sample_count: int,
    ) -> UserMealBaseline:
        """Create or update the baseline for a meal name."""


class MealHistory(Protocol):
    """Read access to a user's meal logs by name."""

    def list_by_meal_name(self, user_id: UUID, meal_name: str) -> list[MealLogEntry]:
        """Return every log whose meal name matches case-insensitively."""


@dataclass
class _KeyedLocks:
    """One asyncio lock per (user, meal name) key, released when unused."""

    _locks: "weakref.WeakValueDictionary[tuple[UUID, str], asyncio.Lock]" = field(
        default_factory=weakref.WeakValueDictionary
    )

    def get(self, user_id: UUID, meal_name: str) -> asyncio.Lock:
        key = (user_id, _normalize(meal_name))
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


@dataclass
class BaselineService:
    """Reads and recomputes personal baselines.

    Every recomputation re-reads the matching history and stores the exact
    rounded mean. Read-recompute-write runs under a per-key lock so concurrent
    logs or corrections for the same meal do not overwrite each other within
    this process.
    """

    repository: BaselineRepository
    history: MealHistory
    min_samples: int = 5
    _locks: _KeyedLocks = field(default_factory=_KeyedLocks, repr=False)

    def get(self, user_id: UUID, meal_name: str) -> UserMealBaseline | None:
        """Return the stored baseline, raising BaselineUnavailable on failure."""
        try:
            return self.repository.get_baseline(user_id, meal_name)
        except Exception as exc:
            raise BaselineUnavailable(str(exc)) from exc

    def is_mature(self, baseline: UserMealBaseline | None) -> bool:
        """Return True when the baseline has enough samples to replace lookups."""
        return baseline is not None and baseline.sample_count >= self.min_samples

    def lock_for(self, user_id: UUID, meal_name: str) -> asyncio.Lock:
        """Return the lock serializing baseline updates for a meal name."""
        return self._locks.get(user_id, meal_name)

    def upsert(
        self,
        user_id: UUID,
        meal_name: str,
        baseline_calories: float,
        sample_count: int,
    ) -> UserMealBaseline:
        """Persist a baseline without lowering its stored sample count."""
        existing = self.repository.get_baseline(user_id, meal_name)
        if existing is not None and existing.sample_count > sample_count:
            sample_count = existing.sample_count
        return self.repository.upsert_baseline(
            user_id, meal_name, baseline_calories, sample_count
        )

    async def learn_from_history(
        self, user_id: UUID, meal_name: str
    ) -> SideEffectOutcome:
        """Recompute the baseline once the user has enough matching logs."""
        async with self.lock_for(user_id, meal_name):
            try:
                values = [
                    float(entry.adjusted_calories)
                    for entry in self.history.list_by_meal_name(user_id, meal_name)
                ]
                if len(values) < self.min_samples:
                    return SideEffectOutcome(ok=True)
                baseline = self.upsert(
                    user_id, meal_name, _mean(values), sample_count=len(values)
                )
            except Exception as exc:
                _logger.exception(
                    "Baseline auto-learn failed",
                    extra={"user_id": str(user_id), "meal_name": meal_name},
                )
                return SideEffectOutcome(ok=False, error=str(exc))
        _logger.info(
            "Baseline learned: meal=%s calories=%s samples=%s",
            meal_name,
            baseline.baseline_calories,
            baseline.sample_count,
        )
        return SideEffectOutcome(ok=True, baseline=baseline)

    def fold_correction(
        self,
        user_id: UUID,
        meal_name: str,
        previous_values: Sequence[float],
        corrected_calories: float,
    ) -> SideEffectOutcome:
        """Fold a corrected value into the mean of the prior matching logs.

        Callers hold ``lock_for(user_id, meal_name)`` across reading the prior
        values, writing the correction and calling this method.
        """
        values = [*previous_values, corrected_calories]
        try:
            baseline = self.upsert(
                user_id, meal_name, _mean(values), sample_count=len(values)
            )
        except Exception as exc:
            _logger.exception(
                "Baseline correction update failed",
                extra={"user_id": str(user_id), "meal_name": meal_name},
            )
            return SideEffectOutcome(ok=False, error=str(exc))
        return SideEffectOutcome(ok=True, baseline=baseline)


def _mean(values: Sequence[float]) -> int:
    return round_calories(sum(values) / len(values))


def _normalize(meal_name: str) -> str:
    return meal_name.strip().lower()
