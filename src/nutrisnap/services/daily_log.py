"""Daily meal log service."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4
from zoneinfo import ZoneInfo

from pydantic.alias_generators import to_camel

from nutrisnap.domain.analysis import FoodAnalysisResult
from nutrisnap.domain.meals import (
    OPTIONAL_NUTRIENT_FIELDS,
    DailyLog,
    DailySummary,
    MacroBreakdown,
    Meal,
    MealInput,
)


class InvalidCalorieGoalError(ValueError):
    """Raised when a calorie goal is not a positive whole number."""


class DailyLogRepository(Protocol):
    """Storage interface for per-owner daily logs."""

    def get_log(self, owner_id: str) -> DailyLog:
        """Return the log for an owner, creating an empty one if needed."""

    def append_meal(self, owner_id: str, meal: Meal) -> None:
        """Append a meal to the owner's log."""

    def set_calorie_goal(self, owner_id: str, goal: int) -> None:
        """Replace the owner's calorie goal."""


@dataclass
class MealTotals:
    """Summed nutrients for a list of meals."""

    calories: float
    protein: float
    carbs: float
    fat: float
    nutrients: dict[str, float]


@dataclass
class DailyLogService:
    """Meal log with a calorie goal per owner; totals cover the current day."""

    repository: DailyLogRepository
    timezone_name: str = "UTC"

    def add_meal(self, owner_id: str, meal_input: MealInput) -> Meal:
        """Append a meal with a generated id and return it."""
        meal = Meal(
            **meal_input.model_dump(),
            id=str(uuid4()),
            logged_at=datetime.now(tz=UTC),
        )
        self.repository.append_meal(owner_id, meal)
        return meal

    def list_meals(self, owner_id: str) -> list[Meal]:
        """Return today's meals in insertion order."""
        return self._today_meals(self.repository.get_log(owner_id))

    def get_calorie_goal(self, owner_id: str) -> int:
        """Return the owner's calorie goal."""
        return self.repository.get_log(owner_id).calorie_goal

    def set_calorie_goal(self, owner_id: str, goal: int) -> int:
        """Set a positive calorie goal."""
        if isinstance(goal, bool) or not isinstance(goal, int) or goal <= 0:
            raise InvalidCalorieGoalError("Calorie goal must be a positive integer")
        self.repository.set_calorie_goal(owner_id, goal)
        return goal

    def summarize(self, owner_id: str) -> DailySummary:
        """Return today's totals, goal progress and macro breakdown."""
        log = self.repository.get_log(owner_id)
        meals = self._today_meals(log)
        totals = sum_totals(meals)
        return DailySummary(
            calorie_goal=log.calorie_goal,
            meal_count=len(meals),
            total_calories=totals.calories,
            total_protein=totals.protein,
            total_carbs=totals.carbs,
            total_fat=totals.fat,
            calorie_progress=calorie_progress(totals.calories, log.calorie_goal),
            remaining_calories=max(log.calorie_goal - totals.calories, 0.0),
            macros=MacroBreakdown(
                protein=totals.protein, carbs=totals.carbs, fat=totals.fat
            ),
            nutrients=totals.nutrients,
        )

    def remaining_calories(self, owner_id: str) -> float:
        """Return the calories left today before the goal is reached."""
        log = self.repository.get_log(owner_id)
        consumed = sum_totals(self._today_meals(log)).calories
        return max(log.calorie_goal - consumed, 0.0)

    def log_analysis(
        self,
        owner_id: str,
        analysis: FoodAnalysisResult,
        *,
        fallback_name: str,
        dish_name: str | None = None,
        image_url: str | None = None,
        notes: str | None = None,
    ) -> Meal:
        """Log an AI analysis result as a meal."""
        return self.add_meal(
            owner_id,
            meal_input_from_analysis(
                analysis,
                fallback_name=fallback_name,
                dish_name=dish_name,
                image_url=image_url,
                notes=notes,
            ),
        )

    def _today_meals(self, log: DailyLog) -> list[Meal]:
        tz = ZoneInfo(self.timezone_name)
        today = datetime.now(tz=tz).date()
        return [
            meal for meal in log.meals if meal.logged_at.astimezone(tz).date() == today
        ]


def meal_input_from_analysis(
    analysis: FoodAnalysisResult,
    *,
    fallback_name: str,
    dish_name: str | None = None,
    image_url: str | None = None,
    notes: str | None = None,
) -> MealInput:
    """Build a meal from an analysis; unknown macros count as zero."""
    items = [item.strip() for item in analysis.food_items if item.strip()]
    name = ", ".join(items) or (dish_name or "").strip() or fallback_name
    nutrients = {
        field: _non_negative(getattr(analysis, field))
        for field in OPTIONAL_NUTRIENT_FIELDS
    }
    return MealInput(
        name=name,
        calories=_non_negative(analysis.estimated_calories) or 0.0,
        protein=_non_negative(analysis.protein) or 0.0,
        carbs=_non_negative(analysis.carbs) or 0.0,
        fat=_non_negative(analysis.fat) or 0.0,
        image_url=image_url,
        notes=notes,
        **nutrients,
    )


def calorie_progress(consumed: float, goal: float) -> float:
    """Return consumed calories as a percentage of the goal."""
    if goal <= 0:
        return 0.0
    return consumed / goal * 100


def sum_totals(meals: Iterable[MealInput]) -> MealTotals:
    """Sum macros and any optional nutrients present across meals."""
    totals = MealTotals(calories=0.0, protein=0.0, carbs=0.0, fat=0.0, nutrients={})
    for meal in meals:
        totals.calories += meal.calories
        totals.protein += meal.protein
        totals.carbs += meal.carbs
        totals.fat += meal.fat
        for field in OPTIONAL_NUTRIENT_FIELDS:
            value = getattr(meal, field)
            if value is None:
                continue
            key = to_camel(field)
            totals.nutrients[key] = totals.nutrients.get(key, 0.0) + value
    return totals


def _non_negative(value: float | None) -> float | None:
    if value is None:
        return None
    return max(value, 0.0)
