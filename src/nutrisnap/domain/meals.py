"""Domain models for meal logging."""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from nutrisnap.domain.models import CamelModel

MACRO_FIELDS = ("calories", "protein", "carbs", "fat")

# Grams for fiber and sugar, mg for minerals and vitamin C, mcg for A and D.
OPTIONAL_NUTRIENT_FIELDS = (
    "fiber",
    "sugar",
    "sodium",
    "potassium",
    "calcium",
    "iron",
    "vitamin_a",
    "vitamin_c",
    "vitamin_d",
)


class MealInput(CamelModel):
    """Validated meal payload submitted by a user or built from an analysis."""

    name: str
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fat: float = Field(ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)
    potassium: float | None = Field(default=None, ge=0)
    calcium: float | None = Field(default=None, ge=0)
    iron: float | None = Field(default=None, ge=0)
    vitamin_a: float | None = Field(default=None, ge=0)
    vitamin_c: float | None = Field(default=None, ge=0)
    vitamin_d: float | None = Field(default=None, ge=0)
    image_url: str | None = None
    notes: str | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Meal name must not be empty")
        return cleaned


class Meal(MealInput):
    """A meal stored in a daily log."""

    model_config = ConfigDict(frozen=True)

    id: str
    logged_at: datetime


class MacroBreakdown(CamelModel):
    """Macronutrient grams for charting."""

    protein: float
    carbs: float
    fat: float


class DailySummary(CamelModel):
    """Derived totals for a daily log."""

    calorie_goal: int
    meal_count: int
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    calorie_progress: float
    remaining_calories: float
    macros: MacroBreakdown
    nutrients: dict[str, float]


@dataclass
class DailyLog:
    """Ordered meals and calorie goal for one owner."""

    calorie_goal: int
    meals: list[Meal] = field(default_factory=list)
