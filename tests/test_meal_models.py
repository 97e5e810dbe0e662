"""Tests for meal validation."""

import pytest
from pydantic import ValidationError

from nutrisnap.domain.meals import MealInput


def test_meal_input_accepts_camel_case_payload() -> None:
    meal = MealInput.model_validate(
        {
            "name": "  Oatmeal ",
            "calories": 150,
            "protein": 5,
            "carbs": 27,
            "fat": 3,
            "vitaminD": 1.5,
            "imageUrl": "https://example.com/oats.jpg",
        }
    )

    assert meal.name == "Oatmeal"
    assert meal.vitamin_d == 1.5
    assert meal.image_url == "https://example.com/oats.jpg"
    assert meal.fiber is None


@pytest.mark.parametrize("field", ["calories", "protein", "carbs", "fat", "sodium"])
def test_meal_input_rejects_negative_values(field: str) -> None:
    payload = {"name": "Toast", "calories": 80, "protein": 3, "carbs": 14, "fat": 1}
    payload[field] = -1

    with pytest.raises(ValidationError):
        MealInput.model_validate(payload)


@pytest.mark.parametrize("name", ["", "   "])
def test_meal_input_rejects_blank_name(name: str) -> None:
    with pytest.raises(ValidationError):
        MealInput(name=name, calories=0, protein=0, carbs=0, fat=0)


def test_meal_input_allows_zero_values() -> None:
    meal = MealInput(name="Water", calories=0, protein=0, carbs=0, fat=0)

    assert meal.calories == 0
