"""Input and output models for the AI flows."""

from pydantic import Field

from nutrisnap.domain.models import CamelModel


class AnalyzeDishNameInput(CamelModel):
    """Dish name lookup request."""

    dish_name: str
    portion_size: str | None = None


class AnalyzeFoodImageInput(CamelModel):
    """Photo analysis request; the photo is a base64 data URI."""

    photo_data_uri: str
    portion_size: str | None = None


class FoodAnalysisResult(CamelModel):
    """Food items and nutrient estimates produced by a model."""

    food_items: list[str] = Field(default_factory=list)
    estimated_calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    potassium: float | None = None
    calcium: float | None = None
    iron: float | None = None
    vitamin_a: float | None = None
    vitamin_c: float | None = None
    vitamin_d: float | None = None


class SuggestMealsInput(CamelModel):
    """Meal suggestion request."""

    dietary_preferences: str = Field(min_length=2)
    nutrient_needs: str = Field(min_length=2)
    disliked_ingredients: str | None = None
    number_of_meals: int = Field(ge=1, le=10)
    remaining_calories: float | None = Field(default=None, ge=0)


class SuggestMealsResult(CamelModel):
    """Meal suggestions produced by a model."""

    meals: list[str] = Field(default_factory=list)
