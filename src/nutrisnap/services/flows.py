"""Prompt flows that call a hosted model with structured outputs."""

import base64
import logging
import re
from dataclasses import dataclass
from typing import Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from nutrisnap.domain.analysis import (
    AnalyzeDishNameInput,
    AnalyzeFoodImageInput,
    FoodAnalysisResult,
    SuggestMealsInput,
    SuggestMealsResult,
)

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$")

_NUMBER_OR_NULL: dict[str, object] = {"anyOf": [{"type": "number"}, {"type": "null"}]}

_ANALYSIS_NUTRIENT_KEYS = (
    "estimatedCalories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sugar",
    "sodium",
    "potassium",
    "calcium",
    "iron",
    "vitaminA",
    "vitaminC",
    "vitaminD",
)

FOOD_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "foodItems": {"type": "array", "items": {"type": "string"}},
        **{key: _NUMBER_OR_NULL for key in _ANALYSIS_NUTRIENT_KEYS},
    },
    "required": ["foodItems", *_ANALYSIS_NUTRIENT_KEYS],
    "additionalProperties": False,
}

SUGGEST_MEALS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"meals": {"type": "array", "items": {"type": "string"}}},
    "required": ["meals"],
    "additionalProperties": False,
}

_ANALYSIS_RULES = (
    "- Return ONLY a valid JSON object adhering to the specified schema.\n"
    "- Provide estimates for all available nutritional values.\n"
    '- All nutritional values MUST be numbers. Do not include units (e.g., "g" '
    'or "kcal").\n'
    "- Protein, carbs, fat, fiber and sugar are grams. Sodium, potassium, "
    "calcium, iron and vitamin C are milligrams. Vitamin A (RAE) and vitamin D "
    "are micrograms.\n"
    "- If a specific nutritional value cannot be estimated, set it to null. "
    'Do not use placeholder values like 0 or "N/A".\n'
)

_DISH_NAME_EXAMPLE = """
Example of a valid response for "A slice of cheese pizza":
{"foodItems": ["pizza crust", "tomato sauce", "cheese"], "estimatedCalories": 285,
 "protein": 12, "carbs": 36, "fat": 10, ...remaining nutrients or null}
"""

_IMAGE_EXAMPLE = """
Example of a valid response for an image of a salad:
{"foodItems": ["lettuce", "tomato", "cucumber", "chicken breast", "croutons",
 "caesar dressing"], "estimatedCalories": 350, "protein": 25, "carbs": 15,
 "fat": 20, ...remaining nutrients or null}
"""


class FlowError(RuntimeError):
    """Raised when a flow cannot reach the model."""

    def __init__(self, flow_name: str, message: str) -> None:
        super().__init__(message)
        self.flow_name = flow_name


class InvalidDataUriError(ValueError):
    """Raised when a photo is not a base64 data URI."""


class StructuredModelClient(Protocol):
    """Interface for hosted models that return schema-shaped JSON."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
        image_data_url: str | None = None,
    ) -> dict[str, object] | None:
        """Return parsed JSON output, or None when the model produced none."""


@dataclass
class FlowService:
    """Runs the dish-name, food-image and meal-suggestion flows."""

    client: StructuredModelClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze_dish_name(
        self, request: AnalyzeDishNameInput
    ) -> FoodAnalysisResult:
        """Identify food items in a named dish and estimate its nutrients."""
        raw = await self._run(
            "analyzeDishName",
            schema=FOOD_ANALYSIS_SCHEMA,
            prompt=build_dish_name_prompt(request),
        )
        return _coerce("analyzeDishName", raw, FoodAnalysisResult)

    async def analyze_food_image(
        self, request: AnalyzeFoodImageInput
    ) -> FoodAnalysisResult:
        """Identify food items in a photo and estimate its nutrients."""
        validate_data_uri(request.photo_data_uri)
        raw = await self._run(
            "analyzeFoodImage",
            schema=FOOD_ANALYSIS_SCHEMA,
            prompt=build_food_image_prompt(request),
            image_data_url=request.photo_data_uri,
        )
        return _coerce("analyzeFoodImage", raw, FoodAnalysisResult)

    async def analyze_food_image_bytes(
        self, image_bytes: bytes, portion_size: str | None = None
    ) -> FoodAnalysisResult:
        """Analyze raw image bytes, e.g. from a file upload."""
        request = AnalyzeFoodImageInput(
            photo_data_uri=to_data_url(image_bytes), portion_size=portion_size
        )
        return await self.analyze_food_image(request)

    async def suggest_meals(self, request: SuggestMealsInput) -> SuggestMealsResult:
        """Suggest meals that match preferences and the calorie budget."""
        raw = await self._run(
            "suggestMeals",
            schema=SUGGEST_MEALS_SCHEMA,
            prompt=build_suggest_meals_prompt(request),
        )
        return _coerce("suggestMeals", raw, SuggestMealsResult)

    async def _run(
        self,
        flow_name: str,
        *,
        schema: dict[str, object],
        prompt: str,
        image_data_url: str | None = None,
    ) -> dict[str, object] | None:
        try:
            return await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                schema_name=flow_name,
                schema=schema,
                prompt=prompt,
                image_data_url=image_data_url,
            )
        except Exception as exc:
            logger.exception("Model call failed", extra={"flow": flow_name})
            raise FlowError(flow_name, f"{flow_name} model call failed") from exc


def build_dish_name_prompt(request: AnalyzeDishNameInput) -> str:
    """Render the dish-name analysis prompt."""
    lines = [
        "Analyze the nutritional content of the following dish.",
        "",
        f"Dish: {request.dish_name.strip()}",
    ]
    if request.portion_size:
        lines.append(f"Portion: {request.portion_size}")
    lines.extend(
        [
            "",
            "Your task is to identify the food items and estimate their "
            "nutritional content.",
            "- Identify the individual food items.",
            _ANALYSIS_RULES
            + '- If the input is not a recognizable food, return an empty "foodItems" '
            "array and null for every other field.",
            _DISH_NAME_EXAMPLE,
        ]
    )
    return "\n".join(lines)


def build_food_image_prompt(request: AnalyzeFoodImageInput) -> str:
    """Render the food-image analysis prompt; the image is sent separately."""
    lines = ["Analyze the nutritional content of the meal in the attached image."]
    if request.portion_size:
        lines.append(f"Portion: {request.portion_size}")
    lines.extend(
        [
            "",
            "Your task is to identify the food items and estimate their "
            "nutritional content from the image.",
            "- Identify the individual food items in the image.",
            "- Use the provided portion size if available, otherwise estimate "
            "from the image.",
            _ANALYSIS_RULES
            + '- If the image does not contain food, return an empty "foodItems" '
            "array and null for every other field.",
            _IMAGE_EXAMPLE,
        ]
    )
    return "\n".join(lines)


def build_suggest_meals_prompt(request: SuggestMealsInput) -> str:
    """Render the meal suggestion prompt."""
    lines = [
        "You are an automated meal suggestion service. "
        "Your ONLY function is to return a JSON object.",
        "",
        "Based on the user's requirements, generate a list of meal suggestions.",
        "",
        "Rules:",
        "- Your entire response MUST be a single, valid JSON object.",
        "- The JSON object must strictly match the provided schema.",
        "- If you cannot generate suggestions for any reason, return "
        '{"meals": []}.',
        "",
        "User's requirements:",
        f"- Dietary Preferences: {request.dietary_preferences}",
        f"- Nutrient Needs: {request.nutrient_needs}",
    ]
    if request.disliked_ingredients:
        lines.append(f"- Disliked Ingredients: {request.disliked_ingredients}")
    if request.remaining_calories:
        budget = f"{request.remaining_calories:.0f}"
        lines.extend(
            [
                f"- Remaining Calorie Budget: {budget} kcal for all suggested "
                "meals combined.",
                "- The total calories of all suggested meals MUST NOT exceed the "
                "remaining calorie budget.",
                "- Each meal suggestion MUST include an estimated calorie count. "
                'For example: "Grilled Salmon with Asparagus (~450 calories)".',
            ]
        )
    lines.extend(
        [
            "",
            "Task:",
            f"- Suggest exactly {request.number_of_meals} meals that satisfy "
            "these requirements.",
        ]
    )
    return "\n".join(lines)


def validate_data_uri(value: str) -> str:
    """Return the MIME type of a base64 data URI or raise InvalidDataUriError."""
    match = _DATA_URI_PATTERN.match(value.strip())
    if match is None:
        raise InvalidDataUriError(
            "Expected a data URI like 'data:<mimetype>;base64,<encoded_data>'"
        )
    return match.group("mime")


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _coerce(
    flow_name: str, raw: dict[str, object] | None, model: type[ResultT]
) -> ResultT:
    """Validate model output, falling back to the schema's empty result."""
    if raw is None:
        logger.warning("Model returned no output", extra={"flow": flow_name})
        return model()
    try:
        return model.model_validate(raw)
    except ValidationError:
        logger.warning(
            "Model output failed schema validation",
            extra={"flow": flow_name},
            exc_info=True,
        )
        return model()
