"""Endpoints for AI meal analysis and suggestions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status

from nutrisnap.api.auth import require_user
from nutrisnap.api.i18n import Toast, get_translator, make_toast, toast_error
from nutrisnap.domain.analysis import (
    AnalyzeDishNameInput,
    AnalyzeFoodImageInput,
    FoodAnalysisResult,
    SuggestMealsInput,
)
from nutrisnap.domain.meals import Meal
from nutrisnap.domain.models import CamelModel, UserRecord
from nutrisnap.services.flows import FlowError, InvalidDataUriError
from nutrisnap.services.translation import Translator

if TYPE_CHECKING:
    from nutrisnap.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyze"])


class AnalysisResponse(CamelModel):
    result: FoodAnalysisResult
    toast: Toast


class LogAnalysisRequest(CamelModel):
    result: FoodAnalysisResult
    dish_name: str | None = None
    image_url: str | None = None
    notes: str | None = None


class MealResponse(CamelModel):
    meal: Meal
    toast: Toast


class SuggestionsResponse(CamelModel):
    meals: list[str]
    remaining_calories: float | None = None


@router.post(
    "/analyze/dish", response_model=AnalysisResponse, response_model_exclude_none=True
)
async def analyze_dish(
    payload: AnalyzeDishNameInput,
    request: Request,
    user: UserRecord = Depends(require_user),
    translator: Translator = Depends(get_translator),
) -> AnalysisResponse:
    """Analyze a dish by name."""
    container: AppContainer = request.app.state.container
    if not payload.dish_name.strip():
        raise toast_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            translator,
            "analyze.searchCard.error_no_dish_title",
            "analyze.searchCard.error_no_dish_description",
        )
    try:
        result = await container.flow_service.analyze_dish_name(payload)
    except FlowError as exc:
        raise _analysis_failed(request, translator, exc) from exc
    return AnalysisResponse(result=result, toast=_analysis_toast(translator, result))


@router.post(
    "/analyze/image", response_model=AnalysisResponse, response_model_exclude_none=True
)
async def analyze_image(
    payload: AnalyzeFoodImageInput,
    request: Request,
    user: UserRecord = Depends(require_user),
    translator: Translator = Depends(get_translator),
) -> AnalysisResponse:
    """Analyze a meal photo sent as a data URI."""
    container: AppContainer = request.app.state.container
    try:
        result = await container.flow_service.analyze_food_image(payload)
    except InvalidDataUriError as exc:
        raise _invalid_image(request, translator, exc) from exc
    except FlowError as exc:
        raise _analysis_failed(request, translator, exc) from exc
    return AnalysisResponse(result=result, toast=_analysis_toast(translator, result))


@router.post(
    "/analyze/upload",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
)
async def analyze_upload(
    request: Request,
    photo: UploadFile = File(...),
    portion_size: str | None = Form(default=None, alias="portionSize"),
    user: UserRecord = Depends(require_user),
    translator: Translator = Depends(get_translator),
) -> AnalysisResponse:
    """Analyze an uploaded meal photo."""
    container: AppContainer = request.app.state.container
    image_bytes = await photo.read()
    if not image_bytes:
        raise _invalid_image(request, translator, None)
    try:
        result = await container.flow_service.analyze_food_image_bytes(
            image_bytes, portion_size=portion_size
        )
    except FlowError as exc:
        raise _analysis_failed(request, translator, exc) from exc
    return AnalysisResponse(result=result, toast=_analysis_toast(translator, result))


@router.post(
    "/analyze/log",
    response_model=MealResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def log_analysis(
    payload: LogAnalysisRequest,
    request: Request,
    user: UserRecord = Depends(require_user),
    translator: Translator = Depends(get_translator),
) -> MealResponse:
    """Add a reviewed analysis result to the daily log."""
    container: AppContainer = request.app.state.container
    meal = container.daily_log_service.log_analysis(
        user.uid,
        payload.result,
        fallback_name=translator.t("analyze.analyzedMealName"),
        dish_name=payload.dish_name,
        image_url=payload.image_url,
        notes=payload.notes,
    )
    return MealResponse(
        meal=meal,
        toast=make_toast(
            translator,
            "analyze.reviewCard.log_success_toast_title",
            "analyze.reviewCard.log_success_toast_description",
        ),
    )


@router.post("/suggestions", response_model=SuggestionsResponse)
async def suggest_meals(
    payload: SuggestMealsInput,
    request: Request,
    user: UserRecord = Depends(require_user),
    translator: Translator = Depends(get_translator),
) -> SuggestionsResponse:
    """Suggest meals; the budget defaults to the user's remaining calories."""
    container: AppContainer = request.app.state.container
    if payload.remaining_calories is None:
        payload = payload.model_copy(
            update={
                "remaining_calories": container.daily_log_service.remaining_calories(
                    user.uid
                )
            }
        )
    try:
        result = await container.flow_service.suggest_meals(payload)
    except FlowError as exc:
        raise toast_error(
            request,
            status.HTTP_502_BAD_GATEWAY,
            translator,
            "suggestions.toast.error_title",
            "suggestions.toast.error_description",
            exc,
        ) from exc
    return SuggestionsResponse(
        meals=result.meals, remaining_calories=payload.remaining_calories
    )


def _analysis_toast(translator: Translator, result: FoodAnalysisResult) -> Toast:
    if not result.food_items:
        return make_toast(
            translator,
            "analyze.reviewCard.empty_toast_title",
            "analyze.reviewCard.empty_toast_description",
        )
    return make_toast(
        translator,
        "analyze.reviewCard.success_toast_title",
        "analyze.reviewCard.success_toast_description",
    )


def _analysis_failed(request: Request, translator: Translator, exc: FlowError):
    logger.warning("Analysis failed", extra={"flow": exc.flow_name})
    return toast_error(
        request,
        status.HTTP_502_BAD_GATEWAY,
        translator,
        "analyze.reviewCard.error_toast_title",
        "analyze.reviewCard.error_toast_description",
        exc,
    )


def _invalid_image(
    request: Request, translator: Translator, exc: Exception | None
):
    return toast_error(
        request,
        status.HTTP_400_BAD_REQUEST,
        translator,
        "analyze.imageCard.error_invalid_title",
        "analyze.imageCard.error_invalid_description",
        exc,
    )
