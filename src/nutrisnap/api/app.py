"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status

from nutrisnap.api.analyze import MealResponse
from nutrisnap.api.analyze import router as analyze_router
from nutrisnap.api.auth import require_user
from nutrisnap.api.auth import router as auth_router
from nutrisnap.api.i18n import Toast, get_translator, make_toast, toast_error
from nutrisnap.api.i18n import router as i18n_router
from nutrisnap.app_logging import configure_logging
from nutrisnap.containers import AppContainer
from nutrisnap.domain.meals import DailySummary, Meal, MealInput
from nutrisnap.domain.models import CamelModel, UserRecord
from nutrisnap.services.daily_log import InvalidCalorieGoalError
from nutrisnap.services.translation import Translator


class DashboardResponse(CamelModel):
    summary: DailySummary
    meals: list[Meal]


class CalorieGoalRequest(CamelModel):
    calorie_goal: int


class CalorieGoalResponse(CamelModel):
    summary: DailySummary
    toast: Toast


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.container.auth_service.offline:
            logger.warning("Running with offline authentication")
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="NutriSnap", lifespan=lifespan)
    app.state.container = container

    app.include_router(auth_router)
    app.include_router(analyze_router)
    app.include_router(i18n_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/", response_model=DashboardResponse, response_model_exclude_none=True)
    async def dashboard(
        request: Request, user: UserRecord = Depends(require_user)
    ) -> DashboardResponse:
        """Return today's totals, goal progress and meals."""
        state_container: AppContainer = request.app.state.container
        service = state_container.daily_log_service
        return DashboardResponse(
            summary=service.summarize(user.uid),
            meals=service.list_meals(user.uid),
        )

    @app.get("/meals", response_model=list[Meal], response_model_exclude_none=True)
    async def list_meals(
        request: Request, user: UserRecord = Depends(require_user)
    ) -> list[Meal]:
        """Return logged meals in the order they were added."""
        state_container: AppContainer = request.app.state.container
        return state_container.daily_log_service.list_meals(user.uid)

    @app.post(
        "/meals",
        response_model=MealResponse,
        response_model_exclude_none=True,
        status_code=status.HTTP_201_CREATED,
    )
    async def add_meal(
        payload: MealInput,
        request: Request,
        user: UserRecord = Depends(require_user),
        translator: Translator = Depends(get_translator),
    ) -> MealResponse:
        """Log a meal entered manually."""
        state_container: AppContainer = request.app.state.container
        meal = state_container.daily_log_service.add_meal(user.uid, payload)
        logger.info("Meal added", extra={"uid": user.uid, "meal_id": meal.id})
        return MealResponse(
            meal=meal,
            toast=make_toast(
                translator,
                "addMeal.toast.success_title",
                "addMeal.toast.success_description",
                name=meal.name,
            ),
        )

    @app.put("/calorie-goal", response_model=CalorieGoalResponse)
    async def set_calorie_goal(
        payload: CalorieGoalRequest,
        request: Request,
        user: UserRecord = Depends(require_user),
        translator: Translator = Depends(get_translator),
    ) -> CalorieGoalResponse:
        """Change the daily calorie goal."""
        state_container: AppContainer = request.app.state.container
        service = state_container.daily_log_service
        try:
            goal = service.set_calorie_goal(user.uid, payload.calorie_goal)
        except InvalidCalorieGoalError as exc:
            raise toast_error(
                request,
                status.HTTP_400_BAD_REQUEST,
                translator,
                "dashboard.goal.error_title",
                "dashboard.goal.error_description",
            ) from exc
        return CalorieGoalResponse(
            summary=service.summarize(user.uid),
            toast=make_toast(
                translator,
                "dashboard.goal.success_title",
                "dashboard.goal.success_description",
                goal=goal,
            ),
        )

    return app
