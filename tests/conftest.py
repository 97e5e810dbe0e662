"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from nutrisnap.adapters.in_memory_daily_log_repository import (
    InMemoryDailyLogRepository,
)
from nutrisnap.adapters.in_memory_identity_provider import InMemoryIdentityProvider
from nutrisnap.api.app import create_app
from nutrisnap.config import Settings
from nutrisnap.containers import AppContainer
from nutrisnap.services.auth import AuthService
from nutrisnap.services.daily_log import DailyLogService
from nutrisnap.services.flows import FlowService, StructuredModelClient
from nutrisnap.services.translation import TranslationService, load_catalogs

ANALYSIS_PAYLOAD: dict[str, object] = {
    "foodItems": ["pizza crust", "tomato sauce", "cheese"],
    "estimatedCalories": 285,
    "protein": 12,
    "carbs": 36,
    "fat": 10,
    "fiber": None,
    "sugar": None,
    "sodium": 640,
    "potassium": None,
    "calcium": None,
    "iron": None,
    "vitaminA": None,
    "vitaminC": None,
    "vitaminD": None,
}


@dataclass
class FakeModelClient(StructuredModelClient):
    """Fake structured model client that records calls."""

    payload: dict[str, object] | None = field(
        default_factory=lambda: dict(ANALYSIS_PAYLOAD)
    )
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

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
        self.calls.append(
            {
                "model": model,
                "schema_name": schema_name,
                "schema": schema,
                "prompt": prompt,
                "image_data_url": image_data_url,
            }
        )
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        environment="test",
        default_language="en",
    )


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def identity_provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider()


@pytest.fixture
def translation_service() -> TranslationService:
    return TranslationService(
        catalogs=load_catalogs(), default_language="en", fallback_language="en"
    )


@pytest.fixture
def container(
    settings: Settings,
    model_client: FakeModelClient,
    identity_provider: InMemoryIdentityProvider,
    translation_service: TranslationService,
) -> AppContainer:
    flow_service = FlowService(
        client=model_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
    )
    daily_log_service = DailyLogService(
        InMemoryDailyLogRepository(default_calorie_goal=settings.default_calorie_goal),
        timezone_name=settings.timezone,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        daily_log_service=daily_log_service,
        flow_service=flow_service,
        auth_service=AuthService(identity_provider, offline=True),
        translation_service=translation_service,
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def auth_headers(identity_provider: InMemoryIdentityProvider) -> dict[str, str]:
    session = identity_provider.sign_up("cook@example.com", "correct-horse")
    return {"Authorization": f"Bearer {session.access_token}"}
