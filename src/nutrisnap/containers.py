"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrisnap.adapters.in_memory_daily_log_repository import (
    InMemoryDailyLogRepository,
)
from nutrisnap.adapters.in_memory_identity_provider import InMemoryIdentityProvider
from nutrisnap.adapters.openai_structured_client import OpenAIStructuredClient
from nutrisnap.adapters.supabase_identity_provider import SupabaseIdentityProvider
from nutrisnap.config import Settings, is_auth_configured
from nutrisnap.services.auth import AuthService
from nutrisnap.services.daily_log import DailyLogService
from nutrisnap.services.flows import FlowService
from nutrisnap.services.translation import TranslationService, load_catalogs

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    daily_log_service: DailyLogService
    flow_service: FlowService
    auth_service: AuthService
    translation_service: TranslationService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    openai_client = OpenAIStructuredClient.create(resolved_settings.openai_api_key)
    flow_service = FlowService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    daily_log_service = DailyLogService(
        InMemoryDailyLogRepository(
            default_calorie_goal=resolved_settings.default_calorie_goal
        ),
        timezone_name=resolved_settings.timezone,
    )
    auth_service = _build_auth_service(resolved_settings)
    translation_service = TranslationService(
        catalogs=load_catalogs(),
        default_language=resolved_settings.default_language,
        fallback_language=resolved_settings.fallback_language,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        daily_log_service=daily_log_service,
        flow_service=flow_service,
        auth_service=auth_service,
        translation_service=translation_service,
        close_resources=close_resources,
    )


def _build_auth_service(settings: Settings) -> AuthService:
    if is_auth_configured(settings):
        provider = SupabaseIdentityProvider.create(
            settings.supabase_url, settings.supabase_anon_key
        )
        return AuthService(provider)
    logger.warning(
        "Supabase credentials are not configured; using offline in-memory auth"
    )
    return AuthService(InMemoryIdentityProvider(), offline=True)
