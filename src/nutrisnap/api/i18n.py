"""Language selection, translation catalogs and toast payloads."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, HTTPException, Request

from nutrisnap.domain.models import CamelModel
from nutrisnap.services.translation import Translator

if TYPE_CHECKING:
    from nutrisnap.containers import AppContainer

router = APIRouter(prefix="/i18n", tags=["i18n"])


class Toast(CamelModel):
    """User-facing notification."""

    title: str
    description: str


class CatalogResponse(CamelModel):
    language: str
    dir: str
    messages: dict


def get_translator(
    request: Request,
    x_language: str | None = Header(default=None),
    accept_language: str | None = Header(default=None),
) -> Translator:
    """Return a translator for the request language.

    ``X-Language`` wins over ``Accept-Language``; without either the
    configured default applies.
    """
    container: AppContainer = request.app.state.container
    return container.translation_service.translator(
        x_language or accept_language or ""
    )


def make_toast(
    translator: Translator, title_key: str, description_key: str, **values: object
) -> Toast:
    """Build a translated toast."""
    return Toast(
        title=translator.t(title_key, **values),
        description=translator.t(description_key, **values),
    )


def toast_error(  # noqa: PLR0913
    request: Request,
    status_code: int,
    translator: Translator,
    title_key: str,
    description_key: str,
    exc: Exception | None = None,
) -> HTTPException:
    """Return an HTTPException whose detail is a toast payload.

    In the local environment the description carries the exception for
    debugging.
    """
    toast = make_toast(translator, title_key, description_key)
    container: AppContainer = request.app.state.container
    description = toast.description
    if exc is not None and container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        description = f"{description} (debug: {detail})"
    return HTTPException(
        status_code=status_code,
        detail={"title": toast.title, "description": description},
    )


@router.get("/{language}", response_model=CatalogResponse)
async def translation_catalog(language: str, request: Request) -> CatalogResponse:
    """Return the message catalog and text direction for a language."""
    container: AppContainer = request.app.state.container
    service = container.translation_service
    resolved = service.resolve_language(language)
    return CatalogResponse(
        language=resolved,
        dir=service.direction(resolved),
        messages=service.catalog(resolved),
    )
