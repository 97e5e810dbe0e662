"""Authentication endpoints and the signed-in user dependency."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import EmailStr, Field, model_validator

from nutrisnap.api.i18n import Toast, get_translator, make_toast, toast_error
from nutrisnap.domain.models import AuthSession, CamelModel, UserRecord
from nutrisnap.services.auth import AuthError
from nutrisnap.services.translation import Translator

if TYPE_CHECKING:
    from nutrisnap.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_bearer = HTTPBearer(auto_error=False)


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> RegisterRequest:
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    session: AuthSession
    toast: Toast


class ProfileResponse(CamelModel):
    user: UserRecord
    offline_mode: bool


class ToastResponse(CamelModel):
    toast: Toast


async def _authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    translator: Translator,
) -> tuple[str, UserRecord]:
    container: AppContainer = request.app.state.container
    token = credentials.credentials if credentials else None
    user = None
    if token:
        user = await asyncio.to_thread(container.auth_service.current_user, token)
    if user is None:
        raise toast_error(
            request,
            status.HTTP_401_UNAUTHORIZED,
            translator,
            "auth.errors.unauthorized_title",
            "auth.errors.unauthorized_description",
        )
    return token, user


async def require_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    translator: Translator = Depends(get_translator),
) -> str:
    """Return the bearer token of a signed-in user or reject with 401."""
    token, _ = await _authenticate(request, credentials, translator)
    return token


async def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    translator: Translator = Depends(get_translator),
) -> UserRecord:
    """Return the signed-in user or reject with 401."""
    _, user = await _authenticate(request, credentials, translator)
    return user


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest,
    request: Request,
    translator: Translator = Depends(get_translator),
) -> AuthResponse:
    """Create an account with the identity provider."""
    container: AppContainer = request.app.state.container
    try:
        session = await asyncio.to_thread(
            container.auth_service.sign_up,
            payload.email,
            payload.password,
            display_name=payload.name,
        )
    except AuthError as exc:
        logger.info("Sign up rejected", extra={"reason": type(exc).__name__})
        raise toast_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            translator,
            "register.toast.error_title",
            exc.message_key,
        ) from exc
    return AuthResponse(
        session=session,
        toast=make_toast(
            translator,
            "register.toast.success_title",
            "register.toast.success_description",
        ),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    translator: Translator = Depends(get_translator),
) -> AuthResponse:
    """Sign in with email and password."""
    container: AppContainer = request.app.state.container
    try:
        session = await asyncio.to_thread(
            container.auth_service.sign_in, payload.email, payload.password
        )
    except AuthError as exc:
        logger.info("Sign in rejected", extra={"reason": type(exc).__name__})
        raise toast_error(
            request,
            status.HTTP_401_UNAUTHORIZED,
            translator,
            "login.toast.error_title",
            "login.toast.error_description",
        ) from exc
    return AuthResponse(
        session=session,
        toast=make_toast(
            translator, "login.toast.success_title", "login.toast.success_description"
        ),
    )


@router.post("/logout", response_model=ToastResponse)
async def logout(
    request: Request,
    token: str = Depends(require_token),
    translator: Translator = Depends(get_translator),
) -> ToastResponse:
    """Revoke the current session."""
    container: AppContainer = request.app.state.container
    try:
        await asyncio.to_thread(container.auth_service.sign_out, token)
    except AuthError as exc:
        logger.exception("Logout failed")
        raise toast_error(
            request,
            status.HTTP_400_BAD_REQUEST,
            translator,
            "profile.toast.logout_error_title",
            "profile.toast.logout_error_description",
            exc,
        ) from exc
    return ToastResponse(
        toast=make_toast(
            translator,
            "profile.toast.logout_success_title",
            "profile.toast.logout_success_description",
        )
    )


@router.get("/me", response_model=ProfileResponse)
async def profile(
    request: Request, user: UserRecord = Depends(require_user)
) -> ProfileResponse:
    """Return the signed-in user's profile."""
    container: AppContainer = request.app.state.container
    return ProfileResponse(user=user, offline_mode=container.auth_service.offline)
