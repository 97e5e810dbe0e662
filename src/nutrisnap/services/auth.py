"""Authentication delegated to an external identity provider."""

import logging
from dataclasses import dataclass
from typing import Protocol

from nutrisnap.domain.models import AuthSession, UserRecord

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Identity provider rejected a request."""

    message_key = "register.errors.generic"


class EmailAlreadyInUseError(AuthError):
    message_key = "register.errors.email_in_use"


class WeakPasswordError(AuthError):
    message_key = "register.errors.weak_password"


class InvalidCredentialsError(AuthError):
    message_key = "login.toast.error_description"


class IdentityProvider(Protocol):
    """Interface for email/password identity providers."""

    def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        """Create an account and return its session."""

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Exchange credentials for a session."""

    def sign_out(self, access_token: str) -> None:
        """Revoke a session."""

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user behind a token, or None if it is not valid."""


@dataclass
class AuthService:
    """Application service for login, signup, logout and session lookups."""

    provider: IdentityProvider
    offline: bool = False

    def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        """Register a new account."""
        session = self.provider.sign_up(
            _normalize_email(email), password, display_name=display_name
        )
        logger.info("User signed up", extra={"uid": session.user.uid})
        return session

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign a user in."""
        session = self.provider.sign_in(_normalize_email(email), password)
        logger.info("User signed in", extra={"uid": session.user.uid})
        return session

    def sign_out(self, access_token: str) -> None:
        """Sign a user out."""
        self.provider.sign_out(access_token)

    def current_user(self, access_token: str | None) -> UserRecord | None:
        """Return the signed-in user for a bearer token."""
        if not access_token:
            return None
        return self.provider.get_user(access_token)


def _normalize_email(email: str) -> str:
    return email.strip().lower()
