"""Supabase Auth identity provider."""

import logging
from dataclasses import dataclass

from supabase import AuthApiError, Client, ClientOptions, create_client

from nutrisnap.domain.models import AuthSession, UserRecord
from nutrisnap.services.auth import (
    AuthError,
    EmailAlreadyInUseError,
    IdentityProvider,
    InvalidCredentialsError,
    WeakPasswordError,
)

logger = logging.getLogger(__name__)

_EMAIL_IN_USE_CODES = {"user_already_exists", "email_exists"}
_INVALID_CREDENTIAL_CODES = {"invalid_credentials", "email_not_confirmed"}


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider backed by Supabase Auth email/password accounts."""

    client: Client

    @classmethod
    def create(cls, url: str, key: str) -> "SupabaseIdentityProvider":
        """Create a provider with a client that does not keep its own session."""
        options = ClientOptions(persist_session=False, auto_refresh_token=False)
        return cls(client=create_client(url, key, options=options))

    def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        """Create an account with Supabase Auth."""
        credentials: dict[str, object] = {"email": email, "password": password}
        if display_name:
            credentials["options"] = {"data": {"name": display_name}}
        try:
            response = self.client.auth.sign_up(credentials)
        except AuthApiError as exc:
            raise _map_error(exc) from exc
        if response.user is None:
            raise AuthError("Supabase did not return a user on sign up")
        token = response.session.access_token if response.session else None
        return AuthSession(access_token=token, user=_to_user(response.user))

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError as exc:
            raise _map_error(exc, default=InvalidCredentialsError) from exc
        if response.session is None or response.user is None:
            raise InvalidCredentialsError("Supabase returned no session")
        return AuthSession(
            access_token=response.session.access_token,
            user=_to_user(response.user),
        )

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        try:
            self.client.auth.admin.sign_out(access_token)
        except AuthApiError as exc:
            raise _map_error(exc) from exc

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user for a token, or None if Supabase rejects it."""
        try:
            response = self.client.auth.get_user(access_token)
        except AuthApiError:
            logger.info("Rejected access token")
            return None
        if response is None or response.user is None:
            return None
        return _to_user(response.user)


def _to_user(user: object) -> UserRecord:
    return UserRecord(uid=str(user.id), email=getattr(user, "email", None))


def _map_error(
    exc: AuthApiError, default: type[AuthError] = AuthError
) -> AuthError:
    code = getattr(exc, "code", None)
    message = str(getattr(exc, "message", exc))
    if code in _EMAIL_IN_USE_CODES or "already registered" in message.lower():
        return EmailAlreadyInUseError(message)
    if code == "weak_password":
        return WeakPasswordError(message)
    if code in _INVALID_CREDENTIAL_CODES:
        return InvalidCredentialsError(message)
    return default(message)
