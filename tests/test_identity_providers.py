"""Tests for identity provider adapters."""

from dataclasses import dataclass, field
from datetime import timedelta
from types import SimpleNamespace

import pytest
from supabase import AuthApiError

from nutrisnap.adapters.in_memory_identity_provider import InMemoryIdentityProvider
from nutrisnap.adapters.supabase_identity_provider import SupabaseIdentityProvider
from nutrisnap.services.auth import (
    AuthError,
    EmailAlreadyInUseError,
    InvalidCredentialsError,
    WeakPasswordError,
)


def _auth_response(uid: str = "uid-1", token: str | None = "jwt-1"):
    user = SimpleNamespace(id=uid, email="cook@example.com")
    session = SimpleNamespace(access_token=token) if token else None
    return SimpleNamespace(user=user, session=session)


@dataclass
class FakeAdminAuth:
    signed_out: list[str] = field(default_factory=list)

    def sign_out(self, jwt: str) -> None:
        self.signed_out.append(jwt)


@dataclass
class FakeAuth:
    error: Exception | None = None
    response: object = field(default_factory=_auth_response)
    admin: FakeAdminAuth = field(default_factory=FakeAdminAuth)
    last_credentials: dict[str, object] | None = None

    def _respond(self, credentials: dict[str, object]) -> object:
        self.last_credentials = credentials
        if self.error is not None:
            raise self.error
        return self.response

    def sign_up(self, credentials: dict[str, object]) -> object:
        return self._respond(credentials)

    def sign_in_with_password(self, credentials: dict[str, object]) -> object:
        return self._respond(credentials)

    def get_user(self, jwt: str) -> object:
        if self.error is not None:
            raise self.error
        return self.response


@dataclass
class FakeSupabaseClient:
    auth: FakeAuth = field(default_factory=FakeAuth)


def test_supabase_sign_up_passes_display_name() -> None:
    fake = FakeSupabaseClient()
    provider = SupabaseIdentityProvider(client=fake)

    session = provider.sign_up("cook@example.com", "password1", display_name="Lina")

    assert session.access_token == "jwt-1"
    assert session.user.uid == "uid-1"
    assert fake.auth.last_credentials == {
        "email": "cook@example.com",
        "password": "password1",
        "options": {"data": {"name": "Lina"}},
    }


def test_supabase_sign_up_without_session_awaits_confirmation() -> None:
    fake = FakeSupabaseClient(auth=FakeAuth(response=_auth_response(token=None)))
    provider = SupabaseIdentityProvider(client=fake)

    session = provider.sign_up("cook@example.com", "password1")

    assert session.access_token is None


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("user_already_exists", EmailAlreadyInUseError),
        ("weak_password", WeakPasswordError),
        ("unexpected_failure", AuthError),
    ],
)
def test_supabase_sign_up_maps_error_codes(code: str, expected: type) -> None:
    error = AuthApiError("Request rejected", 422, code)
    provider = SupabaseIdentityProvider(
        client=FakeSupabaseClient(auth=FakeAuth(error=error))
    )

    with pytest.raises(expected):
        provider.sign_up("cook@example.com", "password1")


def test_supabase_sign_in_failure_is_invalid_credentials() -> None:
    error = AuthApiError("Invalid login credentials", 400, "invalid_credentials")
    provider = SupabaseIdentityProvider(
        client=FakeSupabaseClient(auth=FakeAuth(error=error))
    )

    with pytest.raises(InvalidCredentialsError):
        provider.sign_in("cook@example.com", "wrong")


def test_supabase_get_user_and_sign_out() -> None:
    fake = FakeSupabaseClient()
    provider = SupabaseIdentityProvider(client=fake)

    user = provider.get_user("jwt-1")
    provider.sign_out("jwt-1")

    assert user is not None
    assert user.email == "cook@example.com"
    assert fake.auth.admin.signed_out == ["jwt-1"]


def test_supabase_get_user_rejected_token_returns_none() -> None:
    error = AuthApiError("invalid JWT", 401, "bad_jwt")
    provider = SupabaseIdentityProvider(
        client=FakeSupabaseClient(auth=FakeAuth(error=error))
    )

    assert provider.get_user("expired") is None


def test_in_memory_provider_lifecycle() -> None:
    provider = InMemoryIdentityProvider()

    created = provider.sign_up("cook@example.com", "password1")
    signed_in = provider.sign_in("cook@example.com", "password1")

    assert created.user.uid == signed_in.user.uid
    assert provider.get_user(signed_in.access_token) == signed_in.user

    provider.sign_out(signed_in.access_token)

    assert provider.get_user(signed_in.access_token) is None
    assert provider.get_user(created.access_token) is not None


def test_in_memory_provider_errors() -> None:
    provider = InMemoryIdentityProvider()
    provider.sign_up("cook@example.com", "password1")

    with pytest.raises(EmailAlreadyInUseError):
        provider.sign_up("cook@example.com", "password2")
    with pytest.raises(WeakPasswordError):
        provider.sign_up("new@example.com", "123")
    with pytest.raises(InvalidCredentialsError):
        provider.sign_in("cook@example.com", "wrong-password")
    with pytest.raises(InvalidCredentialsError):
        provider.sign_in("nobody@example.com", "password1")


def test_in_memory_provider_expires_sessions() -> None:
    provider = InMemoryIdentityProvider(session_ttl=timedelta(0))
    stale = provider.sign_up("cook@example.com", "password1")

    fresh = provider.sign_in("cook@example.com", "password1")

    assert stale.access_token not in provider.sessions
    assert list(provider.sessions) == [fresh.access_token]
    assert provider.get_user(fresh.access_token) is None
    assert provider.sessions == {}
