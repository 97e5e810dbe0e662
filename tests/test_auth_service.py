"""Tests for auth service."""

from nutrisnap.adapters.in_memory_identity_provider import InMemoryIdentityProvider
from nutrisnap.services.auth import AuthService


def test_sign_up_normalizes_email() -> None:
    service = AuthService(InMemoryIdentityProvider())

    session = service.sign_up("  Cook@Example.COM ", "password1")

    assert session.user.email == "cook@example.com"
    assert service.sign_in("cook@example.com", "password1").user == session.user


def test_current_user_requires_token() -> None:
    service = AuthService(InMemoryIdentityProvider())
    session = service.sign_up("cook@example.com", "password1")

    assert service.current_user(None) is None
    assert service.current_user("") is None
    assert service.current_user(session.access_token) == session.user


def test_sign_out_ends_session() -> None:
    service = AuthService(InMemoryIdentityProvider())
    session = service.sign_up("cook@example.com", "password1")

    service.sign_out(session.access_token)

    assert service.current_user(session.access_token) is None
