"""Offline identity provider used when no Supabase project is configured."""

import hashlib
import hmac
import secrets
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from nutrisnap.domain.models import AuthSession, UserRecord
from nutrisnap.services.auth import (
    EmailAlreadyInUseError,
    IdentityProvider,
    InvalidCredentialsError,
    WeakPasswordError,
)

MIN_PASSWORD_LENGTH = 6


@dataclass
class _Account:
    uid: str
    email: str
    salt: bytes
    password_hash: bytes
    display_name: str | None


@dataclass
class _Session:
    account: _Account
    expires_at: datetime


@dataclass
class InMemoryIdentityProvider(IdentityProvider):
    """Process-local accounts and tokens; nothing survives a restart.

    Tokens expire after ``session_ttl`` and expired ones are dropped whenever
    a new session is issued.
    """

    session_ttl: timedelta = timedelta(hours=1)
    accounts: dict[str, _Account] = field(default_factory=dict)
    sessions: dict[str, _Session] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def sign_up(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthSession:
        """Create an account and sign it in."""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPasswordError("Password should be at least 6 characters")
        with self._lock:
            if email in self.accounts:
                raise EmailAlreadyInUseError("User already registered")
            salt = secrets.token_bytes(16)
            account = _Account(
                uid=str(uuid4()),
                email=email,
                salt=salt,
                password_hash=_hash_password(password, salt),
                display_name=display_name,
            )
            self.accounts[email] = account
            return self._issue_session(account)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Check credentials and issue a token."""
        with self._lock:
            account = self.accounts.get(email)
            if account is None or not hmac.compare_digest(
                account.password_hash, _hash_password(password, account.salt)
            ):
                raise InvalidCredentialsError("Invalid login credentials")
            return self._issue_session(account)

    def sign_out(self, access_token: str) -> None:
        """Forget a token."""
        with self._lock:
            self.sessions.pop(access_token, None)

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the account behind a live token."""
        with self._lock:
            session = self.sessions.get(access_token)
            if session is None:
                return None
            if session.expires_at <= datetime.now(tz=UTC):
                del self.sessions[access_token]
                return None
            return UserRecord(uid=session.account.uid, email=session.account.email)

    def _issue_session(self, account: _Account) -> AuthSession:
        now = datetime.now(tz=UTC)
        expired = [
            token
            for token, session in self.sessions.items()
            if session.expires_at <= now
        ]
        for token in expired:
            del self.sessions[token]
        token = secrets.token_urlsafe(32)
        self.sessions[token] = _Session(
            account=account, expires_at=now + self.session_ttl
        )
        return AuthSession(
            access_token=token,
            user=UserRecord(uid=account.uid, email=account.email),
        )


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
