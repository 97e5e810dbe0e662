"""Shared domain models for NutriSnap."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )


class UserRecord(CamelModel):
    """Reference to a user owned by the identity provider."""

    model_config = ConfigDict(frozen=True)

    uid: str
    email: str | None = None


class AuthSession(CamelModel):
    """Session for a signed-in user; the token is None while email confirmation is pending."""

    model_config = ConfigDict(frozen=True)

    access_token: str | None
    user: UserRecord
