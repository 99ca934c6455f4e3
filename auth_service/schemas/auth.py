"""Request/response schemas for auth endpoints and token claims."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from auth_service.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from auth_service.models.user import Role

EMAIL_MAX_LEN = 255
NAME_MAX_LEN = 255

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _required(value: str, message: str, max_len: int) -> str:
    value = value.strip()
    if not value:
        raise ValueError(message)
    if len(value) > max_len:
        raise ValueError(f"must be at most {max_len} characters")
    return value


class RegisterRequest(BaseModel):
    """Registration body: {firstName, lastName, email, password}."""

    model_config = _CAMEL

    first_name: str = Field(default="", validate_default=True)
    last_name: str = Field(default="", validate_default=True)
    email: str = Field(default="", validate_default=True)
    password: str = Field(default="", validate_default=True)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _required(v, "Email is required", EMAIL_MAX_LEN)

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        return _required(v, "First Name is required", NAME_MAX_LEN)

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        return _required(v, "Last Name is required", NAME_MAX_LEN)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        # Not trimmed: whitespace is part of the secret.
        if len(v) < PASSWORD_MIN_LEN:
            raise ValueError(f"Password should be at least {PASSWORD_MIN_LEN} characters")
        if len(v) > PASSWORD_MAX_LEN:
            raise ValueError(f"Password should be at most {PASSWORD_MAX_LEN} characters")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(default="", validate_default=True)
    password: str = Field(default="", validate_default=True)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _required(v, "Email is required", EMAIL_MAX_LEN)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserIdResponse(BaseModel):
    """Body for register/login/refresh: just the user's id."""

    id: int


class SelfResponse(BaseModel):
    """User projection for GET /auth/self. Has no password field by construction."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AccessClaims(BaseModel):
    """Payload of an access token: subject (user id as string) and role."""

    sub: str
    role: Role


class RefreshClaims(AccessClaims):
    """Payload of a refresh token: access claims plus the persisted RefreshToken id."""

    id: str


class TokenPair(BaseModel):
    """Freshly signed access + refresh tokens for one login session."""

    access_token: str
    refresh_token: str
    refresh_token_id: int
